"""Core building blocks shared across the exporter."""

from bosh_exporter.core.errors import (
    AuthError,
    BoshExporterError,
    CollectError,
    ConfigError,
    ExitCode,
    FetchError,
    WriteError,
)

__all__ = [
    "AuthError",
    "BoshExporterError",
    "CollectError",
    "ConfigError",
    "ExitCode",
    "FetchError",
    "WriteError",
]
