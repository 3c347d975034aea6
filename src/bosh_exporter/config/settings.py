"""
Exporter settings using Pydantic.

Provides environment-based configuration loading with BOSH_EXPORTER_ prefix.
Command line flags are merged on top by ``bosh_exporter.config.cli``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Exporter settings, built once at startup and never mutated."""

    # BOSH director
    bosh_url: str
    bosh_username: str = ""
    bosh_password: str = ""
    bosh_uaa_client_id: str = ""
    bosh_uaa_client_secret: str = ""
    bosh_uaa_default_client_id: str = "bosh_cli"
    bosh_log_level: str = "ERROR"
    bosh_ca_cert_file: str
    bosh_timeout: float = 30.0

    # Filters (comma separated)
    filter_deployments: str = ""
    filter_azs: str = ""
    filter_collectors: str = ""

    # Metrics
    metrics_namespace: str = "bosh"
    metrics_environment: str

    # Service discovery
    sd_filename: str = "bosh_target_groups.json"
    sd_processes_regexp: str = ""
    sd_port: int | None = None

    # Web
    web_listen_address: str = ":9190"
    web_telemetry_path: str = "/metrics"
    web_auth_username: str = ""
    web_auth_password: str = ""
    web_tls_certfile: str | None = None
    web_tls_keyfile: str | None = None

    # Exporter logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "BOSH_EXPORTER_"
        frozen = True

    @field_validator("bosh_ca_cert_file", "web_tls_certfile", "web_tls_keyfile")
    @classmethod
    def _existing_file(cls, value: str | None) -> str | None:
        if value and not Path(value).expanduser().is_file():
            raise ValueError(f"file does not exist: {value}")
        return value

    @field_validator("web_telemetry_path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("telemetry path must start with '/'")
        return value

    @field_validator("log_level", "bosh_log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("web_listen_address")
    @classmethod
    def _listen_address(cls, value: str) -> str:
        _, sep, port = value.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError("listen address must be [host]:port")
        return value

    @field_validator("sd_port")
    @classmethod
    def _valid_port(cls, value: int | None) -> int | None:
        if value is not None and not 0 < value < 65536:
            raise ValueError(f"invalid port: {value}")
        return value

    @property
    def tls_enabled(self) -> bool:
        return bool(self.web_tls_certfile and self.web_tls_keyfile)

    def listen_host_port(self) -> tuple[str, int]:
        """Split ``web_listen_address`` (``[host]:port``) for the server."""
        host, _, port = self.web_listen_address.rpartition(":")
        host = host.strip("[]") or "0.0.0.0"
        return host, int(port)
