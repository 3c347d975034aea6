"""
Command line flags for the exporter.

Every flag mirrors a ``Settings`` field and its ``BOSH_EXPORTER_*``
environment variable. Flags given on the command line take precedence over
the environment.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from pydantic import ValidationError

from bosh_exporter import __version__
from bosh_exporter.config.settings import Settings
from bosh_exporter.core.errors import ConfigError

# (flag, settings field, help, type)
FLAGS: list[tuple[str, str, str, type]] = [
    ("--bosh.url", "bosh_url", "BOSH URL", str),
    ("--bosh.username", "bosh_username", "BOSH Username", str),
    ("--bosh.password", "bosh_password", "BOSH Password", str),
    ("--bosh.uaa.client-id", "bosh_uaa_client_id", "BOSH UAA Client ID", str),
    ("--bosh.uaa.client-secret", "bosh_uaa_client_secret", "BOSH UAA Client Secret", str),
    (
        "--bosh.uaa.default-client-id",
        "bosh_uaa_default_client_id",
        "UAA client used for the password grant when no client credentials are set",
        str,
    ),
    ("--bosh.log-level", "bosh_log_level", "BOSH Log Level", str),
    ("--bosh.ca-cert-file", "bosh_ca_cert_file", "BOSH CA Certificate file", str),
    ("--bosh.timeout", "bosh_timeout", "Timeout in seconds for BOSH and UAA requests", float),
    ("--filter.deployments", "filter_deployments", "Comma separated deployments to filter", str),
    ("--filter.azs", "filter_azs", "Comma separated AZs to filter", str),
    (
        "--filter.collectors",
        "filter_collectors",
        "Comma separated collectors to filter (Deployments,Jobs,ServiceDiscovery)",
        str,
    ),
    ("--metrics.namespace", "metrics_namespace", "Metrics Namespace", str),
    (
        "--metrics.environment",
        "metrics_environment",
        "Environment label to be attached to metrics",
        str,
    ),
    ("--sd.filename", "sd_filename", "Full path to the Service Discovery output file", str),
    (
        "--sd.processes_regexp",
        "sd_processes_regexp",
        "Regexp to filter Service Discovery processes names",
        str,
    ),
    ("--sd.port", "sd_port", "Port appended to Service Discovery targets", int),
    (
        "--web.listen-address",
        "web_listen_address",
        "Address to listen on for web interface and telemetry",
        str,
    ),
    (
        "--web.telemetry-path",
        "web_telemetry_path",
        "Path under which to expose Prometheus metrics",
        str,
    ),
    ("--web.auth.username", "web_auth_username", "Username for web interface basic auth", str),
    ("--web.auth.password", "web_auth_password", "Password for web interface basic auth", str),
    (
        "--web.tls.cert_file",
        "web_tls_certfile",
        "Path to a file that contains the TLS certificate (PEM format)",
        str,
    ),
    (
        "--web.tls.key_file",
        "web_tls_keyfile",
        "Path to a file that contains the TLS private key (PEM format)",
        str,
    ),
    ("--log.level", "log_level", "Exporter log level", str),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bosh_exporter",
        description="Prometheus exporter for BOSH directors",
    )
    parser.add_argument("--version", action="version", version=f"bosh_exporter {__version__}")
    for flag, field_name, help_text, flag_type in FLAGS:
        env_var = f"BOSH_EXPORTER_{field_name.upper()}"
        parser.add_argument(
            flag,
            dest=field_name,
            type=flag_type,
            default=None,
            help=f"{help_text} (${env_var})",
        )
    return parser


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    """Parse flags and merge them over the environment.

    Raises:
        ConfigError: If a required option is missing or a value is invalid
    """
    args = build_parser().parse_args(argv)
    overrides = {key: value for key, value in vars(args).items() if value is not None}

    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
