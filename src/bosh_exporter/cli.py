"""
Exporter entry point.

Usage:
    bosh_exporter --bosh.url=https://10.0.0.6:25555 --bosh.ca-cert-file=ca.pem \\
        --metrics.environment=prod [options]

Every flag can also be set through its ``BOSH_EXPORTER_*`` environment
variable; see ``bosh_exporter --help``.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Sequence

import structlog
import uvicorn
from prometheus_client import Info, PlatformCollector, ProcessCollector
from prometheus_client.registry import CollectorRegistry

from bosh_exporter import __version__
from bosh_exporter.api import create_app
from bosh_exporter.collectors import BoshCollector
from bosh_exporter.config import Settings, load_settings
from bosh_exporter.core.errors import AuthError, ExitCode, main_with_error_handling
from bosh_exporter.deployments import Fetcher
from bosh_exporter.director import DirectorClient, DirectorInfo, HTTPClientError
from bosh_exporter.filters import (
    AZsFilter,
    CollectorsFilter,
    DeploymentsFilter,
    RegexpFilter,
    split_list,
)
from bosh_exporter.logging import configure_logging
from bosh_exporter.session import read_ca_cert, resolve_session

logger = structlog.get_logger()


@dataclass
class Exporter:
    """Everything built at startup, before the listener starts."""

    client: DirectorClient
    info: DirectorInfo
    collector: BoshCollector
    registry: CollectorRegistry


def build_exporter(settings: Settings) -> Exporter:
    """
    Authenticate against the director and assemble the collector.

    Raises:
        ConfigError: For invalid filters, regexps or CA certificate
        AuthError: If the director or UAA cannot be used
    """
    # Filters are validated before touching the network.
    deployments_filter = DeploymentsFilter(split_list(settings.filter_deployments))
    azs_filter = AZsFilter(split_list(settings.filter_azs))
    collectors_filter = CollectorsFilter(split_list(settings.filter_collectors))
    processes_patterns = [settings.sd_processes_regexp] if settings.sd_processes_regexp else []
    processes_filter = RegexpFilter(processes_patterns)

    client = resolve_session(
        settings.bosh_url,
        settings.bosh_username,
        settings.bosh_password,
        settings.bosh_uaa_client_id,
        settings.bosh_uaa_client_secret,
        read_ca_cert(settings.bosh_ca_cert_file),
        default_client_id=settings.bosh_uaa_default_client_id,
        timeout=settings.bosh_timeout,
    )

    try:
        info = client.info()
    except HTTPClientError as exc:
        client.close()
        raise AuthError(f"Error reading BOSH Info: {exc}") from exc
    logger.info("using_bosh_director", name=info.name, uuid=info.uuid, version=info.version)

    collector = BoshCollector(
        settings.metrics_namespace,
        settings.metrics_environment,
        info.name,
        info.uuid,
        settings.sd_filename,
        Fetcher(client, deployments_filter, azs_filter),
        collectors_filter,
        processes_filter,
        sd_port=settings.sd_port,
    )

    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    Info(
        f"{settings.metrics_namespace}_exporter_build",
        "A metric with a constant '1' value labeled by version and pythonversion "
        "from which bosh_exporter was built.",
        registry=registry,
    ).info({"version": __version__, "pythonversion": platform.python_version()})
    registry.register(collector)

    return Exporter(client=client, info=info, collector=collector, registry=registry)


def serve(settings: Settings, registry: CollectorRegistry) -> None:
    app = create_app(
        registry,
        metrics_path=settings.web_telemetry_path,
        auth_username=settings.web_auth_username,
        auth_password=settings.web_auth_password,
    )
    host, port = settings.listen_host_port()

    tls: dict[str, str] = {}
    if settings.tls_enabled:
        assert settings.web_tls_certfile and settings.web_tls_keyfile
        tls = {
            "ssl_certfile": settings.web_tls_certfile,
            "ssl_keyfile": settings.web_tls_keyfile,
        }

    logger.info("listening", address=settings.web_listen_address, tls=bool(tls))
    uvicorn.run(app, host=host, port=port, log_config=None, access_log=False, **tls)


@main_with_error_handling()
def main(argv: Sequence[str] | None = None) -> int:
    settings = load_settings(argv)
    configure_logging(settings.log_level, settings.bosh_log_level)
    logger.info("starting_bosh_exporter", version=__version__)

    exporter = build_exporter(settings)
    try:
        serve(settings, exporter.registry)
    finally:
        exporter.client.close()
    return ExitCode.SUCCESS
