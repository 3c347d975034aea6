from __future__ import annotations

from typing import Sequence

import structlog
from prometheus_client.core import GaugeMetricFamily

from bosh_exporter.collectors.base import SubCollector
from bosh_exporter.deployments.models import DeploymentInfo
from bosh_exporter.discovery import build_target_groups, write_target_groups
from bosh_exporter.filters import SERVICE_DISCOVERY_COLLECTOR
from bosh_exporter.filters.base import Filter

logger = structlog.get_logger()


class ServiceDiscoveryCollector(SubCollector):
    """Writes the Prometheus service discovery file as a scrape side effect."""

    name = SERVICE_DISCOVERY_COLLECTOR
    scrape_slug = "service_discovery"

    def __init__(
        self,
        namespace: str,
        environment: str,
        bosh_name: str,
        bosh_uuid: str,
        sd_filename: str,
        processes_filter: Filter,
        sd_port: int | None = None,
    ) -> None:
        super().__init__(namespace, environment, bosh_name, bosh_uuid)
        self.sd_filename = sd_filename
        self.processes_filter = processes_filter
        self.sd_port = sd_port

    def _families(self) -> dict[str, GaugeMetricFamily]:
        return {
            "target_groups": self._gauge(
                "service_discovery_target_groups",
                "Number of target groups written to the service discovery file.",
            ),
        }

    def _populate(
        self,
        families: dict[str, GaugeMetricFamily],
        deployments: Sequence[DeploymentInfo],
    ) -> None:
        groups = build_target_groups(deployments, self.processes_filter, port=self.sd_port)
        write_target_groups(groups, self.sd_filename)
        families["target_groups"].add_metric(self.common_values, len(groups))
