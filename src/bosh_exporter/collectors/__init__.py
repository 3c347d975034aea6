"""Prometheus collectors turning deployment snapshots into metrics."""

from bosh_exporter.collectors.base import COMMON_LABELS, SubCollector
from bosh_exporter.collectors.bosh import BoshCollector
from bosh_exporter.collectors.deployments import DeploymentsCollector
from bosh_exporter.collectors.jobs import JobsCollector
from bosh_exporter.collectors.service_discovery import ServiceDiscoveryCollector

__all__ = [
    "BoshCollector",
    "COMMON_LABELS",
    "DeploymentsCollector",
    "JobsCollector",
    "ServiceDiscoveryCollector",
    "SubCollector",
]
