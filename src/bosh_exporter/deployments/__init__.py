"""Deployment snapshots and the fetcher that builds them."""

from bosh_exporter.deployments.fetcher import Fetcher
from bosh_exporter.deployments.models import (
    DeploymentInfo,
    DiskVitals,
    FetchResult,
    Instance,
    Process,
    Vitals,
)

__all__ = [
    "DeploymentInfo",
    "DiskVitals",
    "FetchResult",
    "Fetcher",
    "Instance",
    "Process",
    "Vitals",
]
