"""
Scrape filters.

Every filter exposes ``matches(value) -> bool`` and accepts everything when
built from an empty list.
"""

from bosh_exporter.filters.base import Filter, split_list
from bosh_exporter.filters.collectors import (
    DEPLOYMENTS_COLLECTOR,
    JOBS_COLLECTOR,
    KNOWN_COLLECTORS,
    SERVICE_DISCOVERY_COLLECTOR,
    CollectorsFilter,
)
from bosh_exporter.filters.names import AZsFilter, DeploymentsFilter, NameSetFilter
from bosh_exporter.filters.regexp import RegexpFilter

__all__ = [
    "AZsFilter",
    "CollectorsFilter",
    "DEPLOYMENTS_COLLECTOR",
    "DeploymentsFilter",
    "Filter",
    "JOBS_COLLECTOR",
    "KNOWN_COLLECTORS",
    "NameSetFilter",
    "RegexpFilter",
    "SERVICE_DISCOVERY_COLLECTOR",
    "split_list",
]
