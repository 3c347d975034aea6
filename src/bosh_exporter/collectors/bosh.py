"""
Top-level BOSH collector.

Registered with a ``prometheus_client`` registry; each scrape fetches a fresh
deployment snapshot and runs every enabled sub-collector against it. A failing
sub-collector is reported through ``<namespace>_up{collector=...}`` and never
blanks the metrics of the others.
"""

from __future__ import annotations

import threading
import time
from typing import Iterator

import structlog
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from bosh_exporter.collectors.base import COMMON_LABELS, SubCollector
from bosh_exporter.collectors.deployments import DeploymentsCollector
from bosh_exporter.collectors.jobs import JobsCollector
from bosh_exporter.collectors.service_discovery import ServiceDiscoveryCollector
from bosh_exporter.core.errors import CollectError, FetchError
from bosh_exporter.deployments.fetcher import Fetcher
from bosh_exporter.deployments.models import FetchResult
from bosh_exporter.filters import (
    DEPLOYMENTS_COLLECTOR,
    JOBS_COLLECTOR,
    SERVICE_DISCOVERY_COLLECTOR,
    CollectorsFilter,
)
from bosh_exporter.filters.base import Filter

logger = structlog.get_logger()


class BoshCollector(Collector):
    """Prometheus collector for a BOSH director."""

    def __init__(
        self,
        namespace: str,
        environment: str,
        bosh_name: str,
        bosh_uuid: str,
        sd_filename: str,
        fetcher: Fetcher,
        collectors_filter: CollectorsFilter,
        processes_filter: Filter,
        sd_port: int | None = None,
    ) -> None:
        self.namespace = namespace
        self.environment = environment
        self.bosh_name = bosh_name
        self.bosh_uuid = bosh_uuid
        self._fetcher = fetcher

        factories = {
            DEPLOYMENTS_COLLECTOR: lambda: DeploymentsCollector(
                namespace, environment, bosh_name, bosh_uuid
            ),
            JOBS_COLLECTOR: lambda: JobsCollector(namespace, environment, bosh_name, bosh_uuid),
            SERVICE_DISCOVERY_COLLECTOR: lambda: ServiceDiscoveryCollector(
                namespace,
                environment,
                bosh_name,
                bosh_uuid,
                sd_filename=sd_filename,
                processes_filter=processes_filter,
                sd_port=sd_port,
            ),
        }
        self.collectors: list[SubCollector] = [
            factories[name]() for name in collectors_filter.enabled()
        ]

        # Scrape counters are the only state shared between concurrent scrapes.
        self._lock = threading.Lock()
        self._scrapes = 0
        self._scrape_errors = 0

    @property
    def common_values(self) -> list[str]:
        return [self.environment, self.bosh_name, self.bosh_uuid]

    def describe(self) -> Iterator[Metric]:
        for collector in self.collectors:
            yield from collector.describe()
        yield from self._families().values()

    def collect(self) -> Iterator[Metric]:
        started = time.time()
        families = self._families()

        snapshot: FetchResult | None
        try:
            snapshot = self._fetcher.fetch()
        except FetchError as exc:
            logger.error("deployments_fetch_failed", error=exc.message)
            snapshot = None
        except Exception as exc:
            logger.error(
                "deployments_fetch_failed",
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            snapshot = None

        failed_collectors = 0
        for collector in self.collectors:
            metrics = self._run(collector, snapshot)
            if metrics is None:
                failed_collectors += 1
                families["up"].add_metric([*self.common_values, collector.name], 0)
                continue
            families["up"].add_metric([*self.common_values, collector.name], 1)
            yield from metrics

        fetch_errors = len(snapshot.failures) if snapshot is not None else 0
        scrape_error = snapshot is None or fetch_errors > 0 or failed_collectors > 0

        with self._lock:
            self._scrapes += 1
            if scrape_error:
                self._scrape_errors += 1
            scrapes, scrape_errors = self._scrapes, self._scrape_errors

        finished = time.time()
        common = self.common_values
        families["scrapes"].add_metric(common, scrapes)
        families["scrape_errors"].add_metric(common, scrape_errors)
        families["last_scrape_error"].add_metric(common, 1 if scrape_error else 0)
        families["last_scrape_timestamp"].add_metric(common, finished)
        families["last_scrape_duration"].add_metric(common, finished - started)
        families["fetch_errors"].add_metric(common, fetch_errors)
        yield from families.values()

    def _run(self, collector: SubCollector, snapshot: FetchResult | None) -> list[Metric] | None:
        if snapshot is None:
            return None
        try:
            return list(collector.collect(snapshot.deployments))
        except Exception as exc:
            error = CollectError(str(exc), collector=collector.name)
            logger.error(
                "collector_failed",
                collector=error.collector,
                error_type=type(exc).__name__,
                error=error.message,
                exc_info=True,
            )
            return None

    def _families(self) -> dict[str, Metric]:
        ns = self.namespace
        labels = list(COMMON_LABELS)
        return {
            "up": GaugeMetricFamily(
                f"{ns}_up",
                "Whether the last scrape of a BOSH collector succeeded (1) or failed (0).",
                labels=[*labels, "collector"],
            ),
            "scrapes": CounterMetricFamily(
                f"{ns}_scrapes_total",
                "Total number of scrapes for BOSH.",
                labels=labels,
            ),
            "scrape_errors": CounterMetricFamily(
                f"{ns}_scrape_errors_total",
                "Total number of scrapes errors for BOSH.",
                labels=labels,
            ),
            "last_scrape_error": GaugeMetricFamily(
                f"{ns}_last_scrape_error",
                "Whether the last scrape of metrics from BOSH resulted in an error "
                "(1 for error, 0 for success).",
                labels=labels,
            ),
            "last_scrape_timestamp": GaugeMetricFamily(
                f"{ns}_last_scrape_timestamp",
                "Number of seconds since 1970 since last scrape from BOSH.",
                labels=labels,
            ),
            "last_scrape_duration": GaugeMetricFamily(
                f"{ns}_last_scrape_duration_seconds",
                "Duration of the last scrape from BOSH.",
                labels=labels,
            ),
            "fetch_errors": GaugeMetricFamily(
                f"{ns}_deployment_fetch_errors",
                "Number of deployments whose details could not be fetched during the last scrape.",
                labels=labels,
            ),
        }
