from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Iterator, Sequence

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from bosh_exporter.deployments.models import DeploymentInfo

COMMON_LABELS = ("environment", "bosh_name", "bosh_uuid")


class SubCollector(ABC):
    """
    A named group of metrics derived from one deployment snapshot.

    Subclasses declare their metric families in ``_families`` and fill them in
    ``_populate``. Families are rebuilt on every call so concurrent scrapes
    never share samples.
    """

    name: str = ""
    scrape_slug: str = ""

    def __init__(
        self,
        namespace: str,
        environment: str,
        bosh_name: str,
        bosh_uuid: str,
    ) -> None:
        self.namespace = namespace
        self.environment = environment
        self.bosh_name = bosh_name
        self.bosh_uuid = bosh_uuid

    @property
    def common_values(self) -> list[str]:
        return [self.environment, self.bosh_name, self.bosh_uuid]

    def describe(self) -> Iterator[Metric]:
        yield from self._families().values()
        yield from self._timing_families().values()

    def collect(self, deployments: Sequence[DeploymentInfo]) -> Iterator[Metric]:
        started = time.time()
        families = self._families()
        self._populate(families, deployments)

        timing = self._timing_families()
        finished = time.time()
        timing["timestamp"].add_metric(self.common_values, finished)
        timing["duration"].add_metric(self.common_values, finished - started)

        yield from families.values()
        yield from timing.values()

    def _families(self) -> dict[str, GaugeMetricFamily]:
        return {}

    @abstractmethod
    def _populate(
        self,
        families: dict[str, GaugeMetricFamily],
        deployments: Sequence[DeploymentInfo],
    ) -> None:
        """Add this collector's samples for ``deployments`` to ``families``."""

    def _gauge(
        self,
        name: str,
        documentation: str,
        labels: Sequence[str] = (),
    ) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            f"{self.namespace}_{name}",
            documentation,
            labels=[*COMMON_LABELS, *labels],
        )

    def _timing_families(self) -> dict[str, GaugeMetricFamily]:
        return {
            "timestamp": self._gauge(
                f"last_{self.scrape_slug}_scrape_timestamp",
                f"Number of seconds since 1970 since last scrape of {self.name} metrics from BOSH.",
            ),
            "duration": self._gauge(
                f"last_{self.scrape_slug}_scrape_duration_seconds",
                f"Duration of the last scrape of {self.name} metrics from BOSH.",
            ),
        }
