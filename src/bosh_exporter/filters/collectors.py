from __future__ import annotations

from typing import Iterable

from bosh_exporter.core.errors import ConfigError

DEPLOYMENTS_COLLECTOR = "Deployments"
JOBS_COLLECTOR = "Jobs"
SERVICE_DISCOVERY_COLLECTOR = "ServiceDiscovery"

KNOWN_COLLECTORS = (
    DEPLOYMENTS_COLLECTOR,
    JOBS_COLLECTOR,
    SERVICE_DISCOVERY_COLLECTOR,
)


class CollectorsFilter:
    """Enables a subset of the sub-collectors; an empty list enables all."""

    def __init__(self, names: Iterable[str] | None = None) -> None:
        selected = list(names or ())
        unknown = [name for name in selected if name not in KNOWN_COLLECTORS]
        if unknown:
            raise ConfigError(
                f"Collector filter `{unknown[0]}` is not supported",
                {"supported": ",".join(KNOWN_COLLECTORS)},
            )
        self._names = frozenset(selected)

    def matches(self, value: str) -> bool:
        if not self._names:
            return True
        return value in self._names

    def enabled(self) -> list[str]:
        """Enabled collectors in their canonical order."""
        return [name for name in KNOWN_COLLECTORS if self.matches(name)]
