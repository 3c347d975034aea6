from __future__ import annotations

from typing import Iterable


class NameSetFilter:
    """Exact, case-sensitive membership; an empty set accepts everything."""

    def __init__(self, names: Iterable[str] | None = None) -> None:
        self._names = frozenset(names or ())

    @property
    def names(self) -> frozenset[str]:
        return self._names

    @property
    def enabled(self) -> bool:
        return bool(self._names)

    def matches(self, value: str) -> bool:
        if not self._names:
            return True
        return value in self._names

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self._names)!r})"


class DeploymentsFilter(NameSetFilter):
    """Selects deployments by name."""


class AZsFilter(NameSetFilter):
    """Selects job instances by availability zone."""
