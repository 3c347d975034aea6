from __future__ import annotations

from typing import Protocol


class Filter(Protocol):
    """A pure predicate over a single string value."""

    def matches(self, value: str) -> bool:
        ...


def split_list(value: str | None) -> list[str]:
    """Split a comma separated flag value, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
