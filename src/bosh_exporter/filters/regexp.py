from __future__ import annotations

import re
from typing import Iterable

from bosh_exporter.core.errors import ConfigError


class RegexpFilter:
    """Matches values against any of a set of regular expressions.

    With no patterns every value matches. Patterns are unanchored, so
    ``nats`` matches ``nats_stream_forwarder``.
    """

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        compiled = []
        for pattern in patterns or ():
            try:
                compiled.append(re.compile(pattern))
            except re.error as exc:
                raise ConfigError(
                    f"Invalid regular expression `{pattern}`: {exc}",
                    {"pattern": pattern},
                ) from exc
        self._patterns = tuple(compiled)

    def matches(self, value: str) -> bool:
        if not self._patterns:
            return True
        return any(pattern.search(value) for pattern in self._patterns)
