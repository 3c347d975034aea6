from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bosh_exporter.core.errors import ConfigError


@dataclass(frozen=True)
class DirectorInfo:
    """Subset of the director ``/info`` document the exporter relies on."""

    name: str
    uuid: str
    version: str = ""
    auth_type: str = ""
    auth_options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> DirectorInfo:
        """
        Raises:
            ConfigError: If the advertised authentication block is malformed
        """
        auth = payload.get("user_authentication") or {}
        if not isinstance(auth, dict):
            raise ConfigError(f"Expected user_authentication to be an object, got {auth!r}")
        options = auth.get("options") or {}
        if not isinstance(options, dict):
            raise ConfigError(f"Expected auth options to be an object, got {options!r}")
        return cls(
            name=payload.get("name") or "",
            uuid=payload.get("uuid") or "",
            version=payload.get("version") or "",
            auth_type=str(auth.get("type") or ""),
            auth_options=dict(options),
        )


@dataclass(frozen=True)
class Release:
    name: str
    version: str


@dataclass(frozen=True)
class Stemcell:
    name: str
    version: str


@dataclass(frozen=True)
class DeploymentSummary:
    """An entry of the director ``/deployments`` listing."""

    name: str
    releases: tuple[Release, ...] = ()
    stemcells: tuple[Stemcell, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> DeploymentSummary:
        return cls(
            name=payload["name"],
            releases=tuple(
                Release(name=r.get("name", ""), version=str(r.get("version", "")))
                for r in payload.get("releases") or []
            ),
            stemcells=tuple(
                Stemcell(name=s.get("name", ""), version=str(s.get("version", "")))
                for s in payload.get("stemcells") or []
            ),
        )
