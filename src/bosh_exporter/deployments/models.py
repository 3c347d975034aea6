"""
Deployment snapshot models.

A snapshot is built once per scrape from the director's full instance
documents and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bosh_exporter.core.errors import FetchError
from bosh_exporter.director.models import Release, Stemcell

RUNNING = "running"


def _float(value: Any) -> float | None:
    # Vitals come back as strings and are empty for instances without a VM.
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class DiskVitals:
    percent: float | None = None
    inode_percent: float | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> DiskVitals:
        payload = payload or {}
        return cls(
            percent=_float(payload.get("percent")),
            inode_percent=_float(payload.get("inode_percent")),
        )


@dataclass(frozen=True)
class Vitals:
    load: tuple[float | None, float | None, float | None] = (None, None, None)
    cpu_sys: float | None = None
    cpu_user: float | None = None
    cpu_wait: float | None = None
    mem_kb: float | None = None
    mem_percent: float | None = None
    swap_kb: float | None = None
    swap_percent: float | None = None
    system_disk: DiskVitals = field(default_factory=DiskVitals)
    ephemeral_disk: DiskVitals = field(default_factory=DiskVitals)
    persistent_disk: DiskVitals = field(default_factory=DiskVitals)

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> Vitals:
        payload = payload or {}
        cpu = payload.get("cpu") or {}
        mem = payload.get("mem") or {}
        swap = payload.get("swap") or {}
        disk = payload.get("disk") or {}
        load = [_float(value) for value in (payload.get("load") or [])][:3]
        load += [None] * (3 - len(load))
        return cls(
            load=(load[0], load[1], load[2]),
            cpu_sys=_float(cpu.get("sys")),
            cpu_user=_float(cpu.get("user")),
            cpu_wait=_float(cpu.get("wait")),
            mem_kb=_float(mem.get("kb")),
            mem_percent=_float(mem.get("percent")),
            swap_kb=_float(swap.get("kb")),
            swap_percent=_float(swap.get("percent")),
            system_disk=DiskVitals.from_payload(disk.get("system")),
            ephemeral_disk=DiskVitals.from_payload(disk.get("ephemeral")),
            persistent_disk=DiskVitals.from_payload(disk.get("persistent")),
        )


@dataclass(frozen=True)
class Process:
    name: str
    healthy: bool
    uptime_seconds: float | None = None
    cpu_total: float | None = None
    mem_kb: float | None = None
    mem_percent: float | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Process:
        return cls(
            name=payload.get("name") or "",
            healthy=payload.get("state") == RUNNING,
            uptime_seconds=_float((payload.get("uptime") or {}).get("secs")),
            cpu_total=_float((payload.get("cpu") or {}).get("total")),
            mem_kb=_float((payload.get("mem") or {}).get("kb")),
            mem_percent=_float((payload.get("mem") or {}).get("percent")),
        )


@dataclass(frozen=True)
class Instance:
    """A job instance (VM) of a deployment."""

    name: str
    id: str
    index: str
    az: str
    ips: tuple[str, ...] = ()
    bootstrap: bool = False
    healthy: bool = False
    vm_type: str = ""
    vitals: Vitals = field(default_factory=Vitals)
    processes: tuple[Process, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Instance:
        index = payload.get("index")
        return cls(
            name=payload.get("job_name") or "",
            id=payload.get("id") or "",
            index="" if index is None else str(index),
            az=payload.get("az") or "",
            ips=tuple(payload.get("ips") or ()),
            bootstrap=bool(payload.get("bootstrap")),
            healthy=payload.get("job_state") == RUNNING,
            vm_type=payload.get("vm_type") or payload.get("resource_pool") or "",
            vitals=Vitals.from_payload(payload.get("vitals")),
            processes=tuple(Process.from_payload(p) for p in payload.get("processes") or ()),
        )

    @property
    def ip(self) -> str:
        return self.ips[0] if self.ips else ""


@dataclass(frozen=True)
class DeploymentInfo:
    name: str
    releases: tuple[Release, ...] = ()
    stemcells: tuple[Stemcell, ...] = ()
    instances: tuple[Instance, ...] = ()


@dataclass(frozen=True)
class FetchResult:
    """Deployments fetched during one scrape, plus per-deployment failures."""

    deployments: tuple[DeploymentInfo, ...] = ()
    failures: tuple[FetchError, ...] = ()

    @property
    def partial(self) -> bool:
        return bool(self.failures)
