"""
Service discovery target groups.

Builds one target group per process name from the deployment snapshot and
writes the document so that readers never see a partial file.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Iterable, Sequence

import structlog

from bosh_exporter.core.errors import WriteError
from bosh_exporter.deployments.models import DeploymentInfo
from bosh_exporter.discovery.models import PROCESS_NAME_LABEL, TargetGroup
from bosh_exporter.filters.base import Filter

logger = structlog.get_logger()


def build_target_groups(
    deployments: Iterable[DeploymentInfo],
    processes_filter: Filter,
    port: int | None = None,
) -> list[TargetGroup]:
    """
    Group instance addresses by the processes they run.

    Args:
        deployments: Deployment snapshot
        processes_filter: Only processes whose name matches are listed
        port: Optional port appended to every address

    Returns:
        Target groups sorted by process name, with sorted targets
    """
    hosts: dict[str, set[str]] = defaultdict(set)
    for deployment in deployments:
        for instance in deployment.instances:
            for process in instance.processes:
                if not processes_filter.matches(process.name):
                    continue
                for ip in instance.ips:
                    hosts[process.name].add(f"{ip}:{port}" if port else ip)

    return [
        TargetGroup(targets=sorted(hosts[name]), labels={PROCESS_NAME_LABEL: name})
        for name in sorted(hosts)
    ]


def write_target_groups(groups: Sequence[TargetGroup], path: str | os.PathLike[str]) -> None:
    """
    Atomically replace ``path`` with the JSON document for ``groups``.

    The document is written to a temporary file in the same directory and
    renamed over the destination.

    Raises:
        WriteError: If the file cannot be written
    """
    destination = Path(path)
    payload = json.dumps([group.model_dump() for group in groups], indent=2) + "\n"

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, destination)
    except OSError as exc:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
        raise WriteError(
            f"Error writing service discovery file: {exc}",
            path=str(destination),
        ) from exc

    logger.debug("service_discovery_written", path=str(destination), groups=len(groups))
