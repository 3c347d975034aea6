"""
BOSH director client.

Covers the read-only part of the director API used by the exporter:
``/info``, ``/deployments`` and the full instance listing, which the director
serves asynchronously through a task.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from bosh_exporter.core.errors import FetchError
from bosh_exporter.director.http import BaseHTTPClient, PermanentHTTPError
from bosh_exporter.director.models import DeploymentSummary, DirectorInfo
from bosh_exporter.logging import DIRECTOR_LOGGER

logger = structlog.get_logger(DIRECTOR_LOGGER)

TASK_ID_PATTERN = re.compile(r"/tasks/(\d+)")
TASK_RUNNING_STATES = frozenset({"queued", "processing"})


class TaskError(FetchError):
    """Raised when a director task fails or does not finish in time."""


class DirectorClient(BaseHTTPClient):
    """Synchronous client for a BOSH director."""

    def __init__(
        self,
        url: str,
        *,
        ca_cert: str = "",
        auth: httpx.Auth | None = None,
        timeout: float = 30.0,
        task_timeout: float | None = None,
        task_poll_interval: float = 0.5,
    ) -> None:
        super().__init__(url, ca_cert=ca_cert, auth=auth, timeout=timeout)
        self._task_timeout = task_timeout if task_timeout is not None else timeout
        self._task_poll_interval = task_poll_interval

    def info(self) -> DirectorInfo:
        payload = self._get_json("/info")
        if not isinstance(payload, dict):
            raise PermanentHTTPError("Unexpected /info response")
        return DirectorInfo.from_payload(payload)

    def deployments(self) -> list[DeploymentSummary]:
        payload = self._get_json("/deployments")
        if not isinstance(payload, list):
            raise PermanentHTTPError("Unexpected /deployments response")
        return [DeploymentSummary.from_payload(item) for item in payload]

    def instance_infos(self, deployment: str) -> list[dict[str, Any]]:
        """Return the full instance documents of a deployment.

        The director answers with a redirect to a task; the instance list is
        the task's result output, one JSON document per line.
        """
        response = self._request(
            "GET",
            f"/deployments/{quote(deployment, safe='')}/instances",
            params={"format": "full"},
            allow_redirect=True,
        )
        task_id = self._task_id(response, deployment)
        self._wait_for_task(task_id, deployment)

        output = self._request("GET", f"/tasks/{task_id}/output", params={"type": "result"})
        instances = []
        for line in output.text.splitlines():
            if not line.strip():
                continue
            try:
                instances.append(json.loads(line))
            except ValueError as exc:
                raise TaskError(
                    f"Invalid instance document in task {task_id}: {exc}",
                    deployment=deployment,
                ) from exc
        return instances

    def _task_id(self, response: httpx.Response, deployment: str) -> int:
        location = response.headers.get("Location", "")
        match = TASK_ID_PATTERN.search(location)
        if not response.is_redirect or match is None:
            raise TaskError(
                f"Director did not start an instances task (HTTP {response.status_code})",
                deployment=deployment,
            )
        return int(match.group(1))

    def _wait_for_task(self, task_id: int, deployment: str) -> None:
        deadline = time.monotonic() + self._task_timeout
        while True:
            task = self._get_json(f"/tasks/{task_id}")
            if not isinstance(task, dict):
                raise TaskError(f"Unexpected response for task {task_id}", deployment=deployment)
            state = task.get("state", "")
            if state == "done":
                return
            if state not in TASK_RUNNING_STATES:
                raise TaskError(
                    f"Task {task_id} finished in state '{state}': {task.get('result', '')}",
                    deployment=deployment,
                    details={"task_id": task_id},
                )
            if time.monotonic() >= deadline:
                raise TaskError(
                    f"Task {task_id} did not finish within {self._task_timeout}s",
                    deployment=deployment,
                    details={"task_id": task_id},
                )
            logger.debug("director_task_waiting", task_id=task_id, state=state)
            time.sleep(self._task_poll_interval)
