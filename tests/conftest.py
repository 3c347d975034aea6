"""Root test configuration."""

from __future__ import annotations

import json
import logging
from typing import Any

import pytest
import respx
import structlog
from httpx import Response

DIRECTOR_HOST = "director.example.com"
DIRECTOR_URL = f"https://{DIRECTOR_HOST}"
UAA_HOST = "uaa.example.com"
UAA_URL = f"https://{UAA_HOST}"


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def instance_payload(
    job: str = "nats",
    index: int = 0,
    az: str = "z1",
    ip: str = "10.0.0.1",
    processes: tuple[tuple[str, str], ...] = (("nats", "running"),),
    job_state: str = "running",
    vm_type: str = "small",
) -> dict[str, Any]:
    """A director full-format instance document."""
    return {
        "agent_id": f"agent-{job}-{index}",
        "job_name": job,
        "index": index,
        "id": f"{job}-id-{index}",
        "job_state": job_state,
        "bootstrap": index == 0,
        "ips": [ip],
        "az": az,
        "vm_cid": f"vm-{job}-{index}",
        "vm_type": vm_type,
        "resource_pool": "",
        "processes": [
            {
                "name": name,
                "state": state,
                "uptime": {"secs": 3600},
                "cpu": {"total": 0.5},
                "mem": {"kb": 2048, "percent": 1.5},
            }
            for name, state in processes
        ],
        "vitals": {
            "cpu": {"sys": "1.5", "user": "2.5", "wait": "0.1"},
            "mem": {"kb": "524288", "percent": "25"},
            "swap": {"kb": "0", "percent": "0"},
            "load": ["0.10", "0.20", "0.30"],
            "disk": {
                "system": {"percent": "40", "inode_percent": "10"},
                "ephemeral": {"percent": "5", "inode_percent": "1"},
            },
        },
        "resurrection_paused": False,
    }


class DirectorMock:
    """Registers director and UAA routes on a respx router."""

    url = DIRECTOR_URL
    uaa_url = UAA_URL

    def __init__(self, router: respx.MockRouter) -> None:
        self.router = router
        self._next_task = 1

    def info(
        self,
        auth_type: str = "basic",
        options: dict[str, Any] | None = None,
        name: str = "test-bosh",
        uuid: str = "uuid-1234",
    ) -> respx.Route:
        payload = {
            "name": name,
            "uuid": uuid,
            "version": "280.0.0",
            "user_authentication": {"type": auth_type, "options": options or {}},
        }
        return self.router.get(host=DIRECTOR_HOST, path="/info").mock(
            return_value=Response(200, json=payload)
        )

    def deployments(self, *names: str) -> respx.Route:
        payload = [
            {
                "name": name,
                "releases": [{"name": f"{name}-release", "version": "1.0"}],
                "stemcells": [{"name": "bosh-stemcell", "version": "621.1"}],
            }
            for name in names
        ]
        return self.router.get(host=DIRECTOR_HOST, path="/deployments").mock(
            return_value=Response(200, json=payload)
        )

    def instances(self, deployment: str, payloads: list[dict[str, Any]]) -> respx.Route:
        task_id = self._next_task
        self._next_task += 1
        route = self.router.get(host=DIRECTOR_HOST, path=f"/deployments/{deployment}/instances")
        route.mock(
            return_value=Response(302, headers={"Location": f"{DIRECTOR_URL}/tasks/{task_id}"})
        )
        self.router.get(host=DIRECTOR_HOST, path=f"/tasks/{task_id}").mock(
            return_value=Response(200, json={"id": task_id, "state": "done"})
        )
        body = "\n".join(json.dumps(payload) for payload in payloads) + "\n"
        self.router.get(host=DIRECTOR_HOST, path=f"/tasks/{task_id}/output").mock(
            return_value=Response(200, text=body)
        )
        return route

    def token(self, side_effect: Any = None, **payload: Any) -> respx.Route:
        route = self.router.post(host=UAA_HOST, path="/oauth/token")
        if side_effect is not None:
            return route.mock(side_effect=side_effect)
        body = {"access_token": "token-1", "token_type": "bearer", "expires_in": 3600}
        body.update(payload)
        return route.mock(return_value=Response(200, json=body))


@pytest.fixture
def director():
    with respx.mock(assert_all_called=False) as router:
        yield DirectorMock(router)


@pytest.fixture
def ca_cert_file(tmp_path):
    path = tmp_path / "ca.pem"
    path.write_text("")
    return path


@pytest.fixture
def make_instance():
    return instance_payload
