from __future__ import annotations

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.security import HTTPBasicCredentials
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_client.registry import CollectorRegistry

from bosh_exporter import __version__
from bosh_exporter.api.auth import BasicAuthValidator, security

LANDING_PAGE = """<html>
<head><title>BOSH Exporter</title></head>
<body>
<h1>BOSH Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


def create_app(
    registry: CollectorRegistry,
    *,
    metrics_path: str = "/metrics",
    auth_username: str = "",
    auth_password: str = "",
) -> FastAPI:
    """Build the exporter web app.

    Basic auth protects the metrics endpoint only when both username and
    password are configured.
    """
    app = FastAPI(
        title="BOSH Exporter",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    dependencies = []
    if auth_username and auth_password:
        validator = BasicAuthValidator(auth_username, auth_password)

        def require_auth(
            request: Request,
            credentials: HTTPBasicCredentials | None = Depends(security),  # noqa: B008
        ) -> None:
            validator(request, credentials)

        dependencies.append(Depends(require_auth))

    # Sync handler: each scrape runs in the server's thread pool.
    @app.get(metrics_path, dependencies=dependencies, include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @app.api_route(
        "/{path:path}",
        methods=["GET", "HEAD", "POST"],
        response_class=HTMLResponse,
        include_in_schema=False,
    )
    def landing(path: str) -> str:
        return LANDING_PAGE.format(metrics_path=metrics_path)

    return app
