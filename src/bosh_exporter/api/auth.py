from __future__ import annotations

import secrets

import structlog
from fastapi import HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

logger = structlog.get_logger()
security = HTTPBasic(auto_error=False, realm="metrics")


class BasicAuthValidator:
    """Validates HTTP basic credentials for the metrics endpoint."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username.encode()
        self._password = password.encode()

    def __call__(self, request: Request, credentials: HTTPBasicCredentials | None) -> None:
        if credentials is not None:
            username_ok = secrets.compare_digest(credentials.username.encode(), self._username)
            password_ok = secrets.compare_digest(credentials.password.encode(), self._password)
            if username_ok and password_ok:
                return

        logger.error(
            "invalid_http_auth",
            remote=request.client.host if request.client else None,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": 'Basic realm="metrics"'},
        )
