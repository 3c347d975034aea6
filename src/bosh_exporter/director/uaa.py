"""
UAA client.

Implements the three OAuth2 grants the exporter needs against the
``/oauth/token`` endpoint of a UAA server.
"""

from __future__ import annotations

import time
from typing import Any

import structlog

from bosh_exporter.director.http import BaseHTTPClient, PermanentHTTPError
from bosh_exporter.director.tokens import AccessToken
from bosh_exporter.logging import DIRECTOR_LOGGER

logger = structlog.get_logger(DIRECTOR_LOGGER)

TOKEN_PATH = "/oauth/token"


class UAAClient(BaseHTTPClient):
    """Token endpoint client for a UAA server."""

    def __init__(
        self,
        url: str,
        client_id: str,
        client_secret: str = "",
        *,
        ca_cert: str = "",
        timeout: float = 30.0,
    ) -> None:
        super().__init__(url, ca_cert=ca_cert, timeout=timeout)
        self.client_id = client_id
        self._client_secret = client_secret

    def client_credentials_grant(self) -> AccessToken:
        return self._grant({"grant_type": "client_credentials"})

    def owner_password_grant(self, username: str, password: str) -> AccessToken:
        return self._grant(
            {
                "grant_type": "password",
                "username": username,
                "password": password,
            }
        )

    def refresh_token_grant(self, refresh_token: str) -> AccessToken:
        return self._grant({"grant_type": "refresh_token", "refresh_token": refresh_token})

    def _grant(self, form: dict[str, Any]) -> AccessToken:
        logger.debug("uaa_token_request", grant_type=form["grant_type"], client=self.client_id)
        response = self._request(
            "POST",
            TOKEN_PATH,
            data=form,
            auth=(self.client_id, self._client_secret),
        )
        try:
            payload = response.json()
            return AccessToken.from_response(payload, now=time.time())
        except (ValueError, KeyError, TypeError) as exc:
            raise PermanentHTTPError(f"Invalid token response from UAA: {exc}") from exc
