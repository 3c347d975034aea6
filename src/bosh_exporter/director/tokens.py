"""
Renewable UAA token sources.

The director session shares one token source between all concurrent scrapes.
Reads are lock-free against the current token; renewal is single-flight, so
concurrent callers that find an expired token wait for one renewal instead of
each starting their own.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Generator

import httpx
import structlog

from bosh_exporter.logging import DIRECTOR_LOGGER

if TYPE_CHECKING:
    from bosh_exporter.director.uaa import UAAClient

logger = structlog.get_logger(DIRECTOR_LOGGER)

# Tokens count as expired this many seconds before their advertised expiry.
EXPIRY_LEEWAY_SECONDS = 30.0


@dataclass(frozen=True)
class AccessToken:
    value: str
    token_type: str = "bearer"
    refresh_token: str | None = None
    expires_at: float | None = None

    @classmethod
    def from_response(cls, payload: dict[str, Any], now: float) -> AccessToken:
        expires_in = payload.get("expires_in")
        return cls(
            value=payload["access_token"],
            token_type=payload.get("token_type") or "bearer",
            refresh_token=payload.get("refresh_token"),
            expires_at=now + float(expires_in) if expires_in is not None else None,
        )

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.value}"

    def expired(self, now: float, leeway: float = EXPIRY_LEEWAY_SECONDS) -> bool:
        if not self.value:
            return True
        if self.expires_at is None:
            return False
        return now >= self.expires_at - leeway


class RenewableTokenSource(ABC):
    """Token source that renews its token at most once at a time."""

    def __init__(
        self,
        initial: AccessToken | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._token = initial
        self._clock = clock
        self._lock = threading.Lock()
        self.renewals = 0

    def token(self) -> AccessToken:
        current = self._token
        if current is not None and not current.expired(self._clock()):
            return current

        with self._lock:
            current = self._token
            if current is None or current.expired(self._clock()):
                logger.debug("uaa_token_renewing", source=type(self).__name__)
                current = self._renew(current)
                self._token = current
                self.renewals += 1
        return current

    def invalidate(self, token: AccessToken) -> None:
        """Force renewal if ``token`` is still the current one.

        Callers that saw a 401 for an already replaced token do nothing, so
        a burst of rejected requests triggers a single renewal.
        """
        with self._lock:
            if self._token is token:
                self._token = replace(token, expires_at=0.0)

    @abstractmethod
    def _renew(self, previous: AccessToken | None) -> AccessToken:
        """Obtain a fresh token, given the current one if any."""


class ClientTokenSession(RenewableTokenSource):
    """Client credentials grant; a new grant is taken whenever the token expires."""

    def __init__(self, uaa: UAAClient, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._uaa = uaa

    def _renew(self, previous: AccessToken | None) -> AccessToken:
        return self._uaa.client_credentials_grant()


class AccessTokenSession(RenewableTokenSource):
    """Refresh token grant, seeded with a stale token holding only the refresh token."""

    def __init__(self, uaa: UAAClient, refresh_token: str, **kwargs: Any) -> None:
        super().__init__(AccessToken(value="", refresh_token=refresh_token), **kwargs)
        self._uaa = uaa

    def _renew(self, previous: AccessToken | None) -> AccessToken:
        assert previous is not None and previous.refresh_token
        renewed = self._uaa.refresh_token_grant(previous.refresh_token)
        if renewed.refresh_token is None:
            renewed = replace(renewed, refresh_token=previous.refresh_token)
        return renewed


class TokenAuth(httpx.Auth):
    """httpx auth flow attaching a bearer token, retrying once on 401."""

    def __init__(self, source: RenewableTokenSource) -> None:
        self._source = source

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._source.token()
        request.headers["Authorization"] = token.authorization
        response = yield request

        if response.status_code == 401:
            logger.info("director_token_rejected")
            self._source.invalidate(token)
            token = self._source.token()
            request.headers["Authorization"] = token.authorization
            yield request
