from __future__ import annotations

import ssl
from typing import Any

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bosh_exporter.core.errors import ConfigError
from bosh_exporter.logging import DIRECTOR_LOGGER

logger = structlog.get_logger(DIRECTOR_LOGGER)


class HTTPClientError(Exception):
    """Base class for director and UAA transport errors."""


class RetryableHTTPError(HTTPClientError):
    """HTTP errors that should be retried."""


class PermanentHTTPError(HTTPClientError):
    """HTTP errors that should not be retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


def build_verify(ca_cert: str) -> ssl.SSLContext | bool:
    """Build the TLS verification setting for a PEM CA certificate.

    An empty certificate falls back to the system trust store.
    """
    if not ca_cert:
        return True
    try:
        return ssl.create_default_context(cadata=ca_cert)
    except (ssl.SSLError, ValueError) as exc:
        raise ConfigError(f"Invalid CA certificate: {exc}") from exc


class BaseHTTPClient:
    """Base synchronous HTTP client with retry logic."""

    def __init__(
        self,
        base_url: str,
        *,
        ca_cert: str = "",
        auth: httpx.Auth | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = httpx.Client(
            base_url=self._base_url,
            auth=auth,
            timeout=timeout,
            verify=build_verify(ca_cert),
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BaseHTTPClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @retry(
        retry=retry_if_exception_type(RetryableHTTPError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        reraise=True,
    )
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
        allow_redirect: bool = False,
    ) -> httpx.Response:
        """Execute HTTP request with retry on transient failures."""
        extra: dict[str, Any] = {}
        if auth is not None:
            extra["auth"] = auth

        try:
            response = self._client.request(method, path, params=params, data=data, **extra)

            if is_retryable_status(response.status_code):
                logger.warning(
                    "http_retryable_error",
                    status=response.status_code,
                    method=method,
                    path=path,
                )
                raise RetryableHTTPError(f"HTTP {response.status_code}: {response.text}")

            if allow_redirect and response.is_redirect:
                return response

            response.raise_for_status()
            logger.debug("http_request", method=method, path=path, status=response.status_code)
            return response

        except httpx.HTTPStatusError as exc:
            logger.error(
                "http_permanent_error",
                status=exc.response.status_code,
                method=method,
                path=path,
                error=str(exc),
            )
            raise PermanentHTTPError(str(exc), status_code=exc.response.status_code) from exc
        except httpx.TransportError as exc:
            logger.warning("http_network_error", method=method, path=path, error=str(exc))
            raise RetryableHTTPError(str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.error("http_request_failed", method=method, path=path, error=str(exc))
            raise PermanentHTTPError(str(exc)) from exc

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        response = self._request("GET", path, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise PermanentHTTPError(f"Invalid JSON from {path}: {exc}") from exc
