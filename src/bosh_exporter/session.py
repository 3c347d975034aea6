"""
Director session resolution.

Probes the director anonymously to learn which authentication mode it
advertises, then builds an authenticated ``DirectorClient``:

- basic mode: the static username/password are sent on every request
- UAA mode with client id and secret: client credentials grant
- UAA mode without them: resource owner password grant on a public client,
  renewed through the refresh token
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx
import structlog

from bosh_exporter.core.errors import AuthError, ConfigError
from bosh_exporter.director.client import DirectorClient
from bosh_exporter.director.http import HTTPClientError
from bosh_exporter.director.tokens import (
    AccessTokenSession,
    ClientTokenSession,
    RenewableTokenSource,
    TokenAuth,
)
from bosh_exporter.director.uaa import UAAClient

logger = structlog.get_logger()

UAA_AUTH_TYPE = "uaa"
DEFAULT_UAA_CLIENT_ID = "bosh_cli"


@dataclass(frozen=True)
class BasicAuthCredentials:
    client: str
    client_secret: str


@dataclass(frozen=True)
class UAAGrantCredentials:
    client: str
    client_secret: str = ""
    username: str = ""
    password: str = ""

    @property
    def uses_client_credentials(self) -> bool:
        return bool(self.client_secret) and not self.username


Credentials = BasicAuthCredentials | UAAGrantCredentials


def read_ca_cert(path: str) -> str:
    """Read a PEM CA certificate; an empty path means system trust."""
    if not path:
        return ""
    try:
        return Path(path).expanduser().read_text()
    except OSError as exc:
        raise ConfigError(f"Cannot read CA certificate file: {exc}", {"path": path}) from exc


def select_credentials(
    auth_type: str,
    username: str,
    password: str,
    uaa_client_id: str,
    uaa_client_secret: str,
    default_client_id: str = DEFAULT_UAA_CLIENT_ID,
) -> Credentials:
    """Pick the credential variant for the director's advertised auth mode."""
    if auth_type != UAA_AUTH_TYPE:
        return BasicAuthCredentials(client=username, client_secret=password)
    if uaa_client_id and uaa_client_secret:
        return UAAGrantCredentials(client=uaa_client_id, client_secret=uaa_client_secret)
    return UAAGrantCredentials(client=default_client_id, username=username, password=password)


def resolve_session(
    director_url: str,
    username: str,
    password: str,
    uaa_client_id: str,
    uaa_client_secret: str,
    ca_cert: str,
    *,
    default_client_id: str = DEFAULT_UAA_CLIENT_ID,
    timeout: float = 30.0,
) -> DirectorClient:
    """Build an authenticated director client.

    Raises:
        ConfigError: If the director advertises malformed UAA options
        AuthError: If the director or UAA cannot be reached or reject the grant
    """
    with DirectorClient(director_url, ca_cert=ca_cert, timeout=timeout) as anonymous:
        try:
            info = anonymous.info()
        except HTTPClientError as exc:
            raise AuthError(f"Cannot read director info: {exc}", {"url": director_url}) from exc

    credentials = select_credentials(
        info.auth_type,
        username,
        password,
        uaa_client_id,
        uaa_client_secret,
        default_client_id=default_client_id,
    )

    auth: httpx.Auth
    if isinstance(credentials, BasicAuthCredentials):
        logger.info("director_auth_basic", director=info.name)
        auth = httpx.BasicAuth(credentials.client, credentials.client_secret)
    else:
        uaa_url = info.auth_options.get("url")
        if not isinstance(uaa_url, str) or not uaa_url:
            raise ConfigError(f"Expected UAA URL '{uaa_url}' to be a string")
        auth = TokenAuth(_uaa_token_source(uaa_url, credentials, ca_cert, timeout))

    return DirectorClient(director_url, ca_cert=ca_cert, auth=auth, timeout=timeout)


def _uaa_token_source(
    uaa_url: str,
    credentials: UAAGrantCredentials,
    ca_cert: str,
    timeout: float,
) -> RenewableTokenSource:
    uaa = UAAClient(
        uaa_url,
        credentials.client,
        credentials.client_secret,
        ca_cert=ca_cert,
        timeout=timeout,
    )

    try:
        if credentials.uses_client_credentials:
            logger.info("director_auth_uaa_client_credentials", client=credentials.client)
            source: RenewableTokenSource = ClientTokenSession(uaa)
            source.token()
            return source

        logger.info("director_auth_uaa_password", client=credentials.client)
        granted = uaa.owner_password_grant(credentials.username, credentials.password)
    except HTTPClientError as exc:
        raise AuthError(f"UAA token grant failed: {exc}", {"uaa_url": uaa_url}) from exc

    if not granted.refresh_token:
        raise AuthError("UAA password grant returned no refresh token", {"uaa_url": uaa_url})
    return AccessTokenSession(uaa, granted.refresh_token)
