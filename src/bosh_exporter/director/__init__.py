"""Clients for the BOSH director and its UAA server."""

from bosh_exporter.director.client import DirectorClient, TaskError
from bosh_exporter.director.http import (
    HTTPClientError,
    PermanentHTTPError,
    RetryableHTTPError,
)
from bosh_exporter.director.models import DeploymentSummary, DirectorInfo, Release, Stemcell
from bosh_exporter.director.tokens import (
    AccessToken,
    AccessTokenSession,
    ClientTokenSession,
    RenewableTokenSource,
    TokenAuth,
)
from bosh_exporter.director.uaa import UAAClient

__all__ = [
    "AccessToken",
    "AccessTokenSession",
    "ClientTokenSession",
    "DeploymentSummary",
    "DirectorClient",
    "DirectorInfo",
    "HTTPClientError",
    "PermanentHTTPError",
    "Release",
    "RenewableTokenSource",
    "RetryableHTTPError",
    "Stemcell",
    "TaskError",
    "TokenAuth",
    "UAAClient",
]
