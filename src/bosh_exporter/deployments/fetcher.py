from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import structlog

from bosh_exporter.core.errors import FetchError
from bosh_exporter.deployments.models import DeploymentInfo, FetchResult, Instance
from bosh_exporter.director.client import DirectorClient
from bosh_exporter.director.http import HTTPClientError
from bosh_exporter.director.models import DeploymentSummary
from bosh_exporter.filters import AZsFilter, DeploymentsFilter

logger = structlog.get_logger()

DEFAULT_MAX_WORKERS = 8


class Fetcher:
    """Fetches a filtered snapshot of the director's deployments."""

    def __init__(
        self,
        client: DirectorClient,
        deployments_filter: DeploymentsFilter,
        azs_filter: AZsFilter,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._client = client
        self._deployments_filter = deployments_filter
        self._azs_filter = azs_filter
        self._max_workers = max_workers

    def fetch(self) -> FetchResult:
        """
        Fetch deployments and their instances.

        Deployment details are fetched in parallel. A deployment whose
        instances cannot be read is left out of the result and reported in
        ``FetchResult.failures``.

        Raises:
            FetchError: If the deployment list itself cannot be read
        """
        try:
            summaries = self._client.deployments()
        except (HTTPClientError, KeyError, TypeError, AttributeError) as exc:
            raise FetchError(f"Error listing deployments: {exc}") from exc

        selected = [s for s in summaries if self._deployments_filter.matches(s.name)]
        if self._deployments_filter.enabled:
            missing = self._deployments_filter.names - {s.name for s in summaries}
            for name in sorted(missing):
                logger.warning("deployment_not_found", deployment=name)

        if not selected:
            return FetchResult()

        workers = min(self._max_workers, len(selected))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fetch") as pool:
            outcomes = list(pool.map(self._fetch_deployment, selected))

        deployments = []
        failures = []
        for outcome in outcomes:
            if isinstance(outcome, FetchError):
                failures.append(outcome)
            else:
                deployments.append(outcome)

        if failures:
            logger.warning(
                "deployments_fetch_partial",
                failed=len(failures),
                fetched=len(deployments),
            )
        return FetchResult(deployments=tuple(deployments), failures=tuple(failures))

    def _fetch_deployment(self, summary: DeploymentSummary) -> DeploymentInfo | FetchError:
        try:
            payloads = self._client.instance_infos(summary.name)
            instances = tuple(Instance.from_payload(payload) for payload in payloads)
        except FetchError as exc:
            exc.deployment = summary.name
            logger.error("deployment_fetch_failed", deployment=summary.name, error=exc.message)
            return exc
        except (HTTPClientError, KeyError, TypeError, AttributeError) as exc:
            logger.error("deployment_fetch_failed", deployment=summary.name, error=str(exc))
            error = FetchError(
                f"Error reading instances of deployment `{summary.name}`: {exc}",
                deployment=summary.name,
            )
            error.__cause__ = exc
            return error

        return DeploymentInfo(
            name=summary.name,
            releases=summary.releases,
            stemcells=summary.stemcells,
            instances=tuple(i for i in instances if self._azs_filter.matches(i.az)),
        )
