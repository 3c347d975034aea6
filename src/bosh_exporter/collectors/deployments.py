from __future__ import annotations

from collections import Counter
from typing import Sequence

from prometheus_client.core import GaugeMetricFamily

from bosh_exporter.collectors.base import SubCollector
from bosh_exporter.deployments.models import DeploymentInfo
from bosh_exporter.filters import DEPLOYMENTS_COLLECTOR


class DeploymentsCollector(SubCollector):
    """Release, stemcell and instance count metrics per deployment."""

    name = DEPLOYMENTS_COLLECTOR
    scrape_slug = "deployments"

    def _families(self) -> dict[str, GaugeMetricFamily]:
        return {
            "release_info": self._gauge(
                "deployment_release_info",
                "Labeled BOSH Deployment Release Info with a constant '1' value.",
                ["bosh_deployment", "bosh_release_name", "bosh_release_version"],
            ),
            "stemcell_info": self._gauge(
                "deployment_stemcell_info",
                "Labeled BOSH Deployment Stemcell Info with a constant '1' value.",
                ["bosh_deployment", "bosh_stemcell_name", "bosh_stemcell_version"],
            ),
            "instances": self._gauge(
                "deployment_instances",
                "Number of instances in this deployment.",
                ["bosh_deployment", "bosh_vm_type"],
            ),
        }

    def _populate(
        self,
        families: dict[str, GaugeMetricFamily],
        deployments: Sequence[DeploymentInfo],
    ) -> None:
        common = self.common_values
        for deployment in deployments:
            for release in deployment.releases:
                families["release_info"].add_metric(
                    [*common, deployment.name, release.name, release.version], 1
                )
            for stemcell in deployment.stemcells:
                families["stemcell_info"].add_metric(
                    [*common, deployment.name, stemcell.name, stemcell.version], 1
                )
            vm_types = Counter(instance.vm_type for instance in deployment.instances)
            for vm_type, count in sorted(vm_types.items()):
                families["instances"].add_metric([*common, deployment.name, vm_type], count)
