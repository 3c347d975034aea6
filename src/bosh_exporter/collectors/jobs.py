from __future__ import annotations

from typing import Sequence

from prometheus_client.core import GaugeMetricFamily

from bosh_exporter.collectors.base import SubCollector
from bosh_exporter.deployments.models import DeploymentInfo, Instance
from bosh_exporter.filters import JOBS_COLLECTOR

INSTANCE_LABELS = (
    "bosh_deployment",
    "bosh_job_name",
    "bosh_job_id",
    "bosh_job_index",
    "bosh_job_az",
    "bosh_job_ip",
)
PROCESS_LABELS = (*INSTANCE_LABELS, "bosh_job_process_name")

# (family key, metric suffix, help)
INSTANCE_GAUGES = [
    ("healthy", "job_healthy", "BOSH Job Healthy (1 for healthy, 0 for unhealthy)."),
    ("load_avg01", "job_load_avg01", "BOSH Job Load avg01."),
    ("load_avg05", "job_load_avg05", "BOSH Job Load avg05."),
    ("load_avg15", "job_load_avg15", "BOSH Job Load avg15."),
    ("cpu_sys", "job_cpu_sys", "BOSH Job CPU System."),
    ("cpu_user", "job_cpu_user", "BOSH Job CPU User."),
    ("cpu_wait", "job_cpu_wait", "BOSH Job CPU Wait."),
    ("mem_kb", "job_mem_kb", "BOSH Job Memory KB."),
    ("mem_percent", "job_mem_percent", "BOSH Job Memory Percent."),
    ("swap_kb", "job_swap_kb", "BOSH Job Swap KB."),
    ("swap_percent", "job_swap_percent", "BOSH Job Swap Percent."),
    ("system_disk_percent", "job_system_disk_percent", "BOSH Job System Disk Percent."),
    (
        "system_disk_inode_percent",
        "job_system_disk_inode_percent",
        "BOSH Job System Disk Inode Percent.",
    ),
    ("ephemeral_disk_percent", "job_ephemeral_disk_percent", "BOSH Job Ephemeral Disk Percent."),
    (
        "ephemeral_disk_inode_percent",
        "job_ephemeral_disk_inode_percent",
        "BOSH Job Ephemeral Disk Inode Percent.",
    ),
    (
        "persistent_disk_percent",
        "job_persistent_disk_percent",
        "BOSH Job Persistent Disk Percent.",
    ),
    (
        "persistent_disk_inode_percent",
        "job_persistent_disk_inode_percent",
        "BOSH Job Persistent Disk Inode Percent.",
    ),
]

PROCESS_GAUGES = [
    (
        "process_healthy",
        "job_process_healthy",
        "BOSH Job Process Healthy (1 for healthy, 0 for unhealthy).",
    ),
    ("process_uptime", "job_process_uptime_seconds", "BOSH Job Process Uptime in seconds."),
    ("process_cpu_total", "job_process_cpu_total", "BOSH Job Process CPU Total."),
    ("process_mem_kb", "job_process_mem_kb", "BOSH Job Process Memory KB."),
    ("process_mem_percent", "job_process_mem_percent", "BOSH Job Process Memory Percent."),
]


class JobsCollector(SubCollector):
    """Health and vitals of every job instance and its processes."""

    name = JOBS_COLLECTOR
    scrape_slug = "jobs"

    def _families(self) -> dict[str, GaugeMetricFamily]:
        families = {
            key: self._gauge(metric, documentation, INSTANCE_LABELS)
            for key, metric, documentation in INSTANCE_GAUGES
        }
        families.update(
            {
                key: self._gauge(metric, documentation, PROCESS_LABELS)
                for key, metric, documentation in PROCESS_GAUGES
            }
        )
        return families

    def _populate(
        self,
        families: dict[str, GaugeMetricFamily],
        deployments: Sequence[DeploymentInfo],
    ) -> None:
        for deployment in deployments:
            for instance in deployment.instances:
                labels = [
                    *self.common_values,
                    deployment.name,
                    instance.name,
                    instance.id,
                    instance.index,
                    instance.az,
                    instance.ip,
                ]
                self._instance_metrics(families, labels, instance)

                for process in instance.processes:
                    process_labels = [*labels, process.name]
                    values = {
                        "process_healthy": 1.0 if process.healthy else 0.0,
                        "process_uptime": process.uptime_seconds,
                        "process_cpu_total": process.cpu_total,
                        "process_mem_kb": process.mem_kb,
                        "process_mem_percent": process.mem_percent,
                    }
                    _add(families, process_labels, values)

    @staticmethod
    def _instance_metrics(
        families: dict[str, GaugeMetricFamily],
        labels: list[str],
        instance: Instance,
    ) -> None:
        vitals = instance.vitals
        values = {
            "healthy": 1.0 if instance.healthy else 0.0,
            "load_avg01": vitals.load[0],
            "load_avg05": vitals.load[1],
            "load_avg15": vitals.load[2],
            "cpu_sys": vitals.cpu_sys,
            "cpu_user": vitals.cpu_user,
            "cpu_wait": vitals.cpu_wait,
            "mem_kb": vitals.mem_kb,
            "mem_percent": vitals.mem_percent,
            "swap_kb": vitals.swap_kb,
            "swap_percent": vitals.swap_percent,
            "system_disk_percent": vitals.system_disk.percent,
            "system_disk_inode_percent": vitals.system_disk.inode_percent,
            "ephemeral_disk_percent": vitals.ephemeral_disk.percent,
            "ephemeral_disk_inode_percent": vitals.ephemeral_disk.inode_percent,
            "persistent_disk_percent": vitals.persistent_disk.percent,
            "persistent_disk_inode_percent": vitals.persistent_disk.inode_percent,
        }
        _add(families, labels, values)


def _add(
    families: dict[str, GaugeMetricFamily],
    labels: list[str],
    values: dict[str, float | None],
) -> None:
    for key, value in values.items():
        if value is not None:
            families[key].add_metric(labels, value)
