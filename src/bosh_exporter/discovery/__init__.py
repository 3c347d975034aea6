"""Prometheus file-based service discovery output."""

from bosh_exporter.discovery.models import PROCESS_NAME_LABEL, TargetGroup
from bosh_exporter.discovery.writer import build_target_groups, write_target_groups

__all__ = [
    "PROCESS_NAME_LABEL",
    "TargetGroup",
    "build_target_groups",
    "write_target_groups",
]
