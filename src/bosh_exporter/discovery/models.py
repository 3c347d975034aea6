"""
Prometheus file-based service discovery documents.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

PROCESS_NAME_LABEL = "__meta_bosh_job_process_name"


class TargetGroup(BaseModel):
    """One entry of a ``file_sd_configs`` document."""

    targets: list[str] = Field(default_factory=list, description="host[:port] targets")
    labels: dict[str, str] = Field(default_factory=dict, description="Labels attached to targets")
