"""
Exporter configuration.

Provides a single immutable ``Settings`` object assembled from
``BOSH_EXPORTER_*`` environment variables and command line flags.
"""

from bosh_exporter.config.cli import build_parser, load_settings
from bosh_exporter.config.settings import Settings

__all__ = [
    "Settings",
    "build_parser",
    "load_settings",
]
