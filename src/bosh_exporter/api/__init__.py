"""HTTP surface of the exporter."""

from bosh_exporter.api.main import create_app

__all__ = ["create_app"]
