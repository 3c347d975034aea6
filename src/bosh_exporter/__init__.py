"""Prometheus exporter for BOSH directors."""

__version__ = "0.1.0"
