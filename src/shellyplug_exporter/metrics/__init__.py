"""Prometheus instruments."""

from shellyplug_exporter.metrics.registry import ShellyMetrics

__all__ = ["ShellyMetrics"]
