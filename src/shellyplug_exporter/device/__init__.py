"""Shelly device access."""

from shellyplug_exporter.device.client import ShellyClient, build_status_url, parse_status
from shellyplug_exporter.device.models import DeviceStatus

__all__ = ["DeviceStatus", "ShellyClient", "build_status_url", "parse_status"]
