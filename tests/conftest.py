"""Shared test fixtures for Shellyplug Exporter."""

from __future__ import annotations

import copy
from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from shellyplug_exporter.config.schema import AppConfig
from shellyplug_exporter.metrics.registry import ShellyMetrics

MAC = "AABBCC"

# Trimmed Shelly.GetStatus response from a Plus Plug S
STATUS_PAYLOAD: dict[str, Any] = {
    "switch:0": {
        "id": 0,
        "source": "init",
        "output": True,
        "apower": 12.5,
        "voltage": 230.1,
        "current": 0.054,
        "aenergy": {"total": 1042.3, "by_minute": [0.0, 0.0, 0.0], "minute_ts": 1700000000},
        "temperature": {"tC": 41.2, "tF": 106.2},
    },
    "sys": {
        "mac": MAC,
        "restart_required": False,
        "uptime": 12345,
        "available_updates": {},
    },
    "wifi": {"sta_ip": "192.168.1.50", "status": "got ip", "rssi": -58},
}


def make_payload(
    update_version: str | None = None,
    **switch_overrides: Any,
) -> dict[str, Any]:
    """Build a status payload, optionally with a pending stable update."""
    payload = copy.deepcopy(STATUS_PAYLOAD)
    payload["switch:0"].update(switch_overrides)
    if update_version is not None:
        payload["sys"]["available_updates"] = {"stable": {"version": update_version}}
    return payload


@pytest.fixture
def status_payload() -> dict[str, Any]:
    return make_payload()


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> ShellyMetrics:
    """Metrics on a fresh registry, isolated per test."""
    return ShellyMetrics(registry=registry, start_time=1_700_000_000)


@pytest.fixture
def config() -> AppConfig:
    """Provide a minimal valid configuration."""
    return AppConfig(device={"url": "http://192.168.1.50"})
