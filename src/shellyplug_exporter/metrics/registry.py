"""Prometheus gauges for one Shelly plug, held in an injected registry."""

from __future__ import annotations

import time

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest

from shellyplug_exporter.device.models import DeviceStatus

NAMESPACE = "shellyplug"

# Version label used when the device reports no pending update
CURRENT_VERSION_LABEL = "current"


class ShellyMetrics:
    """All exporter instruments, registered on a private CollectorRegistry.

    Created once at startup. Only the poll loop mutates it, via update().
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        start_time: float | None = None,
    ) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        def gauge(name: str, documentation: str, labelnames: tuple[str, ...] = ("mac",)) -> Gauge:
            return Gauge(
                name,
                documentation,
                labelnames=labelnames,
                namespace=NAMESPACE,
                registry=self.registry,
            )

        self.apower = gauge("apower", "Instantaneous power in W")
        self.voltage = gauge("voltage", "Voltage in V")
        self.current = gauge("current", "Current in A")
        self.aenergy_total = gauge("aenergy_total", "Total energy so far in Wh")
        self.temperature = gauge("temperature", "Temperature of Shellyplug in °C")
        self.output = gauge("output", "1 if output channel is currently on, 0 otherwise")
        self.available_updates_info = gauge(
            "available_updates_info",
            "Information about available updates",
            labelnames=("mac", "version"),
        )
        self.last_updated = gauge("last_updated", "Last update of Shellyplug")
        self.process_start_time = Gauge(
            "process_start_time_seconds",
            "Start time of the process",
            registry=self.registry,
        )
        self.process_start_time.set(int(start_time if start_time is not None else time.time()))

    def update(self, status: DeviceStatus, timestamp: float) -> None:
        """Apply one snapshot. Values are copied unchanged; no unit conversion."""
        mac = status.mac
        self.apower.labels(mac=mac).set(status.apower)
        self.voltage.labels(mac=mac).set(status.voltage)
        self.current.labels(mac=mac).set(status.current)
        self.aenergy_total.labels(mac=mac).set(status.aenergy_total)
        self.temperature.labels(mac=mac).set(status.temperature_c)
        self.output.labels(mac=mac).set(1.0 if status.output else 0.0)

        # Clear before set so an old version label never coexists with the new one
        self.available_updates_info.clear()
        version = status.available_update if status.update_available else CURRENT_VERSION_LABEL
        self.available_updates_info.labels(mac=mac, version=version).set(1.0)

        self.last_updated.labels(mac=mac).set(timestamp)

    def render(self) -> bytes:
        """Render all instruments in the Prometheus text exposition format."""
        return generate_latest(self.registry)
