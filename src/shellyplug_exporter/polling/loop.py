"""Async poll loop: fetch device status, publish gauges, sleep, repeat."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import structlog

from shellyplug_exporter.device.models import DeviceStatus
from shellyplug_exporter.exceptions import PollCycleError
from shellyplug_exporter.metrics.registry import ShellyMetrics

logger = logging.getLogger(__name__)


class StatusSource(Protocol):
    """Anything that can produce one DeviceStatus per call."""

    async def fetch(self) -> DeviceStatus:
        ...


@dataclass
class LoopState:
    """Counters and last outcome of the poll loop."""

    cycle_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    consecutive_failures: int = 0
    last_success_at: float | None = None  # Unix seconds
    last_error: str | None = None
    is_running: bool = False


class PollLoop:
    """Polls the device every ``period_seconds`` and updates the metrics.

    Failures are logged and never stop the loop; the gauges keep their last
    known good values until the next successful cycle.
    """

    def __init__(
        self,
        source: StatusSource,
        metrics: ShellyMetrics,
        period_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._metrics = metrics
        self._period = period_seconds
        self._clock = clock
        self._state = LoopState()
        self._stop_event = asyncio.Event()

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def period_seconds(self) -> float:
        return self._period

    async def run(self) -> None:
        """Poll, then sleep for the period, until stop() is called."""
        self._state.is_running = True
        self._stop_event.clear()
        logger.info("Poll loop starting (interval: %ss)", self._period)

        try:
            while not self._stop_event.is_set():
                try:
                    await self.poll_once()
                except Exception:
                    logger.exception("Unexpected error in poll cycle")
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self._period)
                    break  # stop_event was set
                except asyncio.TimeoutError:
                    pass  # Normal: interval elapsed
        finally:
            self._state.is_running = False
            logger.info("Poll loop stopped after %d cycles", self._state.cycle_count)

    def stop(self) -> None:
        """Signal the loop to stop."""
        self._stop_event.set()

    async def poll_once(self) -> bool:
        """Run one fetch-and-publish cycle. Returns True if the gauges were updated."""
        self._state.cycle_count += 1
        with structlog.contextvars.bound_contextvars(cycle=self._state.cycle_count):
            try:
                status = await self._source.fetch()
            except PollCycleError as err:
                self._record_failure(err)
                return False

            now = int(self._clock())
            self._metrics.update(status, now)
            self._record_success(status, now)
            return True

    def _record_success(self, status: DeviceStatus, now: float) -> None:
        self._state.success_count += 1
        self._state.consecutive_failures = 0
        self._state.last_success_at = now
        self._state.last_error = None
        logger.debug(
            "Updated %s: output=%s apower=%.1fW voltage=%.1fV temperature=%.1fC update=%s",
            status.mac,
            status.output,
            status.apower,
            status.voltage,
            status.temperature_c,
            status.available_update or "none",
        )

    def _record_failure(self, err: PollCycleError) -> None:
        self._state.failure_count += 1
        self._state.consecutive_failures += 1
        self._state.last_error = str(err)
        logger.error(
            "Poll failed (%d consecutive): %s",
            self._state.consecutive_failures,
            err,
        )
