"""Shellyplug Exporter entry point and lifecycle orchestrator.

Startup sequence:
  config → logging → bind scrape socket → metrics → device client →
  poll loop → scrape server
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import socket
import sys

import uvicorn

from shellyplug_exporter import __version__
from shellyplug_exporter.config.manager import ConfigManager
from shellyplug_exporter.config.schema import AppConfig
from shellyplug_exporter.device.client import ShellyClient, build_status_url
from shellyplug_exporter.exceptions import ConfigurationError
from shellyplug_exporter.exporter.app import create_app
from shellyplug_exporter.logging.structured import setup_logging
from shellyplug_exporter.metrics.registry import ShellyMetrics
from shellyplug_exporter.polling.loop import PollLoop

logger = logging.getLogger(__name__)


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the scrape socket up front so a busy port fails before polling starts."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as err:
        sock.close()
        raise ConfigurationError(f"Cannot bind {host}:{port}: {err}") from err
    return sock


class Application:
    """Wires metrics, device client, poll loop and scrape server together."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.metrics: ShellyMetrics | None = None
        self._running = False
        self._tasks: list[asyncio.Task] = []
        self._client: ShellyClient | None = None
        self._poll_loop: PollLoop | None = None
        self._server: uvicorn.Server | None = None

    @property
    def poll_loop(self) -> PollLoop | None:
        return self._poll_loop

    async def start(self) -> None:
        """Bind, then run the poll loop and scrape server until stopped.

        Raises:
            ConfigurationError: the scrape port could not be bound.
        """
        exporter_cfg = self.config.exporter
        device_cfg = self.config.device

        sock = bind_socket(exporter_cfg.host, exporter_cfg.port)
        self._running = True

        logger.info("Starting Shellyplug Exporter v%s", __version__)
        logger.info("Listening on %s:%d", exporter_cfg.host, exporter_cfg.port)
        logger.info("Updating every %ds", device_cfg.period_seconds)

        try:
            self.metrics = ShellyMetrics()
            self._client = ShellyClient(build_status_url(device_cfg.url))
            logger.info("Polling %s", self._client.url)
            self._poll_loop = PollLoop(
                source=self._client,
                metrics=self.metrics,
                period_seconds=device_cfg.period_seconds,
            )
            self._tasks.append(asyncio.create_task(self._poll_loop.run(), name="poll-loop"))

            app = create_app(self.metrics, metrics_path=exporter_cfg.metrics_path)
            # log_config=None leaves uvicorn's loggers on our structlog handlers
            uvi_config = uvicorn.Config(app, log_level="warning", log_config=None)
            server = uvicorn.Server(uvi_config)
            # Keep process signal handling in main(); uvicorn would replace it
            server.capture_signals = contextlib.nullcontext
            self._server = server

            # Server.serve() blocks until shutdown
            await server.serve(sockets=[sock])
        finally:
            sock.close()
            await self.stop()

    async def stop(self) -> None:
        """Stop the scrape server and poll loop, then release the HTTP client."""
        if not self._running:
            return

        logger.info("Shutting down Shellyplug Exporter")
        self._running = False

        if self._server is not None:
            self._server.should_exit = True

        if self._poll_loop is not None:
            self._poll_loop.stop()

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        if self._client is not None:
            await self._client.close()

        logger.info("Shutdown complete")


def main() -> None:
    """Entry point for the exporter."""
    manager = ConfigManager()
    try:
        config = manager.load()
    except ConfigurationError as err:
        setup_logging()
        logger.error("%s", err)
        sys.exit(1)

    setup_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_file=config.logging.file,
    )
    logger.info("Configuration file: %s", manager.path if manager.path.exists() else "none")

    app = Application(config)
    exit_code = 0
    signal_count = 0

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def _request_stop() -> None:
        nonlocal signal_count
        signal_count += 1
        if signal_count >= 2:
            os._exit(130)
        if loop.is_closed():
            return
        loop.call_soon_threadsafe(lambda: asyncio.create_task(app.stop()))

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _request_stop)

    try:
        loop.run_until_complete(app.start())
    except ConfigurationError as err:
        logger.error("%s", err)
        exit_code = 1
    except KeyboardInterrupt:
        with contextlib.suppress(Exception):
            loop.run_until_complete(app.stop())
    finally:
        pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            with contextlib.suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.close()

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
