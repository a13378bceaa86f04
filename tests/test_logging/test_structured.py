"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from shellyplug_exporter.logging.structured import setup_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def _last_json_line(text: str) -> dict:
    lines = [line for line in text.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestSetupLogging:
    def test_json_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", fmt="json")
        logging.getLogger("shellyplug_exporter.test").error("Poll failed: %s", "HTTP 500")

        captured = capsys.readouterr()
        assert captured.out == ""
        entry = _last_json_line(captured.err)
        assert entry["event"] == "Poll failed: HTTP 500"
        assert entry["level"] == "error"
        assert entry["logger"] == "shellyplug_exporter.test"
        assert "timestamp" in entry

    def test_context_is_merged(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(fmt="json")
        with structlog.contextvars.bound_contextvars(cycle=7):
            logging.getLogger("shellyplug_exporter.test").warning("tick")
        logging.getLogger("shellyplug_exporter.test").warning("after")

        lines = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.strip()]
        assert lines[-2]["cycle"] == 7
        assert "cycle" not in lines[-1]

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="WARNING", fmt="json")
        logging.getLogger("shellyplug_exporter.test").info("hidden")
        assert "hidden" not in capsys.readouterr().err

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_console_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(fmt="console")
        logging.getLogger("shellyplug_exporter.test").info("Listening on %s", "0.0.0.0:9185")
        assert "Listening on 0.0.0.0:9185" in capsys.readouterr().err

    def test_log_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "exporter.log"
        setup_logging(fmt="json", log_file=str(log_file))
        logging.getLogger("shellyplug_exporter.test").info("to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert _last_json_line(log_file.read_text())["event"] == "to file"

    def test_noisy_libraries_quieted(self) -> None:
        setup_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
