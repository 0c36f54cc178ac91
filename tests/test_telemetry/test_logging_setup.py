"""Tests for structured logging configuration."""

import json
import logging
import logging.handlers
import pathlib

import pytest
import structlog

import perf_monitor.telemetry.logger as logger_module
from perf_monitor.telemetry import METRICS_COLLECTED, SAMPLE_DEGRADED, configure_logging, get_logger


@pytest.fixture
def log_dir(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    """Route the JSON log file into a temporary directory."""
    directory = tmp_path / "logs"
    monkeypatch.setattr(logger_module, "_get_log_dir", lambda: directory)
    monkeypatch.setattr(logger_module, "_get_log_level", lambda: "DEBUG")
    structlog.reset_defaults()
    logging.root.handlers.clear()
    configure_logging()
    return directory


def _last_entry(log_dir: pathlib.Path) -> dict:
    for handler in logging.root.handlers:
        handler.flush()
    lines = (log_dir / logger_module.LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()
    return json.loads(lines[-1])


class TestLoggerConfiguration:
    def test_get_logger_configures_on_first_call(self) -> None:
        structlog.reset_defaults()

        log = get_logger("perf_monitor.test")

        assert structlog.is_configured()
        assert hasattr(log, "info")

    def test_creates_log_directory(self, log_dir: pathlib.Path) -> None:
        assert log_dir.is_dir()
        assert (log_dir / "current.jsonl").exists()

    def test_handlers_replaced_not_duplicated(self, log_dir: pathlib.Path) -> None:
        configure_logging()
        configure_logging()

        assert len(logging.root.handlers) == 2

    def test_file_handler_rotates(self, log_dir: pathlib.Path) -> None:
        file_handlers = [
            h
            for h in logging.root.handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]

        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5


class TestStructuredOutput:
    def test_event_fields(self, log_dir: pathlib.Path) -> None:
        get_logger("perf_monitor.collector.monitor").info(
            METRICS_COLLECTED, system_cpu_percent=12.5, event_loop_lag_ms=0.42
        )

        entry = _last_entry(log_dir)

        assert entry["event"] == "metrics_collected"
        assert entry["system_cpu_percent"] == 12.5
        assert entry["event_loop_lag_ms"] == 0.42
        assert entry["level"] == "info"
        assert entry["component"] == "monitor"
        assert "T" in entry["timestamp"]

    def test_warning_level(self, log_dir: pathlib.Path) -> None:
        get_logger("perf_monitor.sensors.disk").warning(SAMPLE_DEGRADED, sample="disk")

        entry = _last_entry(log_dir)

        assert entry["level"] == "warning"
        assert entry["sample"] == "disk"
        assert entry["component"] == "disk"

    def test_stdlib_logger_reaches_file(self, log_dir: pathlib.Path) -> None:
        logging.getLogger("thirdparty.lib").warning("plain message")

        entry = _last_entry(log_dir)

        assert entry["event"] == "plain message"
        assert entry["component"] == "lib"
        assert "timestamp" in entry

    def test_component_from_name(self) -> None:
        assert logger_module._component_from_name("perf_monitor.sensors.container") == "container"
        assert logger_module._component_from_name("standalone") == "standalone"
        assert logger_module._component_from_name("") == "unknown"
