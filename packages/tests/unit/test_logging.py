"""Unit tests for timemachine._logging — clock-aware formatters and config.

Test Techniques Used:
    - Specification-based Testing: JsonFormatter output schema
    - Test Doubles: Frozen TimeMachine over a FakeClock stamps records
    - State Inspection: Root logger handler/level after configure
    - Fixture Isolation: Save/restore root logger state
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from timemachine._logging import ClockFormatter, JsonFormatter, configure_logging
from timemachine._machine import TimeMachine
from timemachine._settings import LoggingSettings
from timemachine.testing import EPOCH, FakeClock


@pytest.fixture
def _restore_root_logger() -> Iterator[None]:
    """Save and restore root logger handlers and level."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    for h in root.handlers:
        if h not in original_handlers:
            h.close()
    root.handlers = original_handlers
    root.setLevel(original_level)


def _make_record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestJsonFormatter:
    """JsonFormatter output schema.

    Technique: Specification-based Testing.
    """

    def test_has_required_fields(self) -> None:
        result = json.loads(JsonFormatter(service="svc").format(_make_record()))
        assert {"timestamp", "level", "logger", "message", "service"} <= set(result)
        assert result["service"] == "svc"
        assert result["message"] == "hello"

    def test_timestamp_is_utc_record_time_without_clock(self) -> None:
        record = _make_record()
        result = json.loads(JsonFormatter().format(record))
        parsed = datetime.fromisoformat(result["timestamp"])
        assert parsed.tzinfo == UTC
        assert parsed == datetime.fromtimestamp(record.created, tz=UTC)
        assert "frozen" not in result

    def test_version_omitted_when_empty(self) -> None:
        result = json.loads(JsonFormatter(version="").format(_make_record()))
        assert "version" not in result

    def test_version_included_when_set(self) -> None:
        result = json.loads(JsonFormatter(version="1.2.3").format(_make_record()))
        assert result["version"] == "1.2.3"

    def test_exception_included_when_present(self) -> None:
        record = _make_record()
        record.exc_info = (ValueError, ValueError("boom"), None)
        result = json.loads(JsonFormatter().format(record))
        assert "ValueError" in result["exception"]

    def test_stamped_from_frozen_machine(self) -> None:
        machine = TimeMachine(FakeClock())
        machine.freeze_now()
        machine.travel(timedelta(days=1))
        result = json.loads(JsonFormatter(clock=machine).format(_make_record()))
        assert datetime.fromisoformat(result["timestamp"]) == EPOCH + timedelta(days=1)
        assert result["frozen"] is True

    def test_live_machine_not_flagged(self) -> None:
        machine = TimeMachine(FakeClock())
        result = json.loads(JsonFormatter(clock=machine).format(_make_record()))
        assert datetime.fromisoformat(result["timestamp"]) == EPOCH
        assert "frozen" not in result

    def test_plain_clock_port_not_flagged(self) -> None:
        result = json.loads(JsonFormatter(clock=FakeClock()).format(_make_record()))
        assert "frozen" not in result


class TestClockFormatter:
    """Text formatter stamped from a clock.

    Technique: Specification-based Testing.
    """

    def test_frozen_marker(self) -> None:
        machine = TimeMachine(FakeClock())
        machine.freeze_now()
        line = ClockFormatter(clock=machine).format(_make_record())
        assert line == "2026-01-01T00:00:00.000+00:00 (frozen) [INFO] test.logger: hello"

    def test_no_marker_when_live(self) -> None:
        line = ClockFormatter(clock=TimeMachine(FakeClock())).format(_make_record())
        assert line.startswith("2026-01-01T00:00:00.000+00:00 [INFO]")

    def test_datefmt(self) -> None:
        formatter = ClockFormatter("%(asctime)s %(message)s", clock=FakeClock())
        formatter.datefmt = "%Y-%m-%d"
        assert formatter.format(_make_record()) == "2026-01-01 hello"

    def test_without_clock_uses_record_time(self) -> None:
        record = _make_record()
        line = ClockFormatter().format(record)
        expected = datetime.fromtimestamp(record.created, tz=UTC)
        assert line.startswith(expected.isoformat(timespec="milliseconds"))


class TestConfigureLogging:
    """configure_logging() root logger setup.

    Technique: State Inspection.
    """

    @pytest.mark.usefixtures("_restore_root_logger")
    def test_json_mode_sets_json_formatter(self) -> None:
        configure_logging(LoggingSettings(format="json"))
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)

    @pytest.mark.usefixtures("_restore_root_logger")
    def test_text_mode_sets_clock_formatter(self) -> None:
        configure_logging(LoggingSettings(format="text"))
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, ClockFormatter)

    @pytest.mark.usefixtures("_restore_root_logger")
    def test_sets_root_logger_level(self) -> None:
        configure_logging(LoggingSettings(level="DEBUG"))
        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.usefixtures("_restore_root_logger")
    def test_clears_existing_handlers(self) -> None:
        root = logging.getLogger()
        dummy = logging.StreamHandler()
        root.addHandler(dummy)
        configure_logging(LoggingSettings())
        assert dummy not in root.handlers

    @pytest.mark.usefixtures("_restore_root_logger")
    def test_file_handler_sized_from_settings(self, tmp_path: Path) -> None:
        settings = LoggingSettings(
            file=str(tmp_path / "tm.log"), max_file_size_mb=2, backup_count=5
        )
        configure_logging(settings)
        rotating = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 2 * 1024 * 1024
        assert rotating[0].backupCount == 5
