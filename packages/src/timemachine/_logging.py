"""Log formatting that follows the mocked clock.

Log lines written while a test has frozen time are confusing when they
carry the *real* time: the code under test believes it is tomorrow, the
log says it is today.  :class:`JsonFormatter` and :class:`ClockFormatter`
therefore accept an optional :class:`~timemachine.ClockPort` and stamp
each record with that clock's ``now()``.  When the clock is a frozen
:class:`~timemachine.TimeMachine` the record is also flagged as frozen.

:func:`configure_logging` wires either formatter onto the root logger
from :class:`~timemachine.LoggingSettings`.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import Any

from timemachine._clock import ClockPort
from timemachine._settings import LoggingSettings

_MEGABYTE = 1024 * 1024

_TEXT_FORMAT = "%(asctime)s%(frozen_marker)s [%(levelname)s] %(name)s: %(message)s"


def _stamp(
    clock: ClockPort | None, record: logging.LogRecord
) -> tuple[datetime, bool]:
    """Return the instant to log for *record* and whether it is frozen time."""
    if clock is None:
        return datetime.fromtimestamp(record.created, tz=UTC), False
    is_frozen = getattr(clock, "is_frozen", None)
    return clock.now(), bool(is_frozen()) if callable(is_frozen) else False


class JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects (NDJSON).

    Each record produces a JSON object with these fields:

    - ``timestamp`` — ISO 8601 with timezone
    - ``level`` — Python log level name
    - ``logger`` — dotted logger name
    - ``message`` — the formatted log message
    - ``service`` — application name for log correlation
    - ``version`` — application version (omitted when empty)
    - ``frozen`` — ``true`` when stamped from a frozen clock
      (omitted otherwise)
    - ``exception`` — formatted traceback (only present when
      an exception is logged)
    - ``stack_info`` — stack trace (only present when
      ``stack_info=True``)

    Args:
        service: Application name included in every log line.
        version: Application version string.  Omitted from
            output when empty.
        clock: Clock to stamp records with.  Defaults to the
            record's real creation time.
    """

    def __init__(
        self,
        *,
        service: str = "",
        version: str = "",
        clock: ClockPort | None = None,
    ) -> None:
        super().__init__()
        self._service = service
        self._version = version
        self._clock = clock

    def format(self, record: logging.LogRecord) -> str:
        timestamp, frozen = _stamp(self._clock, record)
        entry: dict[str, Any] = {
            "timestamp": timestamp.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self._service,
        }

        if self._version:
            entry["version"] = self._version

        if frozen:
            entry["frozen"] = True

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


class ClockFormatter(logging.Formatter):
    """Human-readable formatter whose ``asctime`` comes from a clock.

    Lines stamped from a frozen clock are marked with ``(frozen)``
    after the timestamp.
    """

    def __init__(
        self, fmt: str = _TEXT_FORMAT, *, clock: ClockPort | None = None
    ) -> None:
        super().__init__(fmt)
        self._clock = clock

    def format(self, record: logging.LogRecord) -> str:
        timestamp, frozen = _stamp(self._clock, record)
        record.frozen_marker = " (frozen)" if frozen else ""
        record.clock_time = timestamp
        return super().format(record)

    def formatTime(  # noqa: N802
        self, record: logging.LogRecord, datefmt: str | None = None
    ) -> str:
        timestamp: datetime = getattr(
            record, "clock_time", datetime.fromtimestamp(record.created, tz=UTC)
        )
        if datefmt:
            return timestamp.strftime(datefmt)
        return timestamp.isoformat(timespec="milliseconds")


def configure_logging(
    settings: LoggingSettings,
    *,
    service: str = "timemachine",
    version: str = "",
    clock: ClockPort | None = None,
) -> None:
    """Configure the root logger from settings.

    Clears any existing handlers on the root logger, then installs a
    ``stderr`` stream handler and, when ``settings.file`` is set, a
    :class:`~logging.handlers.RotatingFileHandler` rotating at
    ``settings.max_file_size_mb`` megabytes.

    Args:
        settings: Logging configuration (level, format, file).
        service: Application name passed to :class:`JsonFormatter`.
        version: Application version passed to :class:`JsonFormatter`.
        clock: Clock used to stamp records, typically the
            :class:`~timemachine.TimeMachine` under test.
    """
    root = logging.getLogger()

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if settings.format == "json":
        formatter: logging.Formatter = JsonFormatter(
            service=service, version=version, clock=clock
        )
    else:
        formatter = ClockFormatter(clock=clock)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if settings.file is not None:
        file_handler = RotatingFileHandler(
            settings.file,
            maxBytes=settings.max_file_size_mb * _MEGABYTE,
            backupCount=settings.backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(settings.level)
