"""Wall-clock ports and the system adapter.

Provides ClockPort and WallClockPort (Protocols) plus SystemClock, the
real clock a :class:`~timemachine.TimeMachine` delegates to while live.

**Why wall-clock and not monotonic?** The values handed out here are
meant to be *stored* (expiry stamps, audit times) and compared later, so
they must be real instants.  Timestamps are timezone-aware UTC
``datetime`` objects; durations are ``timedelta``.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Source of the current wall-clock instant.

    Consumers that only need to *read* time depend on this port.
    :class:`SystemClock`, :class:`~timemachine.TimeMachine` and
    :class:`~timemachine.testing.FakeClock` all satisfy it.
    """

    def now(self) -> datetime:
        """Return the current instant as a timezone-aware ``datetime``."""
        ...


@runtime_checkable
class WallClockPort(ClockPort, Protocol):
    """Clock that can also block the caller for a real duration."""

    def sleep(self, seconds: float) -> None:
        """Block the calling thread for *seconds*."""
        ...


class SystemClock:
    """Production clock wrapping ``datetime.now(UTC)`` and ``time.sleep()``.

    Satisfies :class:`WallClockPort` via structural subtyping, no
    base-class inheritance required (PEP 544).

    Usage::

        clock = SystemClock()
        start = clock.now()
        clock.sleep(0.5)
        elapsed = clock.now() - start
    """

    def now(self) -> datetime:
        """Return the real current time in UTC."""
        return datetime.now(UTC)

    def sleep(self, seconds: float) -> None:
        """Block the calling thread for *seconds* of real time."""
        time.sleep(seconds)
