"""The mockable clock: freeze, advance and resume the passage of time.

A :class:`TimeMachine` behaves like the real wall clock until it is
frozen.  While frozen, :meth:`~TimeMachine.now` returns a cached instant
that only moves through :meth:`~TimeMachine.sleep` and
:meth:`~TimeMachine.travel`, so tests can exercise expiry logic, timeouts
and schedules without waiting.

State machine::

            freeze_now()
    Live  ───────────────▶  Frozen ──┐ sleep() / travel()
      ▲ │                     │   ◀──┘ (advance cached time)
      │ └─ sleep()            │
      │    (real delay)       │
      └──────── unfreeze() ───┘

Every mutation runs under the instance's :class:`threading.Lock`.  A
live ``sleep()`` releases the lock before blocking, so it never stalls
other threads.  Reads take the lock too unless ``locked_reads=False``,
which trades cross-thread visibility for lock-free reads; acceptable in
single-threaded test code.

Typical test::

    machine = TimeMachine()
    with machine.frozen() as t0:
        token = issue_token(clock=machine)
        machine.travel(timedelta(hours=24, seconds=1))
        assert token.is_expired(clock=machine)
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from timemachine._clock import SystemClock, WallClockPort
from timemachine._errors import AlreadyFrozenError, TimeTravelError
from timemachine._settings import RefreezePolicy

if TYPE_CHECKING:
    from timemachine._settings import Settings

logger = logging.getLogger(__name__)

Duration = timedelta | float
"""A ``timedelta``, or a number of seconds as accepted by ``time.sleep``."""


def _as_timedelta(duration: Duration) -> timedelta:
    if isinstance(duration, timedelta):
        return duration
    return timedelta(seconds=duration)


def _shift(instant: datetime, delta: timedelta) -> datetime:
    """Return ``instant + delta``, clamped to the representable range."""
    try:
        return instant + delta
    except OverflowError:
        bound = datetime.max if delta > timedelta(0) else datetime.min
        return bound.replace(tzinfo=instant.tzinfo)


def _require_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        msg = f"Expected a timezone-aware datetime, got naive {instant!r}"
        raise ValueError(msg)
    return instant


@dataclass(frozen=True, slots=True)
class ClockState:
    """Immutable snapshot of a machine's state.

    ``frozen_time`` is only meaningful while ``frozen`` is true.  After
    :meth:`TimeMachine.unfreeze` the stale value is kept but ``now()``
    no longer reports it.
    """

    frozen: bool = False
    frozen_time: datetime | None = None


class TimeMachine:
    """Injectable clock that can be frozen, advanced and unfrozen.

    Satisfies :class:`~timemachine.ClockPort`, so it can be handed to any
    component that reads time through that port.

    Args:
        source: The real clock used while live.  Defaults to
            :class:`~timemachine.SystemClock`.
        refreeze: What :meth:`freeze_now` does when already frozen.
            See :data:`~timemachine.RefreezePolicy`.
        locked_reads: Take the state lock in :meth:`now` and
            :meth:`is_frozen`.
    """

    def __init__(
        self,
        source: WallClockPort | None = None,
        *,
        refreeze: RefreezePolicy = "reset",
        locked_reads: bool = True,
    ) -> None:
        self._source: WallClockPort = source if source is not None else SystemClock()
        self._refreeze = refreeze
        self._locked_reads = locked_reads
        self._lock = threading.Lock()
        self._state = ClockState()

    @classmethod
    def from_settings(
        cls, settings: Settings, source: WallClockPort | None = None
    ) -> TimeMachine:
        """Build a machine configured from ``settings.clock``."""
        return cls(
            source,
            refreeze=settings.clock.refreeze,
            locked_reads=settings.clock.locked_reads,
        )

    def __repr__(self) -> str:
        state = self._state
        if state.frozen:
            return f"<TimeMachine frozen at {state.frozen_time.isoformat()}>"  # type: ignore[union-attr]
        return "<TimeMachine live>"

    # --- reads ----------------------------------------------------------

    def _read(self) -> ClockState:
        if not self._locked_reads:
            return self._state
        with self._lock:
            return self._state

    @property
    def state(self) -> ClockState:
        """Snapshot of the current state, always taken under the lock."""
        with self._lock:
            return self._state

    @property
    def refreeze(self) -> RefreezePolicy:
        """The configured refreeze policy."""
        return self._refreeze

    @property
    def locked_reads(self) -> bool:
        """Whether reads take the state lock."""
        return self._locked_reads

    def now(self) -> datetime:
        """Return the frozen instant if frozen, else the real current time."""
        state = self._read()
        if state.frozen:
            return state.frozen_time  # type: ignore[return-value]
        return self._source.now()

    def is_frozen(self) -> bool:
        """Return ``True`` between :meth:`freeze_now` and :meth:`unfreeze`."""
        return self._read().frozen

    def since(self, instant: datetime) -> timedelta:
        """Return ``now() - instant`` for a timezone-aware *instant*.

        Raises:
            ValueError: If *instant* is naive.
        """
        return self.now() - _require_aware(instant)

    def until(self, instant: datetime) -> timedelta:
        """Return ``instant - now()`` for a timezone-aware *instant*.

        Raises:
            ValueError: If *instant* is naive.
        """
        return _require_aware(instant) - self.now()

    # --- mutations ------------------------------------------------------

    def sleep(self, duration: Duration) -> None:
        """Advance frozen time by *duration*, or really sleep when live.

        While frozen the cached instant moves forward by exactly
        *duration* and the call returns immediately.  While live the
        calling thread blocks for *duration* of real time; a negative
        duration returns at once.  Frozen time saturates at
        ``datetime.max``/``datetime.min`` instead of overflowing.
        """
        delta = _as_timedelta(duration)
        with self._lock:
            state = self._state
            if state.frozen:
                self._state = ClockState(True, _shift(state.frozen_time, delta))  # type: ignore[arg-type]
                return
        seconds = delta.total_seconds()
        if seconds > 0:
            self._source.sleep(seconds)

    def freeze_now(self) -> datetime:
        """Freeze the clock at the real current time and return that instant.

        Calling this while already frozen is governed by the
        ``refreeze`` policy.  Under the default ``"reset"`` policy the
        frozen time is overwritten with the real current time, so any
        earlier :meth:`sleep`/:meth:`travel` advancement is discarded.
        """
        return self._freeze(None)

    def freeze_at(self, instant: datetime) -> datetime:
        """Freeze the clock at an explicit timezone-aware *instant*."""
        return self._freeze(_require_aware(instant))

    def _freeze(self, instant: datetime | None) -> datetime:
        # No logging under the lock: clock-aware formatters read this machine.
        with self._lock:
            previous = self._state
            refused = previous.frozen and self._refreeze == "error"
            if previous.frozen and self._refreeze == "keep":
                return previous.frozen_time  # type: ignore[return-value]
            if not refused:
                frozen_time = instant if instant is not None else self._source.now()
                self._state = ClockState(True, frozen_time)
        if refused:
            logger.warning(
                "freeze requested while already frozen at %s", previous.frozen_time
            )
            raise AlreadyFrozenError(previous.frozen_time)
        if previous.frozen:
            logger.debug(
                "Re-froze clock at %s, discarding frozen time %s",
                frozen_time,
                previous.frozen_time,
            )
        else:
            logger.debug("Froze clock at %s", frozen_time)
        return frozen_time

    def unfreeze(self) -> None:
        """Return to live time.  The stale frozen instant is retained."""
        with self._lock:
            was_frozen = self._state.frozen
            self._state = ClockState(False, self._state.frozen_time)
        if was_frozen:
            logger.debug("Unfroze clock")

    def travel(self, duration: Duration) -> datetime:
        """Jump frozen time forward by *duration* and return the new instant.

        Same effect as :meth:`sleep` while frozen; use it to make a
        deliberate jump explicit in test code.  Like :meth:`sleep`, the
        result saturates at the representable range.

        Raises:
            TimeTravelError: If the clock is not frozen.
        """
        delta = _as_timedelta(duration)
        with self._lock:
            state = self._state
            if state.frozen:
                frozen_time = _shift(state.frozen_time, delta)  # type: ignore[arg-type]
                self._state = ClockState(True, frozen_time)
        if not state.frozen:
            logger.warning("travel(%s) called while the clock is live", delta)
            raise TimeTravelError
        logger.debug("Travelled %s to %s", delta, frozen_time)
        return frozen_time

    def reset(self) -> None:
        """Restore the initial live state, forgetting any frozen instant."""
        with self._lock:
            self._state = ClockState()
        logger.debug("Reset clock")

    @contextlib.contextmanager
    def frozen(self, at: datetime | None = None) -> Iterator[datetime]:
        """Freeze for the duration of a ``with`` block.

        Yields the frozen instant.  On exit, even when the block raises,
        the clock is unfrozen unless it was already frozen on entry, so
        a nested block leaves the enclosing freeze in place::

            with machine.frozen() as t0:
                machine.sleep(timedelta(hours=24, seconds=1))
                assert machine.since(t0) == timedelta(hours=24, seconds=1)
            assert not machine.is_frozen()

        Args:
            at: Freeze at this timezone-aware instant instead of the
                real current time.
        """
        was_frozen = self.state.frozen
        start = self.freeze_now() if at is None else self.freeze_at(at)
        try:
            yield start
        finally:
            if not was_frozen:
                self.unfreeze()
