"""Process-wide default clock and its module-level functions.

Production code calls :func:`now`, :func:`sleep`, :func:`since` and
:func:`until` exactly where it would call ``datetime.now()``,
``time.sleep()`` and friends.  Test code freezes the same default
machine::

    import timemachine

    def test_token_expires_after_a_day():
        with timemachine.frozen():
            token = issue_token()
            timemachine.travel(timedelta(hours=24, seconds=1))
            assert token.is_expired()

Code that prefers explicit wiring takes a :class:`~timemachine.TimeMachine`
(or any :class:`~timemachine.ClockPort`) as a constructor argument
instead; :func:`get_default` hands out the shared instance for that.
"""

from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager
from datetime import datetime, timedelta

from timemachine._machine import Duration, TimeMachine

logger = logging.getLogger(__name__)

_default = TimeMachine()
_default_lock = threading.Lock()


def get_default() -> TimeMachine:
    """Return the process-wide default machine."""
    return _default


def set_default(machine: TimeMachine) -> TimeMachine:
    """Install *machine* as the process-wide default.

    Returns:
        The previously installed machine, so callers can restore it.
    """
    global _default  # noqa: PLW0603
    with _default_lock:
        previous, _default = _default, machine
    logger.debug("Installed %r as the default clock", machine)
    return previous


def now() -> datetime:
    """Drop-in for ``datetime.now(UTC)`` that honours a frozen clock."""
    return _default.now()


def sleep(duration: Duration) -> None:
    """Drop-in for ``time.sleep()``; only moves frozen time when frozen."""
    _default.sleep(duration)


def since(instant: datetime) -> timedelta:
    """Time elapsed since *instant* according to the default clock."""
    return _default.since(instant)


def until(instant: datetime) -> timedelta:
    """Time remaining until *instant* according to the default clock."""
    return _default.until(instant)


def freeze_now() -> datetime:
    """Freeze the default clock.  Only call this from test code."""
    return _default.freeze_now()


def unfreeze() -> None:
    """Unfreeze the default clock."""
    _default.unfreeze()


def is_frozen() -> bool:
    """Whether the default clock is frozen."""
    return _default.is_frozen()


def travel(duration: Duration) -> datetime:
    """Advance the frozen default clock.

    Raises:
        TimeTravelError: If the default clock is not frozen.
    """
    return _default.travel(duration)


def frozen(at: datetime | None = None) -> AbstractContextManager[datetime]:
    """Freeze the default clock for a ``with`` block."""
    return _default.frozen(at)


def reset() -> None:
    """Return the default clock to its initial live state."""
    _default.reset()
