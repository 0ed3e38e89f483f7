"""Exception hierarchy for timemachine.

Both concrete errors signal *programmer* mistakes in test code, not
runtime conditions a caller is expected to recover from.  They are
raised synchronously at the call site and never returned as values.
Tests that want to assert on them use ``pytest.raises``::

    with pytest.raises(TimeTravelError):
        machine.travel(timedelta(microseconds=1))

Both also subclass :class:`RuntimeError`, so generic handlers that
guard against "used in the wrong state" errors catch them as well.
"""

from __future__ import annotations


class TimeMachineError(Exception):
    """Base class for every error raised by timemachine."""


class TimeTravelError(TimeMachineError, RuntimeError):
    """``travel()`` was called while the clock is live (not frozen)."""

    def __init__(
        self, message: str = "You can only time travel after calling freeze_now()"
    ) -> None:
        super().__init__(message)


class AlreadyFrozenError(TimeMachineError, RuntimeError):
    """The clock was frozen again under the ``"error"`` refreeze policy."""

    def __init__(self, frozen_time: object) -> None:
        super().__init__(
            f"Clock is already frozen at {frozen_time}; call unfreeze() first"
        )
        self.frozen_time = frozen_time
