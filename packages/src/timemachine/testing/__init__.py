"""Public test-support utilities for timemachine.

Provided symbols:

- :class:`FakeClock` — deterministic wall clock, usable as the source
  of a :class:`~timemachine.TimeMachine`.
- :data:`EPOCH` — the instant a fresh :class:`FakeClock` starts at.
- :func:`make_settings` — factory for ``Settings`` without ``.env`` files.

The pytest fixtures live in :mod:`timemachine.testing._plugin` and are
registered automatically through the ``pytest11`` entry point.
"""

from timemachine.testing._clock import EPOCH, FakeClock
from timemachine.testing._settings import make_settings

__all__ = [
    "EPOCH",
    "FakeClock",
    "make_settings",
]
