"""timemachine.

A testing-friendly drop-in replacement for the wall clock: freeze,
advance and resume time without real delays.
"""

from importlib.metadata import PackageNotFoundError, version

from timemachine._clock import ClockPort, SystemClock, WallClockPort
from timemachine._errors import AlreadyFrozenError, TimeMachineError, TimeTravelError
from timemachine._facade import (
    freeze_now,
    frozen,
    get_default,
    is_frozen,
    now,
    reset,
    set_default,
    since,
    sleep,
    travel,
    unfreeze,
    until,
)
from timemachine._logging import ClockFormatter, JsonFormatter, configure_logging
from timemachine._machine import ClockState, Duration, TimeMachine
from timemachine._settings import (
    ClockSettings,
    LoggingSettings,
    RefreezePolicy,
    Settings,
)

try:
    __version__ = version("timemachine")
except PackageNotFoundError:
    # Last resort fallback for source checkouts without metadata
    __version__ = "0.0.0+unknown"

__all__ = [
    # Version
    "__version__",
    # Clock
    "ClockPort",
    "ClockState",
    "Duration",
    "SystemClock",
    "TimeMachine",
    "WallClockPort",
    # Default facade
    "freeze_now",
    "frozen",
    "get_default",
    "is_frozen",
    "now",
    "reset",
    "set_default",
    "since",
    "sleep",
    "travel",
    "unfreeze",
    "until",
    # Errors
    "AlreadyFrozenError",
    "TimeMachineError",
    "TimeTravelError",
    # Logging
    "ClockFormatter",
    "JsonFormatter",
    "configure_logging",
    # Settings
    "ClockSettings",
    "LoggingSettings",
    "RefreezePolicy",
    "Settings",
]
