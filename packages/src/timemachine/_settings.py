"""Configuration via pydantic-settings.

Configuration is loaded from environment variables and/or a ``.env``
file.  All variables carry the ``TIMEMACHINE_`` prefix and nested models
use ``__`` as the delimiter, e.g. ``TIMEMACHINE_CLOCK__REFREEZE=error``.

The schema covers two concerns:

* **Clock** — how a :class:`~timemachine.TimeMachine` behaves when
  frozen twice and whether reads take the state lock.
* **Logging** — level, format, optional file sink, rotation.

Nothing here is read implicitly: a configured machine is built with
:meth:`TimeMachine.from_settings(Settings()) <timemachine.TimeMachine.from_settings>`
and installed with :func:`timemachine.set_default`.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

RefreezePolicy = Literal["reset", "keep", "error"]
"""What ``freeze_now()`` does when the clock is already frozen.

- ``"reset"`` — re-capture the real time, discarding prior travel.
- ``"keep"`` — leave the frozen time untouched and return it.
- ``"error"`` — raise :class:`~timemachine.AlreadyFrozenError`.
"""

# -------------------------------------------------------------------
# Sub-models (BaseModel, NOT BaseSettings — nested via composition)
# -------------------------------------------------------------------


class ClockSettings(BaseModel):
    """Behaviour of a :class:`~timemachine.TimeMachine`.

    Environment variables (with ``__`` nesting)::

        TIMEMACHINE_CLOCK__REFREEZE=keep
        TIMEMACHINE_CLOCK__LOCKED_READS=false
    """

    refreeze: RefreezePolicy = Field(
        default="reset",
        description=(
            "Policy for freeze_now() while already frozen: "
            "'reset' re-captures the real time, 'keep' is a no-op, "
            "'error' raises AlreadyFrozenError."
        ),
    )
    locked_reads: bool = Field(
        default=True,
        description=(
            "Take the state lock for now() and is_frozen().  Turning it "
            "off trades cross-thread visibility for lock-free reads."
        ),
    )


class LoggingSettings(BaseModel):
    """Logging configuration.

    When ``file`` is set, logs are also written to a rotating file
    (size-based rotation, ``backup_count`` generations kept).  When
    ``None``, logs go to stderr only.

    ``format`` selects ``"json"`` (one JSON object per line) or
    ``"text"`` (human-readable, the default for a test utility).
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Root log level.",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format: 'json' lines or plain 'text'.",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path. ``None`` means stderr only.",
    )
    max_file_size_mb: Annotated[int, Field(ge=1)] = Field(
        default=10,
        description=(
            "Maximum log file size in megabytes before rotation. "
            "Only applies when ``file`` is set."
        ),
    )
    backup_count: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Number of rotated log files to keep.",
    )


# -------------------------------------------------------------------
# Root settings
# -------------------------------------------------------------------


class Settings(BaseSettings):
    """Root settings for timemachine.

    Example ``.env``::

        TIMEMACHINE_CLOCK__REFREEZE=error
        TIMEMACHINE_LOGGING__LEVEL=DEBUG
        TIMEMACHINE_LOGGING__FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="TIMEMACHINE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    clock: ClockSettings = Field(
        default_factory=ClockSettings,
        description="Clock behaviour.",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration.",
    )
