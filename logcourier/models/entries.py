"""Log entry models — levels, fields and the records routed to chats.

Entries are produced by the host logging framework and are read-only to
the router.  Every model here is a frozen Pydantic model.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class Level(IntEnum):
    """Severity levels, ordered from least to most severe."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    PANIC = 5

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str | int | Level) -> Level:
        """Resolve a level from its name, number or an existing ``Level``.

        Names are case-insensitive; ``"warning"`` and ``"critical"`` are
        accepted as aliases so stdlib level names can be used in config.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        name = _LEVEL_ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError as exc:
            raise ValueError(f"Unknown level: {value!r}") from exc

    @classmethod
    def from_stdlib(cls, levelno: int) -> Level:
        """Map a :mod:`logging` numeric level onto a ``Level``."""
        if levelno >= logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_LEVEL_ALIASES = {"WARNING": "WARN", "CRITICAL": "FATAL"}

# Total order used by threshold policies.
ALL_LEVELS: tuple[Level, ...] = tuple(Level)


def level_threshold(floor: Level) -> tuple[Level, ...]:
    """Return every level equal to or above *floor*, in order."""
    for index, level in enumerate(ALL_LEVELS):
        if level == floor:
            return ALL_LEVELS[index:]
    return ()


class Field(BaseModel):
    """An opaque key/value attribute attached to a log entry."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: Any = None


class CallSite(BaseModel):
    """Where a log call was made."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int = 0
    function: str = ""

    def __str__(self) -> str:
        location = f"{self.file}:{self.line}"
        return f"{location} ({self.function})" if self.function else location


class LogEntry(BaseModel):
    """One discrete log record."""

    model_config = ConfigDict(frozen=True)

    level: Level
    message: str
    logger_name: str = ""
    timestamp: datetime = PydanticField(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    caller: CallSite | None = None
    stack: str | None = None


class QueuedEntry(BaseModel):
    """An entry waiting in the delivery queue with its resolved fields."""

    model_config = ConfigDict(frozen=True)

    entry: LogEntry
    fields: tuple[Field, ...] = ()


def fields_from_mapping(values: Mapping[str, Any]) -> tuple[Field, ...]:
    """Build an ordered field tuple from a plain mapping."""
    return tuple(Field(key=str(key), value=value) for key, value in values.items())


# Pure function turning an entry and its resolved fields into message text.
Formatter = Callable[[LogEntry, Sequence[Field]], str]
