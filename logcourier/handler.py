"""Bridge from the standard :mod:`logging` module to a logcourier backend.

Attach a ``CourierHandler`` to any logger to forward its records::

    router = EntryRouter(token, [chat_id])
    logging.getLogger().addHandler(CourierHandler(router))
    logging.getLogger("payments").error(
        "card declined", extra={"fields": {"order": 42}}
    )

Records emitted by logcourier itself are never forwarded, otherwise a
failing delivery would log an error that triggers another delivery.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone

from logcourier.core.backend import LogBackend
from logcourier.models.entries import (
    CallSite,
    Field,
    Level,
    LogEntry,
    fields_from_mapping,
)

FIELDS_ATTR = "fields"
_OWN_LOGGER = "logcourier"
_STACK_FORMATTER = logging.Formatter()


class CourierHandler(logging.Handler):
    """``logging.Handler`` writing records to a ``LogBackend``."""

    def __init__(self, backend: LogBackend, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.backend = backend

    def emit(self, record: logging.LogRecord) -> None:
        if _is_own_record(record):
            return
        level = Level.from_stdlib(record.levelno)
        if not self.backend.enabled(level):
            return
        try:
            entry = self.to_entry(record, level)
            self.backend.accept(entry, record_fields(record))
        except Exception:
            self.handleError(record)

    def to_entry(self, record: logging.LogRecord, level: Level) -> LogEntry:
        stack = None
        if record.exc_info:
            stack = (self.formatter or _STACK_FORMATTER).formatException(record.exc_info)
        elif record.stack_info:
            stack = record.stack_info
        return LogEntry(
            level=level,
            message=record.getMessage(),
            logger_name="" if record.name == "root" else record.name,
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
            caller=CallSite(
                file=record.pathname, line=record.lineno, function=record.funcName or ""
            ),
            stack=stack,
        )

    def flush(self) -> None:
        self.backend.flush()

    def close(self) -> None:
        try:
            self.backend.flush()
            closer = getattr(self.backend, "close", None)
            if callable(closer):
                closer()
        finally:
            super().close()


def record_fields(record: logging.LogRecord) -> tuple[Field, ...]:
    """Read structured fields passed as ``extra={"fields": ...}``.

    Accepts a mapping or an iterable of ``Field`` objects.
    """
    raw = getattr(record, FIELDS_ATTR, None)
    if raw is None:
        return ()
    if isinstance(raw, Mapping):
        return fields_from_mapping(raw)
    return tuple(item for item in raw if isinstance(item, Field))


def _is_own_record(record: logging.LogRecord) -> bool:
    return record.name == _OWN_LOGGER or record.name.startswith(_OWN_LOGGER + ".")
