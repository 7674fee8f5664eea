"""Message formatters — turn a log entry into chat message text.

A formatter is any pure callable ``(entry, fields) -> str``.  It must not
raise for a well-formed entry and must not have side effects, because it
may run on the logging call site, on a delivery thread, or on the drain
loop.
"""

from __future__ import annotations

from collections.abc import Sequence

from logcourier.models.entries import Field, LogEntry

DEFAULT_LOGGER_NAME = "logcourier"
TIMESTAMP_FORMAT = "%H:%M:%S %d.%m.%Y"


def default_formatter(entry: LogEntry, fields: Sequence[Field]) -> str:
    """Fixed four-line layout: logger name, timestamp, level, message.

    Examples
    --------
    ::

        Logger: payments
        11:25:59 01.01.2007
        error
        card declined
    """
    logger_name = entry.logger_name or DEFAULT_LOGGER_NAME
    return "\n".join(
        [
            f"Logger: {logger_name}",
            entry.timestamp.strftime(TIMESTAMP_FORMAT),
            entry.level.label,
            entry.message,
        ]
    )


def extract_detail_lines(entry: LogEntry, fields: Sequence[Field]) -> list[str]:
    """Return ``"key: value"`` lines for fields, the caller and the stack.

    Only present values are included.
    """
    lines = [f"{field.key}: {field.value}" for field in fields]
    if entry.caller is not None:
        lines.append(f"caller: {entry.caller}")
    if entry.stack:
        lines.append(f"stack:\n{entry.stack}")
    return lines


def detailed_formatter(entry: LogEntry, fields: Sequence[Field]) -> str:
    """The default layout followed by fields, caller and stack trace."""
    details = extract_detail_lines(entry, fields)
    base = default_formatter(entry, fields)
    if not details:
        return base
    return base + "\n\n" + "\n".join(details)
