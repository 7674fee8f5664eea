"""Logging backend protocol and composite backends.

A logging frontend talks to backends through four operations: ``enabled``
to skip work for ineligible levels, ``accept`` to write an entry,
``with_fields`` to derive a handle carrying context fields, and ``flush``
at shutdown.  ``EntryRouter`` implements this protocol; ``TeeBackend`` lets
it run next to other backends such as ``ConsoleBackend``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from rich.console import Console

from logcourier.core.levels import LevelPolicy
from logcourier.models.entries import Field, Formatter, Level, LogEntry
from logcourier.routing.formatting import detailed_formatter

logger = logging.getLogger(__name__)


@runtime_checkable
class LogBackend(Protocol):
    """Minimal capability set a pluggable logging backend exposes."""

    def enabled(self, level: Level) -> bool:
        ...

    def accept(self, entry: LogEntry, fields: Iterable[Field] = ()) -> None:
        ...

    def with_fields(self, fields: Iterable[Field]) -> LogBackend:
        ...

    def flush(self) -> None:
        ...


class TeeBackend:
    """Writes every entry to each backend that is enabled for its level.

    A failing backend does not stop the others; the last error is raised
    once every backend has been tried.
    """

    def __init__(self, backends: Sequence[LogBackend]) -> None:
        self._backends = tuple(backends)

    @property
    def backends(self) -> tuple[LogBackend, ...]:
        return self._backends

    def enabled(self, level: Level) -> bool:
        return any(backend.enabled(level) for backend in self._backends)

    def accept(self, entry: LogEntry, fields: Iterable[Field] = ()) -> None:
        resolved = tuple(fields)
        last_error: Exception | None = None
        for backend in self._backends:
            if not backend.enabled(entry.level):
                continue
            try:
                backend.accept(entry, resolved)
            except Exception as exc:  # noqa: BLE001
                last_error = exc
        if last_error is not None:
            raise last_error

    def with_fields(self, fields: Iterable[Field]) -> TeeBackend:
        resolved = tuple(fields)
        return TeeBackend([backend.with_fields(resolved) for backend in self._backends])

    def flush(self) -> None:
        last_error: Exception | None = None
        for backend in self._backends:
            try:
                backend.flush()
            except Exception as exc:  # noqa: BLE001
                last_error = exc
        if last_error is not None:
            raise last_error


class ConsoleBackend:
    """Prints formatted entries to a Rich console."""

    _LEVEL_STYLES = {
        Level.DEBUG: "dim",
        Level.INFO: "cyan",
        Level.WARN: "yellow",
        Level.ERROR: "red",
        Level.FATAL: "bold red",
        Level.PANIC: "bold white on red",
    }

    def __init__(
        self,
        console: Console | None = None,
        *,
        level: Level = Level.DEBUG,
        formatter: Formatter | None = None,
        inherited: tuple[Field, ...] = (),
    ) -> None:
        self._console = console or Console(stderr=True)
        self._level = level
        self._policy = LevelPolicy.threshold(level)
        self._formatter = formatter or detailed_formatter
        self._inherited = inherited

    def enabled(self, level: Level) -> bool:
        return self._policy.eligible(level)

    def accept(self, entry: LogEntry, fields: Iterable[Field] = ()) -> None:
        if not self.enabled(entry.level):
            return
        text = self._formatter(entry, tuple(fields) + self._inherited)
        self._console.print(
            text, style=self._LEVEL_STYLES.get(entry.level, ""), markup=False
        )

    def with_fields(self, fields: Iterable[Field]) -> ConsoleBackend:
        return ConsoleBackend(
            self._console,
            level=self._level,
            formatter=self._formatter,
            inherited=self._inherited + tuple(fields),
        )

    def flush(self) -> None:
        self._console.file.flush()
