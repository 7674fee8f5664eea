"""Shared test fixtures for logcourier."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Any

import pytest
from fakes import ManualTicker, RecordingSink

from logcourier.core.lifecycle import CancellationToken
from logcourier.models.entries import Level, LogEntry


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def manual_ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def cancel_token() -> Iterator[CancellationToken]:
    token = CancellationToken()
    yield token
    token.cancel()


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """Factory fixture: build a LogEntry with sensible defaults."""

    def _factory(
        level: Level = Level.ERROR,
        message: str = "something broke",
        **overrides: Any,
    ) -> LogEntry:
        defaults: dict[str, Any] = {
            "level": level,
            "message": message,
            "logger_name": "payments",
            "timestamp": datetime(2007, 1, 1, 11, 25, 59, tzinfo=timezone.utc),
        }
        defaults.update(overrides)
        return LogEntry(**defaults)

    return _factory


@pytest.fixture
def entry(make_entry: Callable[..., LogEntry]) -> LogEntry:
    """Convenience: a ready-made ERROR entry."""
    return make_entry()
