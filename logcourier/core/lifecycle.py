"""Cancellation tokens and tickers for background drain loops.

A drain loop runs until its ``CancellationToken`` fires and wakes up on
every tick of a ``Ticker``.  Both are small seams so that tests can drive
the loop deterministically with a fake ticker instead of real time.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol, runtime_checkable


class Cancelled(Exception):
    """Default cause recorded when a token is cancelled without one."""


class CancellationToken:
    """A thread-safe, one-shot cancellation signal carrying a cause.

    Only the first ``cancel()`` call records its cause; later calls are
    ignored.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._cause: BaseException | None = None

    def cancel(self, cause: BaseException | None = None) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._cause = cause if cause is not None else Cancelled("cancelled")
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def cause(self) -> BaseException | None:
        """The termination reason, or ``None`` while still active."""
        return self._cause

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or *timeout* elapses; return ``cancelled``."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = f"cancelled cause={self._cause!r}" if self.cancelled else "active"
        return f"CancellationToken({state})"


@runtime_checkable
class Ticker(Protocol):
    """Source of periodic wake-ups for a drain loop."""

    def wait(self, cancel: CancellationToken) -> bool:
        """Block until the next tick.

        Returns ``True`` on a tick and ``False`` once *cancel* has fired.
        """
        ...


class IntervalTicker:
    """Fixed-rate ticker.

    Ticks are scheduled on a fixed grid starting when the ticker is
    created.  When a consumer falls behind, missed ticks are dropped
    rather than delivered in a burst.
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self._next = time.monotonic() + interval

    def wait(self, cancel: CancellationToken) -> bool:
        remaining = max(0.0, self._next - time.monotonic())
        if cancel.wait(remaining):
            return False
        now = time.monotonic()
        self._next += self.interval
        if self._next <= now:
            self._next = now + self.interval
        return True
