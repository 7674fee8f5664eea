"""Queue drain loop — sends batched entries on a fixed interval.

One ``DrainLoop`` runs per queued-mode router family, on its own thread.
Producers put entries on a bounded ``queue.Queue``; the loop only ever
removes entries, so it never waits on producers.  A failed delivery is
logged and dropped; entries are never requeued.

Lifecycle::

    NEW --start()--> STARTED --cancel--> DRAINING --> STOPPED

The final drain happens exactly once, after the cancellation token fires.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from enum import Enum

from logcourier.core.lifecycle import CancellationToken, Ticker
from logcourier.models.entries import QueuedEntry

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    NEW = "new"
    STARTED = "started"
    DRAINING = "draining"
    STOPPED = "stopped"


class DrainLoop:
    """Drains a queue of ``QueuedEntry`` items on every tick.

    Parameters
    ----------
    entries:
        The bounded queue shared with producers.
    deliver:
        Sends one queued entry to every destination.  May raise.
    ticker:
        Wakes the loop up; see :class:`~logcourier.core.lifecycle.Ticker`.
    """

    def __init__(
        self,
        entries: queue.Queue[QueuedEntry],
        deliver: Callable[[QueuedEntry], None],
        ticker: Ticker,
    ) -> None:
        self._entries = entries
        self._deliver = deliver
        self._ticker = ticker
        self._state = LoopState.NEW
        self._state_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self.termination_reason: BaseException | None = None

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread

    # ------------------------------------------------------------------
    # Draining
    # ------------------------------------------------------------------

    def drain(self) -> int:
        """Send every entry currently in the queue, oldest first.

        Safe to call from any thread while producers are still active;
        entries added during the drain are picked up by the same pass.
        Returns the number of entries attempted.
        """
        attempted = 0
        while True:
            try:
                item = self._entries.get_nowait()
            except queue.Empty:
                break
            attempted += 1
            try:
                self._deliver(item)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Dropping queued %s entry from %r: %s",
                    item.entry.level.label,
                    item.entry.logger_name,
                    exc,
                )
            finally:
                self._entries.task_done()
        if attempted:
            logger.debug("Drained %d queued entries", attempted)
        return attempted

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self, cancel: CancellationToken) -> BaseException | None:
        """Drain on every tick until *cancel* fires, then drain once more.

        Returns the token's cancellation cause, which is also recorded as
        ``termination_reason``.
        """
        self._set_state(LoopState.STARTED)
        while self._ticker.wait(cancel):
            self.drain()

        self._set_state(LoopState.DRAINING)
        self.drain()
        self.termination_reason = cancel.cause
        self._set_state(LoopState.STOPPED)
        logger.info("Drain loop stopped: %r", self.termination_reason)
        return self.termination_reason

    def start(self, cancel: CancellationToken) -> threading.Thread:
        """Run the loop on a new daemon thread.  A loop starts only once."""
        with self._state_lock:
            if self._thread is not None or self._state is not LoopState.NEW:
                raise RuntimeError("drain loop has already been started")
            self._thread = threading.Thread(
                target=self.run,
                args=(cancel,),
                name="logcourier-drain",
                daemon=True,
            )
        self._thread.start()
        return self._thread

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _set_state(self, state: LoopState) -> None:
        with self._state_lock:
            self._state = state
