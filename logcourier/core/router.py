"""EntryRouter — decides whether, how urgently and how each entry is delivered.

The router is the backend a logging frontend writes to.  For every entry
it applies the level policy, merges the handle's inherited fields, and
hands the entry to the dispatcher using one of three strategies:

sync
    Deliver on the caller's thread.  The caller blocks for every chat and
    receives the last ``DeliveryError``.
async
    Start an independent daemon thread per entry and return at once.
    Failures are logged only; there is no way to observe them from
    application code.
queued
    Put the entry on a bounded queue drained by a background
    ``DrainLoop``.  ``accept`` blocks while the queue is full.

The mode is fixed when the router is built.  Handles derived with
:meth:`EntryRouter.with_fields` share configuration, sink, queue and drain
loop with their parent but carry their own inherited fields.
"""

from __future__ import annotations

import copy
import logging
import queue
import threading
from collections.abc import Iterable, Sequence
from typing import Any

from logcourier.core.drain_loop import DrainLoop
from logcourier.core.lifecycle import (
    CancellationToken,
    Cancelled,
    IntervalTicker,
    Ticker,
)
from logcourier.errors import ConfigurationError, DeliveryError
from logcourier.models.config import DeliveryMode, RoutingConfig
from logcourier.models.entries import Field, Level, LogEntry, QueuedEntry
from logcourier.routing.dispatcher import MessageDispatcher
from logcourier.routing.sinks import MessageSink
from logcourier.routing.sinks.telegram import TelegramSink

logger = logging.getLogger(__name__)


class EntryRouter:
    """Routes log entries to Telegram chats.

    Parameters
    ----------
    bot_token:
        Telegram bot token.  Must not be empty.
    chat_ids:
        Destination chats, in delivery order.  Must not be empty.
    config:
        Routing options; defaults to ``RoutingConfig()`` (WARN and above,
        async delivery, every message notifies).
    sink:
        Transport to send through.  Defaults to a ``TelegramSink`` built
        from *bot_token*.
    cancel:
        Cancellation token governing the drain loop in queued mode.  When
        omitted the router owns one and cancels it in :meth:`close`.
    ticker:
        Replaces the interval ticker of the drain loop.
    close_sink:
        Whether :meth:`close` also closes the sink.  Defaults to ``True``
        only for the sink the router creates itself.
    """

    def __init__(
        self,
        bot_token: str,
        chat_ids: Sequence[int],
        config: RoutingConfig | None = None,
        *,
        sink: MessageSink | None = None,
        cancel: CancellationToken | None = None,
        ticker: Ticker | None = None,
        close_sink: bool | None = None,
    ) -> None:
        if not bot_token:
            raise ConfigurationError("bot access token not defined")
        if not chat_ids:
            raise ConfigurationError("chat ids not defined")

        self._config = config or RoutingConfig()
        self._chat_ids = tuple(chat_ids)
        self._policy = self._config.level_policy()
        self._owns_sink = close_sink if close_sink is not None else sink is None
        self._sink: MessageSink = sink or TelegramSink(bot_token)
        self._dispatcher = MessageDispatcher(
            self._sink,
            self._chat_ids,
            self._policy,
            formatter=self._config.formatter,
            parse_mode=self._config.parse_mode,
        )
        self._inherited: tuple[Field, ...] = ()

        self._cancel = cancel or CancellationToken()
        self._queue: queue.Queue[QueuedEntry] | None = None
        self._drain_loop: DrainLoop | None = None
        if self._config.queue is not None:
            self._queue = queue.Queue(maxsize=self._config.queue.size)
            self._drain_loop = DrainLoop(
                self._queue,
                self._deliver_queued,
                ticker or IntervalTicker(self._config.queue.interval),
            )
            self._drain_loop.start(self._cancel)

        logger.info(
            "EntryRouter ready: mode=%s chats=%d sink=%s",
            self.mode.value,
            len(self._chat_ids),
            self._sink.sink_name,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def mode(self) -> DeliveryMode:
        return self._config.mode

    @property
    def config(self) -> RoutingConfig:
        return self._config

    @property
    def chat_ids(self) -> tuple[int, ...]:
        return self._chat_ids

    @property
    def inherited_fields(self) -> tuple[Field, ...]:
        return self._inherited

    @property
    def pending(self) -> int:
        """Number of entries waiting in the queue (always 0 unless queued)."""
        return self._queue.qsize() if self._queue is not None else 0

    @property
    def drain_loop(self) -> DrainLoop | None:
        return self._drain_loop

    # ------------------------------------------------------------------
    # Backend interface
    # ------------------------------------------------------------------

    def enabled(self, level: Level) -> bool:
        return self._policy.eligible(level)

    def accept(self, entry: LogEntry, fields: Iterable[Field] = ()) -> None:
        """Deliver *entry* using the router's delivery mode.

        Raises
        ------
        DeliveryError
            Sync mode only: the last per-chat failure.
        """
        if not self.enabled(entry.level):
            return
        resolved = tuple(fields) + self._inherited

        if self._queue is not None:
            self._queue.put(QueuedEntry(entry=entry, fields=resolved))
        elif self.mode is DeliveryMode.ASYNC:
            threading.Thread(
                target=self._deliver_quietly,
                args=(entry, resolved),
                name="logcourier-send",
                daemon=True,
            ).start()
        else:
            self._dispatcher.dispatch(entry, resolved)

    def with_fields(self, fields: Iterable[Field]) -> EntryRouter:
        """Return a handle whose entries also carry *fields*."""
        derived = copy.copy(self)
        derived._inherited = self._inherited + tuple(fields)
        return derived

    def flush(self) -> None:
        """Send everything currently queued.  No-op outside queued mode."""
        if self._drain_loop is not None:
            self._drain_loop.drain()

    def close(self, timeout: float | None = None) -> None:
        """Stop the drain loop after its final drain and release the sink.

        Handles derived from this router share the loop and the sink, so
        closing any of them closes all of them.
        """
        if self._drain_loop is not None:
            self._cancel.cancel(Cancelled("router closed"))
            self._drain_loop.join(timeout)
        if self._owns_sink:
            closer = getattr(self._sink, "close", None)
            if callable(closer):
                closer()

    def __enter__(self) -> EntryRouter:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"EntryRouter(mode={self.mode.value}, chats={list(self._chat_ids)}, "
            f"inherited_fields={len(self._inherited)})"
        )

    # ------------------------------------------------------------------
    # Internal: delivery paths
    # ------------------------------------------------------------------

    def _deliver_queued(self, item: QueuedEntry) -> None:
        self._dispatcher.dispatch(item.entry, item.fields)

    def _deliver_quietly(self, entry: LogEntry, fields: tuple[Field, ...]) -> None:
        try:
            self._dispatcher.dispatch(entry, fields)
        except DeliveryError:
            # Already reported per chat by the dispatcher.
            pass
        except Exception:
            logger.exception("Async delivery of %s entry failed", entry.level.label)
