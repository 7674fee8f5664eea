"""MessageDispatcher — routes one entry to ALL configured chats.

Every entry dispatched through this module is formatted once and sent to
every destination in order.  A failure for one chat is logged and does
not prevent delivery to the remaining chats.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from logcourier.core.levels import LevelPolicy
from logcourier.errors import DeliveryError
from logcourier.models.entries import Field, Formatter, LogEntry
from logcourier.routing.formatting import default_formatter

if TYPE_CHECKING:
    from logcourier.routing.sinks import MessageSink

logger = logging.getLogger(__name__)


class MessageDispatcher:
    """Formats entries and sends them to every chat through one sink.

    Usage
    -----
    >>> dispatcher = MessageDispatcher(sink, [1001, 1002], policy)
    >>> dispatcher.dispatch(entry, fields)
    """

    def __init__(
        self,
        sink: MessageSink,
        chat_ids: Sequence[int],
        policy: LevelPolicy,
        *,
        formatter: Formatter | None = None,
        parse_mode: str | None = None,
    ) -> None:
        self._sink = sink
        self._chat_ids = tuple(chat_ids)
        self._policy = policy
        self._formatter = formatter or default_formatter
        self._parse_mode = parse_mode

    @property
    def sink(self) -> MessageSink:
        return self._sink

    @property
    def chat_ids(self) -> tuple[int, ...]:
        return self._chat_ids

    def dispatch(self, entry: LogEntry, fields: Sequence[Field] = ()) -> None:
        """Send *entry* to ALL chats.

        Raises
        ------
        DeliveryError
            The last failure observed, after every chat was attempted.
        """
        text = self._formatter(entry, fields)
        notify = self._policy.urgent(entry.level)

        last_error: DeliveryError | None = None
        failures = 0
        for chat_id in self._chat_ids:
            try:
                self._sink.send(
                    chat_id, text, notify=notify, parse_mode=self._parse_mode
                )
            except DeliveryError as exc:
                last_error = exc
            except Exception as exc:  # noqa: BLE001
                last_error = DeliveryError(chat_id, str(exc))
                last_error.__cause__ = exc
            else:
                continue
            failures += 1
            logger.error(
                "Sink %s failed for chat %d: %s",
                self._sink.sink_name,
                chat_id,
                last_error.reason,
            )

        if last_error is not None:
            if failures < len(self._chat_ids):
                logger.warning(
                    "%s entry from %r: %d/%d chats succeeded, %d failed",
                    entry.level.label,
                    entry.logger_name,
                    len(self._chat_ids) - failures,
                    len(self._chat_ids),
                    failures,
                )
            raise last_error
