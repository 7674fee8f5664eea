"""Buffer sink — records Telegram payloads in memory instead of sending them.

Used for dry runs and tests.  Payloads are kept in delivery order until
``flush()`` returns and clears them.
"""

from __future__ import annotations

import logging
import threading

from logcourier.routing.sinks.telegram import TelegramPayload, TelegramSink

logger = logging.getLogger(__name__)


class BufferSink:
    """Builds ``sendMessage`` payloads and keeps them in a buffer.

    This sink does NOT send HTTP requests.  It is safe to use from several
    delivery threads at once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending_payloads: list[TelegramPayload] = []

    @property
    def sink_name(self) -> str:
        return "buffer"

    def send(
        self,
        chat_id: int,
        text: str,
        *,
        notify: bool,
        parse_mode: str | None = None,
    ) -> None:
        payload = TelegramSink.build_payload(
            chat_id, text, notify=notify, parse_mode=parse_mode
        )
        with self._lock:
            self._pending_payloads.append(payload)
        logger.debug("BufferSink: buffered message for chat %d", chat_id)

    def flush(self) -> list[TelegramPayload]:
        """Return and clear all pending payloads."""
        with self._lock:
            payloads = list(self._pending_payloads)
            self._pending_payloads.clear()
        return payloads

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending_payloads)
