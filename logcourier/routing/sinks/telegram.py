"""Telegram sink — delivers messages through the Telegram Bot API.

Each call to ``send`` issues one ``sendMessage`` request.  The underlying
``httpx.Client`` keeps a connection pool and is shared by every thread
that delivers through this sink.

Requires a bot token.  The token is part of the request URL, so it is
never logged.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from logcourier.errors import DeliveryError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.telegram.org"
DEFAULT_TIMEOUT_SECONDS = 10.0


class TelegramPayload(BaseModel):
    """A Telegram Bot API ``sendMessage`` payload."""

    model_config = ConfigDict(frozen=True)

    chat_id: int
    text: str
    disable_notification: bool = False
    parse_mode: str | None = None

    def to_request(self) -> dict[str, Any]:
        """Return the JSON body, leaving out an unset ``parse_mode``."""
        return self.model_dump(exclude_none=True)


class TelegramSink:
    """Sends messages to Telegram chats.

    Parameters
    ----------
    bot_token:
        The Telegram bot token.
    api_url:
        Base URL of the Bot API.  Overridable for self-hosted API servers.
    timeout_seconds:
        Per-request timeout.
    client:
        An ``httpx.Client`` to use instead of creating one.  A supplied
        client is not closed by :meth:`close`.
    """

    def __init__(
        self,
        bot_token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout_seconds))

    @property
    def sink_name(self) -> str:
        return "telegram"

    def build_api_url(self, method: str = "sendMessage") -> str:
        """Return the Bot API URL for *method*."""
        return f"{self._api_url}/bot{self._bot_token}/{method}"

    @staticmethod
    def build_payload(
        chat_id: int,
        text: str,
        *,
        notify: bool,
        parse_mode: str | None = None,
    ) -> TelegramPayload:
        return TelegramPayload(
            chat_id=chat_id,
            text=text,
            disable_notification=not notify,
            parse_mode=parse_mode,
        )

    def send(
        self,
        chat_id: int,
        text: str,
        *,
        notify: bool,
        parse_mode: str | None = None,
    ) -> None:
        """Send one message.

        Raises
        ------
        DeliveryError
            On network errors, non-2xx responses and ``{"ok": false}``
            replies.
        """
        payload = self.build_payload(chat_id, text, notify=notify, parse_mode=parse_mode)
        self._call("sendMessage", payload.to_request(), chat_id=chat_id)
        logger.debug("TelegramSink: delivered message to chat %d", chat_id)

    def verify(self) -> str:
        """Check the token with ``getMe`` and return the bot's username."""
        result = self._call("getMe", None, chat_id=0)
        return str(result.get("username", ""))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> TelegramSink:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TelegramSink(api_url={self._api_url!r})"

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _call(
        self, method: str, body: dict[str, Any] | None, *, chat_id: int
    ) -> dict[str, Any]:
        url = self.build_api_url(method)
        try:
            if body is None:
                response = self._client.get(url)
            else:
                response = self._client.post(url, json=body)
        except httpx.HTTPError as exc:
            # The exception text may embed the URL, and with it the token.
            raise DeliveryError(
                chat_id, f"{method} request failed: {type(exc).__name__}"
            ) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code >= 400 or not data.get("ok", False):
            description = data.get("description") or response.reason_phrase
            raise DeliveryError(
                chat_id, f"{method} returned {response.status_code}: {description}"
            )
        result = data.get("result")
        return result if isinstance(result, dict) else {}
