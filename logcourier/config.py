"""Environment-driven settings for building a router.

Reads from a ``.env`` file and ``LOGCOURIER_*`` environment variables.

Examples
--------
Configure via environment::

    export LOGCOURIER_BOT_TOKEN=123456:ABC-DEF
    export LOGCOURIER_CHAT_IDS='[-1001234567890]'
    export LOGCOURIER_LEVEL=error
    export LOGCOURIER_DELIVERY=queued
    export LOGCOURIER_FLUSH_INTERVAL=5

Or via .env file::

    LOGCOURIER_BOT_TOKEN=123456:ABC-DEF
    LOGCOURIER_CHAT_IDS=[-1001234567890, 42]
    LOGCOURIER_NOTIFY_ON=["error", "fatal"]
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from logcourier.core.router import EntryRouter
from logcourier.models.config import DeliveryMode, RoutingConfig
from logcourier.routing.sinks import MessageSink
from logcourier.routing.sinks.telegram import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT_SECONDS,
    TelegramSink,
)


class CourierSettings(BaseSettings):
    """Settings with environment variable overrides.

    ``delivery`` selects exactly one mode, so async and queued delivery
    cannot both be requested from the environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOGCOURIER_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram
    bot_token: str = ""
    chat_ids: list[int] = []
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    # Routing
    level: str = "warn"
    exact_level: str | None = None
    delivery: DeliveryMode = DeliveryMode.ASYNC
    queue_size: int = 100
    flush_interval: float = 5.0

    # Notifications and formatting
    disable_notification: bool = False
    notify_on: list[str] | None = None
    parse_mode: str | None = None

    # Observability for logcourier's own logger
    log_level: str = "INFO"

    @property
    def masked_token(self) -> str:
        """The bot token with all but its bot id hidden."""
        if not self.bot_token:
            return ""
        bot_id, _, secret = self.bot_token.partition(":")
        return f"{bot_id}:{'*' * len(secret)}" if secret else "*" * len(bot_id)

    def to_routing_config(self) -> RoutingConfig:
        queued = self.delivery is DeliveryMode.QUEUED
        return RoutingConfig.from_options(
            level=self.level,
            exact_level=self.exact_level,
            async_delivery=None if queued else self.delivery is DeliveryMode.ASYNC,
            queue_interval=self.flush_interval if queued else None,
            queue_size=self.queue_size if queued else None,
            disable_notification=self.disable_notification,
            notify_on=self.notify_on,
            parse_mode=self.parse_mode,
        )

    def build_sink(self) -> TelegramSink:
        return TelegramSink(
            self.bot_token,
            api_url=self.api_url,
            timeout_seconds=self.timeout_seconds,
        )

    def build_router(self, sink: MessageSink | None = None) -> EntryRouter:
        """Build an ``EntryRouter`` from these settings.

        Raises ``ConfigurationError`` for a missing token or chat list.
        """
        config = self.to_routing_config()
        owns_sink = sink is None and bool(self.bot_token and self.chat_ids)
        if owns_sink:
            sink = self.build_sink()
        return EntryRouter(
            self.bot_token, self.chat_ids, config, sink=sink, close_sink=owns_sink
        )
