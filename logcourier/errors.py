"""Exception taxonomy for logcourier.

Configuration errors are raised synchronously while a router is being
built and never afterwards.  Delivery errors are per-destination transport
failures; only the synchronous delivery path surfaces them to the caller.
"""

from __future__ import annotations


class LogCourierError(RuntimeError):
    """Base class for every error raised by logcourier."""


class ConfigurationError(LogCourierError):
    """Raised when a router cannot be built from the supplied options.

    Covers a missing bot token, an empty destination list, and mutually
    exclusive delivery modes (async together with queued).
    """


class DeliveryError(LogCourierError):
    """Raised when a message could not be delivered to one chat."""

    def __init__(self, chat_id: int, reason: str) -> None:
        super().__init__(f"failed to send message to chat {chat_id}: {reason}")
        self.chat_id = chat_id
        self.reason = reason
