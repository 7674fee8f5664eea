"""logcourier: forward structured log entries to Telegram chats.

Entries are filtered by level, flagged as notifying or silent, formatted,
and delivered synchronously, on a fire-and-forget thread, or in batches
drained on an interval.
"""

import logging

__version__ = "0.1.0"
__description__ = "Route structured log entries to Telegram chats."

from logcourier.core.backend import ConsoleBackend, LogBackend, TeeBackend
from logcourier.core.lifecycle import CancellationToken
from logcourier.core.router import EntryRouter
from logcourier.errors import ConfigurationError, DeliveryError, LogCourierError
from logcourier.handler import CourierHandler
from logcourier.models import DeliveryMode, Field, Level, LogEntry, RoutingConfig

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CancellationToken",
    "ConfigurationError",
    "ConsoleBackend",
    "CourierHandler",
    "DeliveryError",
    "DeliveryMode",
    "EntryRouter",
    "Field",
    "Level",
    "LogBackend",
    "LogCourierError",
    "LogEntry",
    "RoutingConfig",
    "TeeBackend",
    "__version__",
]
