"""logcourier data models — all Pydantic v2, all frozen (immutable)."""

from logcourier.models.config import DeliveryMode, QueueOptions, RoutingConfig
from logcourier.models.entries import (
    ALL_LEVELS,
    CallSite,
    Field,
    Formatter,
    Level,
    LogEntry,
    QueuedEntry,
    fields_from_mapping,
    level_threshold,
)

__all__ = [
    # entries
    "ALL_LEVELS",
    "CallSite",
    "Field",
    "Formatter",
    "Level",
    "LogEntry",
    "QueuedEntry",
    "fields_from_mapping",
    "level_threshold",
    # config
    "DeliveryMode",
    "QueueOptions",
    "RoutingConfig",
]
