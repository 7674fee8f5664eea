"""Routing configuration models — delivery mode, queue and level options."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, model_validator

from logcourier.errors import ConfigurationError
from logcourier.models.entries import Formatter, Level, level_threshold

if TYPE_CHECKING:
    from logcourier.core.levels import LevelPolicy

DEFAULT_LEVEL = Level.WARN


def _parse_level(value: Level | str, option: str) -> Level:
    try:
        return Level.parse(value)
    except ValueError as exc:
        raise ConfigurationError(f"invalid {option}: {exc}") from exc


class DeliveryMode(str, Enum):
    """How accepted entries are handed to the transport."""

    SYNC = "sync"
    ASYNC = "async"
    QUEUED = "queued"


class QueueOptions(BaseModel):
    """Settings for batched delivery.

    ``interval`` is the number of seconds between drains and ``size`` the
    capacity of the queue.  Producers block while the queue is full.
    """

    model_config = ConfigDict(frozen=True)

    interval: float
    size: int

    @model_validator(mode="after")
    def _check_bounds(self) -> QueueOptions:
        if self.interval <= 0:
            raise ConfigurationError(
                f"queue interval must be positive, got {self.interval}"
            )
        if self.size < 1:
            raise ConfigurationError(f"queue size must be at least 1, got {self.size}")
        return self


class RoutingConfig(BaseModel):
    """Immutable routing configuration for an ``EntryRouter``.

    Async delivery is the default mode.  Configuring a ``queue`` selects
    queued delivery; ``async_delivery=False`` selects synchronous delivery.
    Asking for async delivery and a queue at the same time is rejected.
    """

    model_config = ConfigDict(frozen=True)

    eligible_levels: frozenset[Level] = frozenset(level_threshold(DEFAULT_LEVEL))
    notify_by_default: bool = True
    urgent_levels: frozenset[Level] | None = None
    async_delivery: bool | None = None
    queue: QueueOptions | None = None
    parse_mode: str | None = None
    formatter: Formatter | None = None

    @model_validator(mode="after")
    def _check_consistency(self) -> RoutingConfig:
        if not self.eligible_levels:
            raise ConfigurationError("at least one eligible level is required")
        if self.async_delivery and self.queue is not None:
            raise ConfigurationError("async delivery cannot be combined with a queue")
        return self

    @property
    def mode(self) -> DeliveryMode:
        if self.queue is not None:
            return DeliveryMode.QUEUED
        if self.async_delivery is False:
            return DeliveryMode.SYNC
        return DeliveryMode.ASYNC

    @classmethod
    def from_options(
        cls,
        *,
        level: Level | str = DEFAULT_LEVEL,
        exact_level: Level | str | None = None,
        async_delivery: bool | None = None,
        queue_interval: float | None = None,
        queue_size: int | None = None,
        disable_notification: bool = False,
        notify_on: Iterable[Level | str] | None = None,
        parse_mode: str | None = None,
        formatter: Formatter | None = None,
    ) -> RoutingConfig:
        """Build a config from the flat option set.

        ``exact_level`` replaces the threshold entirely.  Passing
        ``notify_on`` suppresses notification for every other level, so an
        empty ``notify_on`` silences all messages.

        Raises
        ------
        ConfigurationError
            For unknown level names, a half-configured queue, or options
            that contradict each other.
        """
        if exact_level is not None:
            eligible = frozenset((_parse_level(exact_level, "exact_level"),))
        else:
            eligible = frozenset(level_threshold(_parse_level(level, "level")))

        urgent = None
        notify_by_default = not disable_notification
        if notify_on is not None:
            urgent = frozenset(
                _parse_level(item, "notify_on level") for item in notify_on
            )
            notify_by_default = False

        queue = None
        if queue_interval is not None or queue_size is not None:
            if queue_interval is None or queue_size is None:
                raise ConfigurationError(
                    "queued delivery needs both queue_interval and queue_size"
                )
            queue = QueueOptions(interval=queue_interval, size=queue_size)

        return cls(
            eligible_levels=eligible,
            notify_by_default=notify_by_default,
            urgent_levels=urgent,
            async_delivery=async_delivery,
            queue=queue,
            parse_mode=parse_mode,
            formatter=formatter,
        )

    def level_policy(self) -> LevelPolicy:
        """Return the ``LevelPolicy`` described by this config."""
        from logcourier.core.levels import LevelPolicy

        return LevelPolicy(
            self.eligible_levels,
            notify_by_default=self.notify_by_default,
            urgent_on=self.urgent_levels,
        )
