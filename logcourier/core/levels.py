"""Level policy — which entries are delivered, and which ones notify.

Eligibility and urgency are independent questions:

- *Eligibility* decides whether an entry is delivered at all.  It is either
  a threshold (every level at or above a floor) or an exact match.
- *Urgency* decides whether a delivered message triggers a notification at
  the destination.  By default every message notifies unless notification
  is suppressed.  Supplying an ``urgent_on`` set restricts notification to
  the listed levels; an empty ``urgent_on`` set means nothing ever notifies.
"""

from __future__ import annotations

from collections.abc import Iterable

from logcourier.models.entries import ALL_LEVELS, Level, level_threshold

__all__ = ["LevelPolicy", "level_threshold"]


class LevelPolicy:
    """Decides eligibility and urgency for a log level.

    Parameters
    ----------
    eligible:
        Levels that are delivered.
    notify_by_default:
        Whether messages notify when no ``urgent_on`` set is given.
    urgent_on:
        When not ``None``, the only levels whose messages notify.
    """

    def __init__(
        self,
        eligible: Iterable[Level],
        *,
        notify_by_default: bool = True,
        urgent_on: Iterable[Level] | None = None,
    ) -> None:
        self._eligible = frozenset(eligible)
        self._notify_by_default = notify_by_default
        self._urgent_on = frozenset(urgent_on) if urgent_on is not None else None

    @classmethod
    def threshold(cls, floor: Level, **kwargs: object) -> LevelPolicy:
        """Policy accepting every level at or above *floor*."""
        return cls(level_threshold(floor), **kwargs)  # type: ignore[arg-type]

    @classmethod
    def exact(cls, level: Level, **kwargs: object) -> LevelPolicy:
        """Policy accepting only *level*."""
        return cls((level,), **kwargs)  # type: ignore[arg-type]

    @property
    def eligible_levels(self) -> frozenset[Level]:
        return self._eligible

    @property
    def urgent_levels(self) -> frozenset[Level] | None:
        return self._urgent_on

    def eligible(self, level: Level) -> bool:
        return level in self._eligible

    def urgent(self, level: Level) -> bool:
        if self._urgent_on is not None:
            return level in self._urgent_on
        return self._notify_by_default

    def __repr__(self) -> str:
        levels = ",".join(level.label for level in ALL_LEVELS if level in self._eligible)
        return f"LevelPolicy(eligible=[{levels}], notify_by_default={self._notify_by_default})"
