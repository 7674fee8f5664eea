"""Sink protocol for logcourier message delivery.

All sinks implement the ``MessageSink`` protocol: a ``sink_name`` property
and a ``send(chat_id, text, notify=..., parse_mode=...)`` method.  The
dispatcher calls ``send`` once per destination for every delivered entry.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MessageSink(Protocol):
    """Protocol that every logcourier sink must implement.

    Attributes
    ----------
    sink_name : str
        A human-readable identifier for this sink (e.g. ``"telegram"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the name of this sink."""
        ...

    def send(
        self,
        chat_id: int,
        text: str,
        *,
        notify: bool,
        parse_mode: str | None = None,
    ) -> None:
        """Deliver *text* to one chat.

        Implementations raise :class:`~logcourier.errors.DeliveryError`
        when the message could not be delivered.  They may be called
        concurrently from several threads.
        """
        ...
