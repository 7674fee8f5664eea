"""``logcourier send`` — route one entry through the configured router.

The entry is delivered synchronously regardless of the configured
delivery mode, so failures are reported before the command exits.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from logcourier.config import CourierSettings
from logcourier.core.router import EntryRouter
from logcourier.errors import ConfigurationError, LogCourierError
from logcourier.models.entries import Field, Level, LogEntry
from logcourier.routing.sinks.buffer import BufferSink

console = Console()


def _parse_fields(raw: list[str]) -> list[Field]:
    fields: list[Field] = []
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(
                f"expected KEY=VALUE, got {item!r}", param_hint="--field"
            )
        fields.append(Field(key=key, value=value))
    return fields


def send_cmd(
    message: str = typer.Argument(..., help="Message text to send."),
    level: str = typer.Option("error", "--level", "-l", help="Entry level."),
    logger_name: str = typer.Option("", "--logger", help="Logger name shown in the message."),
    field: list[str] = typer.Option(
        [], "--field", "-f", help="Structured field as KEY=VALUE (repeatable)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Build the Telegram payloads without sending them."
    ),
) -> None:
    """Send one log entry to every configured chat."""
    try:
        entry_level = Level.parse(level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--level") from exc
    fields = _parse_fields(field)

    try:
        settings = CourierSettings()
        config = settings.to_routing_config().model_copy(
            update={"async_delivery": False, "queue": None}
        )
    except (ConfigurationError, ValidationError) as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    buffer = BufferSink() if dry_run else None
    sink = buffer if buffer is not None else settings.build_sink()
    try:
        router = EntryRouter(
            settings.bot_token, settings.chat_ids, config, sink=sink, close_sink=True
        )
    except ConfigurationError as exc:
        if buffer is None:
            sink.close()
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    try:
        with router:
            if not router.enabled(entry_level):
                console.print(
                    f"[yellow]Level {entry_level.label} is not eligible for delivery; "
                    "nothing sent.[/yellow]"
                )
                return
            router.accept(
                LogEntry(level=entry_level, message=message, logger_name=logger_name),
                fields,
            )
    except LogCourierError as exc:
        console.print(f"[red]Delivery failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if buffer is not None:
        for payload in buffer.flush():
            console.print(
                Panel(
                    payload.text,
                    title=f"[bold]chat {payload.chat_id}[/bold]",
                    subtitle="silent" if payload.disable_notification else "notify",
                    border_style="cyan",
                )
            )
        return
    console.print(f"[green]Sent to {len(settings.chat_ids)} chat(s).[/green]")
