"""``logcourier config`` and ``logcourier verify`` — inspect the setup.

``config`` prints the settings resolved from the environment with the bot
token masked.  ``verify`` asks the Bot API who the token belongs to.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from logcourier.config import CourierSettings
from logcourier.errors import ConfigurationError, LogCourierError
from logcourier.models.entries import ALL_LEVELS

console = Console()


def config_cmd() -> None:
    """Show the resolved logcourier settings."""
    try:
        settings = CourierSettings()
        routing = settings.to_routing_config()
    except (ConfigurationError, ValidationError) as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    eligible = [level.label for level in ALL_LEVELS if level in routing.eligible_levels]
    if routing.urgent_levels is not None:
        urgent = [level.label for level in ALL_LEVELS if level in routing.urgent_levels]
        notify = ", ".join(urgent) or "[dim]never[/dim]"
    else:
        notify = "all" if routing.notify_by_default else "[dim]never[/dim]"

    table = Table(title="logcourier settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Bot token", settings.masked_token or "[red]not set[/red]")
    table.add_row(
        "Chats", ", ".join(str(chat) for chat in settings.chat_ids) or "[red]none[/red]"
    )
    table.add_row("Eligible levels", ", ".join(eligible))
    table.add_row("Notify on", notify)
    table.add_row("Delivery", routing.mode.value)
    if routing.queue is not None:
        table.add_row("Queue size", str(routing.queue.size))
        table.add_row("Flush interval", f"{routing.queue.interval:g}s")
    table.add_row("Parse mode", routing.parse_mode or "[dim]plain[/dim]")
    table.add_row("API URL", settings.api_url)
    console.print(table)


def verify_cmd() -> None:
    """Check the bot token against the Telegram Bot API."""
    settings = CourierSettings()
    if not settings.bot_token:
        console.print("[red]LOGCOURIER_BOT_TOKEN is not set.[/red]")
        raise typer.Exit(code=1)
    with settings.build_sink() as sink:
        try:
            username = sink.verify()
        except LogCourierError as exc:
            console.print(f"[red]Token rejected:[/red] {exc}")
            raise typer.Exit(code=1) from exc
    console.print(f"[green]Token OK:[/green] bot [bold]@{username}[/bold]")
