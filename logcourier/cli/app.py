"""Main Typer application — imports and registers all CLI commands.

Entry point: ``logcourier`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer

from logcourier.cli.commands.send import send_cmd
from logcourier.cli.commands.status import config_cmd, verify_cmd
from logcourier.config import CourierSettings

app = typer.Typer(
    name="logcourier",
    help="logcourier: forward log entries to Telegram chats.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def _configure_logging() -> None:
    logging.basicConfig(
        level=CourierSettings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="send", help="Send one log entry to every configured chat.")(send_cmd)
app.command(name="config", help="Show the resolved settings.")(config_cmd)
app.command(name="verify", help="Verify the bot token with the Bot API.")(verify_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
