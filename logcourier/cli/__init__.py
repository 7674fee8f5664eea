"""logcourier CLI — Typer-based command-line interface.

Provides the ``logcourier`` command with subcommands for sending a test
entry, showing the resolved settings and verifying the bot token.

All output uses Rich for formatted terminal display.
"""
