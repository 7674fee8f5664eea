"""Subcommands registered on the ``logcourier`` Typer app."""
