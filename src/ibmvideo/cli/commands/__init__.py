"""Command registration utilities for the ``ibm-video`` CLI."""

from __future__ import annotations

import typer
from rich.console import Console

from ibmvideo.cli.commands import embed


def register_commands(app: typer.Typer, console: Console) -> None:
    """Attach command groups to the provided Typer application."""

    embed.register(app, console)

    @app.callback(invoke_without_command=True)
    def main_callback(ctx: typer.Context) -> None:
        """Display a default message when no subcommand is provided."""

        if ctx.invoked_subcommand is None:
            console.print("[bold green]IBM Video CLI ready for commands.[/bold green]")


__all__ = ["register_commands"]
