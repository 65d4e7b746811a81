"""CLI entry point for diffnote.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

from typing import Optional

import typer

from diffnote import __version__
from diffnote.cli.comment import comment_app
from diffnote.cli.commits import commits_command
from diffnote.cli.config import config_app
from diffnote.cli.review import (
    clear_command,
    diff_command,
    expand_command,
    export_command,
    notes_command,
    reviewed_command,
    status_command,
)

# Main application
app = typer.Typer(
    name="diffnote",
    help="diffnote: review jj, git and hg changes and export typed comments",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(comment_app, name="comment")
app.add_typer(config_app, name="config")

# Add individual commands
app.command("status")(status_command)
app.command("diff")(diff_command)
app.command("expand")(expand_command)
app.command("export")(export_command)
app.command("commits")(commits_command)
app.command("reviewed")(reviewed_command)
app.command("clear")(clear_command)
app.command("notes")(notes_command)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"diffnote {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Review changes and export typed review comments."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


__all__ = ["app"]
