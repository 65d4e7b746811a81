"""CLI command for listing commits available for review."""

from typing import Optional

import typer

from diffnote import global_config
from diffnote.cli.utils import (
    build_candidates,
    config_value,
    fail,
    get_backend,
    load_config_safe,
)
from diffnote.vcs import VcsError


def commits_command(
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Number of commits to list (default from config)",
    ),
    offset: int = typer.Option(
        0,
        "--offset",
        min=0,
        help="Skip this many commits (page through older history)",
    ),
) -> None:
    """List recent commits with the indices accepted by --commits."""
    config = load_config_safe()
    if limit is None:
        limit = config_value(global_config.get_recent_commits, config, global_config.DEFAULT_RECENT_COMMITS)

    backend = get_backend()
    try:
        candidates = build_candidates(backend, limit=limit, offset=offset)
    except VcsError as e:
        fail(str(e))

    if not candidates:
        typer.echo("No commits found.")
        return

    # Indices continue across pages; the working-tree entry only exists on page one
    base = offset + (1 if offset and backend.has_uncommitted_changes() else 0)
    for i, rev in enumerate(candidates):
        when = rev.time.strftime("%Y-%m-%d %H:%M") if rev.time else ""
        details = ", ".join(part for part in (rev.author, when) if part)
        suffix = f"  ({details})" if details else ""
        typer.echo(f"{base + i:>4}  {rev.short_id:<12} {rev.summary}{suffix}")

    typer.echo()
    typer.echo("Review a selection with: diffnote status --commits 0,1")
