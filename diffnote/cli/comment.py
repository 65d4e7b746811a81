"""CLI commands for review comments."""

from typing import Optional

import typer

from diffnote import global_config
from diffnote.cli.utils import (
    commits_option,
    config_value,
    fail,
    open_review,
    parse_target,
    persist,
    revisions_option,
    working_tree_option,
)
from diffnote.export import format_location
from diffnote.review import CommentType, ReviewError

# Subcommand group for comments
comment_app = typer.Typer(
    name="comment",
    help="Add, list, edit and delete review comments",
    add_completion=False,
)


@comment_app.command("add")
def comment_add(
    target: str = typer.Argument(
        ...,
        help="path (whole file), path:N, path:N-M, or path:~N for removed lines",
    ),
    body: str = typer.Argument(..., help="Comment text"),
    comment_type: Optional[CommentType] = typer.Option(
        None,
        "--type",
        "-t",
        case_sensitive=False,
        help="Comment type (default from config, otherwise note)",
    ),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Add a comment to a file or line range."""
    session, storage, config = open_review(revisions, working_tree, commits)
    if comment_type is None:
        comment_type = config_value(global_config.get_default_comment_type, config, CommentType.NOTE)

    try:
        anchor = parse_target(target)
        comment_id = session.store.add_comment(anchor, comment_type, body)
    except ReviewError as e:
        fail(str(e))

    persist(session, storage)
    typer.echo(f"Added {comment_id} [{comment_type.tag}] at {format_location(anchor)}")


@comment_app.command("list")
def comment_list(
    path: Optional[str] = typer.Argument(None, help="Only list comments on this file"),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """List review comments."""
    session, _, _ = open_review(revisions, working_tree, commits)
    store = session.store

    paths = [path] if path else list(store.state.files)
    comments = [c for p in paths for c in store.comments_for(p)]
    if not comments:
        typer.echo("No comments.")
        return

    for comment in comments:
        outdated = " (outdated)" if comment.orphaned else ""
        typer.echo(
            f"{comment.id:>4}  [{comment.type.tag}] {format_location(comment.anchor)} - "
            f"{comment.body}{outdated}"
        )
        if comment.line_text is not None:
            typer.echo(f"        > {comment.line_text.strip()}")


@comment_app.command("edit")
def comment_edit(
    comment_id: str = typer.Argument(..., help="Comment id, e.g. c3"),
    body: Optional[str] = typer.Option(None, "--body", "-b", help="New comment text"),
    comment_type: Optional[CommentType] = typer.Option(
        None,
        "--type",
        "-t",
        case_sensitive=False,
        help="New comment type",
    ),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Change the text or type of a comment."""
    if body is None and comment_type is None:
        fail("Nothing to change", hint="Pass --body and/or --type")

    session, storage, _ = open_review(revisions, working_tree, commits)
    try:
        session.store.edit_comment(comment_id, body=body, comment_type=comment_type)
    except ReviewError as e:
        fail(str(e))

    persist(session, storage)
    typer.echo(f"Updated {comment_id}")


@comment_app.command("delete")
def comment_delete(
    comment_id: str = typer.Argument(..., help="Comment id, e.g. c3"),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Delete a comment."""
    session, storage, _ = open_review(revisions, working_tree, commits)
    try:
        session.store.delete_comment(comment_id)
    except ReviewError as e:
        fail(str(e))

    persist(session, storage)
    typer.echo(f"Deleted {comment_id}")
