"""CLI commands for browsing a diff and tracking review progress."""

from pathlib import Path
from typing import Optional, Union

import typer

from diffnote import global_config
from diffnote.cli.utils import (
    commits_option,
    config_value,
    fail,
    open_review,
    persist,
    revisions_option,
    working_tree_option,
)
from diffnote.diff import ContextExpander, DiffLine, FileDiff, HiddenContext, lines_with_context
from diffnote.export import NoCommentsError, export_review
from diffnote.review import RangeAnchor, ReviewError, ReviewStore
from diffnote.session import ReviewSession
from diffnote.vcs import ContextFetchError, DiffSourceKind


def _describe_source(session: ReviewSession) -> str:
    source = session.source
    if source.kind == DiffSourceKind.WORKING_TREE:
        return "uncommitted changes"
    short_ids = ", ".join(r[:7] for r in source.revisions)
    if source.kind == DiffSourceKind.WORKING_TREE_AND_COMMITS:
        return f"working tree + commits {short_ids}"
    return f"commits {short_ids}"


def status_command(
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Show the files under review and their progress."""
    session, _, _ = open_review(revisions, working_tree, commits)
    store = session.store
    info = session.backend.info

    branch = f" on {info.branch_name}" if info.branch_name else ""
    typer.echo(f"Repository: {info.root_path} ({info.vcs_type.value}{branch})")
    typer.echo(f"Reviewing: {_describe_source(session)}")
    typer.echo()

    for file_diff in session.files:
        mark = "x" if store.is_reviewed(file_diff.path) else " "
        comments = len(store.comments_for(file_diff.path))
        note = f"  ({comments} comment{'s' if comments != 1 else ''})" if comments else ""
        if file_diff.is_binary:
            stats = "binary"
        else:
            stats = f"+{file_diff.additions} -{file_diff.deletions}"
        typer.echo(f"  [{mark}] {file_diff.kind.letter} {file_diff.path}  {stats}{note}")

    typer.echo()
    typer.echo(
        f"Reviewed: {store.reviewed_count}/{len(session.files)} files, "
        f"{store.comment_count} comment(s)"
    )


def _format_line(line: Union[DiffLine, HiddenContext], store: ReviewStore) -> list[str]:
    if isinstance(line, HiddenContext):
        return [f"{'':>5} {'':>5}   ... {line.count} unchanged line(s) hidden (gap {line.index}) ..."]

    old = str(line.old_line) if line.old_line is not None else ""
    new = str(line.new_line) if line.new_line is not None else ""
    rendered = [f"{old:>5} {new:>5} {line.prefix} {line.text}"]

    # Comments are shown under the first line of their range; file comments
    # are printed in the file header
    for comment in store.comments_at(line.address):
        if isinstance(comment.anchor, RangeAnchor) and comment.anchor.start == line.address.line:
            outdated = " (outdated)" if comment.orphaned else ""
            rendered.append(f"{'':>13}^ [{comment.type.tag}] {comment.id}: {comment.body}{outdated}")
    return rendered


def _print_file(file_diff: FileDiff, store: ReviewStore, expander: Optional[ContextExpander]) -> None:
    reviewed = " (reviewed)" if store.is_reviewed(file_diff.path) else ""
    if file_diff.old_path and file_diff.new_path and file_diff.old_path != file_diff.new_path:
        title = f"{file_diff.old_path} -> {file_diff.new_path}"
    else:
        title = file_diff.path
    typer.echo(f"=== {title} [{file_diff.kind.value}]{reviewed}")

    for comment in store.comments_for(file_diff.path):
        if comment.anchor.kind == "file":
            outdated = " (outdated)" if comment.orphaned else ""
            typer.echo(f"  [{comment.type.tag}] {comment.id}: {comment.body}{outdated}")

    if file_diff.is_binary:
        typer.echo("  (binary file)")
        typer.echo()
        return

    for line in lines_with_context(file_diff, expander):
        for text in _format_line(line, store):
            typer.echo(text)
    typer.echo()


def _expand_all(expander: ContextExpander, file_diff: FileDiff) -> None:
    """Expand every gap of a file, warning about each one that fails."""
    gaps = list(file_diff.gaps)
    try:
        trailing = expander.trailing_gap(file_diff)
    except ContextFetchError as e:
        typer.echo(f"Warning: {e}", err=True)
        trailing = None
    if trailing is not None:
        gaps.append(trailing)

    for gap in gaps:
        try:
            expander.expand(file_diff, gap)
        except ContextFetchError as e:
            # Other gaps still render
            typer.echo(f"Warning: {e}", err=True)


def diff_command(
    path: Optional[str] = typer.Argument(None, help="Only show this file"),
    full: bool = typer.Option(
        False,
        "--full",
        "-f",
        help="Expand every hidden context gap",
    ),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Print the diff with line numbers and inline comments."""
    session, _, _ = open_review(revisions, working_tree, commits)

    files = session.files
    if path is not None:
        try:
            files = [session.file(path)]
        except ReviewError as e:
            fail(str(e))

    expander = None
    if full:
        expander = ContextExpander(session.backend, session.source)
        for file_diff in files:
            _expand_all(expander, file_diff)

    for file_diff in files:
        _print_file(file_diff, session.store, expander)


def expand_command(
    path: str = typer.Argument(..., help="File to expand context in"),
    gap: int = typer.Argument(..., help="Gap index as shown by 'diffnote diff'"),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Print the unchanged lines hidden in one context gap."""
    session, _, _ = open_review(revisions, working_tree, commits)

    try:
        file_diff = session.file(path)
    except ReviewError as e:
        fail(str(e))

    expander = ContextExpander(session.backend, session.source)
    try:
        hidden = expander.find_gap(file_diff, gap)
        if hidden is None:
            fail(f"{path} has no hidden context gap {gap}")
        lines = expander.expand(file_diff, hidden)
    except ContextFetchError as e:
        fail(str(e))

    for line in lines:
        typer.echo(f"{line.old_line:>5} {line.new_line:>5}   {line.text}")


def export_command(
    reviewed_only: Optional[bool] = typer.Option(
        None,
        "--reviewed-only/--all",
        help="Only export comments on files marked reviewed (default from config)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the export to a file instead of stdout",
    ),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Export review comments as Markdown."""
    session, _, config = open_review(revisions, working_tree, commits)
    if reviewed_only is None:
        reviewed_only = config_value(global_config.get_export_reviewed_only, config, False)

    try:
        markdown = export_review(
            session.files,
            session.store.state,
            source=session.source,
            reviewed_only=reviewed_only,
        )
    except NoCommentsError as e:
        fail(str(e), hint="Add one with: diffnote comment add <path[:line]> <text>")

    if output is not None:
        output.write_text(markdown)
        typer.echo(f"Review exported to {output}", err=True)
    else:
        typer.echo(markdown, nl=False)


def reviewed_command(
    path: str = typer.Argument(..., help="File to mark or unmark as reviewed"),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Toggle the reviewed flag of a file."""
    session, storage, _ = open_review(revisions, working_tree, commits)
    try:
        reviewed = session.store.toggle_reviewed(path)
    except ReviewError as e:
        fail(str(e))

    persist(session, storage)
    typer.echo(f"{'Marked' if reviewed else 'Unmarked'} as reviewed: {path}")


def clear_command(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Remove every comment (reviewed flags are kept)."""
    session, storage, _ = open_review(revisions, working_tree, commits)
    count = session.store.comment_count
    if count == 0:
        typer.echo("No comments to clear.")
        return

    if not yes and not typer.confirm(f"Delete {count} comment(s)?", default=False):
        typer.echo("Aborted.")
        raise typer.Exit(1)

    removed = session.store.clear_all()
    persist(session, storage)
    typer.echo(f"Cleared {removed} comment(s).")


def notes_command(
    text: Optional[str] = typer.Argument(None, help="Summary text; pass an empty string to clear"),
    revisions: Optional[str] = revisions_option(),
    working_tree: bool = working_tree_option(),
    commits: Optional[str] = commits_option(),
) -> None:
    """Show or set the review summary included in exports."""
    session, storage, _ = open_review(revisions, working_tree, commits)

    if text is None:
        typer.echo(session.store.state.notes or "(no summary)")
        return

    session.store.set_notes(text)
    persist(session, storage)
    typer.echo("Summary updated." if session.store.state.notes else "Summary cleared.")
