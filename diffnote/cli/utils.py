"""Shared utility functions for CLI commands."""

import re
from typing import Any, NoReturn, Optional, Union

import typer

from diffnote import global_config
from diffnote.diff.models import LineAddress, LineSide
from diffnote.review.models import FileAnchor, RangeAnchor
from diffnote.review.store import ReviewStore
from diffnote.selection import CommitSelection, EmptySelectionError
from diffnote.session import (
    ReviewSession,
    SessionError,
    SessionStorage,
    open_session,
    save_session,
)
from diffnote.vcs import (
    DiffSource,
    NoChangesError,
    NotARepositoryError,
    RevisionRef,
    VcsBackend,
    VcsError,
    detect_backend,
    working_tree_ref,
)


# TARGET syntax: path, path:N, path:N-M, path:~N, path:~N-~M
TARGET_RE = re.compile(r"^(?P<path>.+?):(?P<start_old>~?)(?P<start>\d+)(?:-(?P<end_old>~?)(?P<end>\d+))?$")


def fail(message: str, hint: Optional[str] = None) -> NoReturn:
    """Print an error (and optional hint) to stderr and exit with status 1."""
    typer.echo(f"Error: {message}", err=True)
    if hint:
        typer.echo(f"Hint: {hint}", err=True)
    raise typer.Exit(1)


def echo_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        typer.echo(f"Warning: {warning}", err=True)


def load_config_safe() -> dict[str, Any]:
    """Load the global config, falling back to defaults if it is unreadable."""
    try:
        return global_config.load_global_config()
    except global_config.GlobalConfigError as e:
        typer.echo(f"Warning: {e}. Using defaults.", err=True)
        return {}


def config_value(getter, config: dict[str, Any], default):
    """Read one setting, falling back to a default if it is invalid."""
    try:
        return getter(config)
    except global_config.GlobalConfigError as e:
        typer.echo(f"Warning: {e}. Using default.", err=True)
        return default


def get_storage(config: dict[str, Any]) -> SessionStorage:
    return SessionStorage(global_config.get_data_dir(config))


def get_backend() -> VcsBackend:
    """Detect the repository's backend, exiting with a hint if there is none."""
    try:
        return detect_backend()
    except NotARepositoryError as e:
        fail(str(e), hint="Run diffnote from inside a jj, git or hg working copy.")


# ============================================================================
# Common options
# ============================================================================


def revisions_option():
    return typer.Option(
        None,
        "--revisions",
        "-r",
        help="Revisions to review, in the backend's own syntax (e.g. main..HEAD, @-, tip)",
    )


def working_tree_option():
    return typer.Option(
        False,
        "--working-tree",
        "-w",
        help="Combine the selected commits with uncommitted changes",
    )


def commits_option():
    return typer.Option(
        None,
        "--commits",
        "-c",
        help="Comma-separated indices from 'diffnote commits' to toggle (e.g. 0,1,2)",
    )


# ============================================================================
# Diff source resolution
# ============================================================================


def parse_commit_indices(value: str) -> list[int]:
    """Parse "0,1,2" into [0, 1, 2]."""
    indices = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit():
            raise typer.BadParameter(f"Not a commit index: {part}", param_hint="--commits")
        indices.append(int(part))
    return indices


def build_candidates(backend: VcsBackend, limit: int, offset: int = 0) -> list[RevisionRef]:
    """Selection candidates: the working-tree entry (if dirty) then recent commits."""
    candidates = []
    if offset == 0 and backend.has_uncommitted_changes():
        candidates.append(working_tree_ref())
    candidates.extend(backend.list_revisions(offset=offset, limit=limit))
    return candidates


def resolve_source(
    backend: VcsBackend,
    revisions: Optional[str],
    working_tree: bool,
    commits: Optional[str],
    limit: int,
) -> DiffSource:
    """Turn the common CLI options into a DiffSource.

    Raises:
        VcsError: If the backend rejects the revision expression.
        EmptySelectionError: If --commits selects nothing.
        IndexError: If a --commits index is out of range.
    """
    if revisions and commits:
        raise typer.BadParameter("Use either --revisions or --commits, not both")

    if commits:
        indices = parse_commit_indices(commits)
        selection = CommitSelection(build_candidates(backend, limit=max(limit, max(indices, default=0) + 1)))
        for index in indices:
            selection.toggle(index)
        confirmed = selection.confirm()
        if working_tree and confirmed.revision_ids:
            return DiffSource.working_tree_and_commits(list(confirmed.revision_ids))
        return confirmed.source

    if revisions:
        ids = backend.resolve_revisions(revisions)
        if working_tree:
            return DiffSource.working_tree_and_commits(ids)
        return DiffSource.commit_range(ids)

    return DiffSource.working_tree()


def open_review(
    revisions: Optional[str],
    working_tree: bool,
    commits: Optional[str],
) -> tuple[ReviewSession, SessionStorage, dict[str, Any]]:
    """Detect the backend, load the diff and restore saved review state.

    Exits with status 1 on any error the user has to fix.
    """
    config = load_config_safe()
    backend = get_backend()
    limit = config_value(global_config.get_recent_commits, config, global_config.DEFAULT_RECENT_COMMITS)
    storage = get_storage(config)

    try:
        source = resolve_source(backend, revisions, working_tree, commits, limit)
        session = open_session(backend, source, storage)
    except NoChangesError as e:
        fail(str(e))
    except EmptySelectionError as e:
        fail(str(e), hint="Pick commits with --commits, e.g. --commits 0,1")
    except IndexError as e:
        fail(str(e), hint="Run 'diffnote commits' to see the available indices")
    except VcsError as e:
        fail(str(e))

    echo_warnings(session.warnings)
    if session.reconciled and session.reconciled.changed:
        if session.reconciled.orphaned:
            typer.echo(
                f"Warning: {len(session.reconciled.orphaned)} file(s) changed since the last session; "
                "their comments are marked outdated.",
                err=True,
            )
        # Persist the reset flags so they are reported only once
        persist(session, storage)
    return session, storage, config


def persist(session: ReviewSession, storage: SessionStorage) -> None:
    try:
        save_session(session, storage)
    except SessionError as e:
        fail(str(e))


# ============================================================================
# Comment targets
# ============================================================================


def parse_target(target: str) -> Union[FileAnchor, RangeAnchor]:
    """Parse a comment TARGET into an anchor.

    "path" anchors to the file, "path:N" and "path:N-M" to new-side lines,
    "path:~N" and "path:~N-~M" to old-side (removed) lines.

    Raises:
        InvalidAnchorError: If a range mixes old and new side lines.
    """
    match = TARGET_RE.match(target)
    if not match:
        return FileAnchor(file=target)

    path = match.group("path")
    start_side = LineSide.OLD if match.group("start_old") else LineSide.NEW
    first = LineAddress(path, start_side, int(match.group("start")))
    if match.group("end") is None:
        return ReviewStore.range_anchor(first, first)

    end_side = LineSide.OLD if match.group("end_old") else LineSide.NEW
    if start_side == LineSide.OLD and not match.group("end_old"):
        # "path:~3-5" means old lines 3 to 5
        end_side = LineSide.OLD
    second = LineAddress(path, end_side, int(match.group("end")))
    return ReviewStore.range_anchor(first, second)
