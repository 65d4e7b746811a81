"""Review session lifecycle.

Contains:
- ReviewSession: The live diff model, review store and session identity
- load_diff: Fetch, parse and filter the diff for a source
- open_session: Load the diff and restore any saved review state
- save_session: Persist a session's review state
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from diffnote.diff.ignore import filter_ignored
from diffnote.diff.models import FileDiff
from diffnote.diff.parser import parse_unified_diff
from diffnote.review.exceptions import UnknownFileError
from diffnote.review.store import ReviewStore
from diffnote.session.paths import session_key
from diffnote.session.reconcile import ReconcileResult, reconcile
from diffnote.session.storage import SessionStorage, build_snapshot
from diffnote.vcs.base import VcsBackend
from diffnote.vcs.exceptions import NoChangesError
from diffnote.vcs.models import DiffSource


@dataclass
class ReviewSession:
    """A review in progress."""

    backend: VcsBackend
    source: DiffSource
    files: list[FileDiff]
    store: ReviewStore
    key: str
    warnings: list[str] = field(default_factory=list)
    reconciled: Optional[ReconcileResult] = None

    def file(self, path: str) -> FileDiff:
        for file_diff in self.files:
            if file_diff.path == path:
                return file_diff
        raise UnknownFileError(f"File is not part of the current diff: {path}")

    def reload(self) -> list[str]:
        """Rebuild the diff model from the backend, keeping review state.

        Returns:
            Parser warnings for the new diff.
        """
        self.files, warnings = load_diff(self.backend, self.source)
        self.store.bind(self.files)
        return warnings


def load_diff(backend: VcsBackend, source: DiffSource) -> tuple[list[FileDiff], list[str]]:
    """Fetch, parse and filter the diff for a source.

    Raises:
        NoChangesError: If nothing is left to review.
        VcsError: If the backend command fails.
    """
    text = backend.get_diff(source)
    files, warnings = parse_unified_diff(text, backend.diff_format)
    files = filter_ignored(backend.root_path, files)
    if not files:
        raise NoChangesError("No changes to review.")
    return files, warnings


def open_session(backend: VcsBackend, source: DiffSource, storage: SessionStorage) -> ReviewSession:
    """Load the diff for a source and restore any saved review state.

    A saved session that cannot be loaded is reported in the session's
    warnings and review starts from an empty state.

    Args:
        backend: The repository's VCS backend.
        source: What to review.
        storage: Where sessions are kept.

    Returns:
        The opened ReviewSession.
    """
    files, warnings = load_diff(backend, source)
    key = session_key(backend.root_path, source)

    snapshot, load_warnings = storage.load(key)
    warnings.extend(load_warnings)

    reconciled = None
    if snapshot is not None:
        reconciled = reconcile(snapshot, files)
        store = ReviewStore(reconciled.state)
    else:
        store = ReviewStore()
    store.bind(files)

    return ReviewSession(
        backend=backend,
        source=source,
        files=files,
        store=store,
        key=key,
        warnings=warnings,
        reconciled=reconciled,
    )


def save_session(session: ReviewSession, storage: SessionStorage) -> Path:
    """Persist a session's review state.

    Raises:
        SessionError: If the session file cannot be written.
    """
    snapshot = build_snapshot(session.store.state, session.files, session.backend.info, session.source)
    return storage.save(snapshot)
