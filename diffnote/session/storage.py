"""Session storage for diffnote.

Contains:
- SessionStorage: Reads and writes session snapshots under a base directory
- build_snapshot: Capture review state together with per-file fingerprints
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from diffnote.diff.models import FileDiff
from diffnote.review.models import ReviewState
from diffnote.session.exceptions import SessionError
from diffnote.session.models import SCHEMA_VERSION, SessionSnapshot
from diffnote.session.paths import get_session_file, session_key
from diffnote.vcs.models import DiffSource, VcsInfo


def build_snapshot(
    state: ReviewState,
    files: list[FileDiff],
    info: VcsInfo,
    source: DiffSource,
) -> SessionSnapshot:
    """Capture review state and the fingerprints of the diff it refers to.

    Args:
        state: Current review state.
        files: The diff model the state was recorded against.
        info: Repository information.
        source: What is being reviewed.

    Returns:
        A SessionSnapshot ready to save.
    """
    return SessionSnapshot(
        repo_path=str(info.root_path),
        vcs_type=info.vcs_type,
        branch_name=info.branch_name,
        base_revisions=list(source.revisions),
        diff_source=source.kind,
        fingerprints={f.path: f.fingerprint for f in files},
        state=state.model_copy(deep=True),
        saved_at=datetime.now(timezone.utc).isoformat(),
    )


class SessionStorage:
    """Session files under one base directory, one JSON file per key.

    The directory is created on first save. Loading never raises for a bad
    file: problems are reported as warnings and the caller starts fresh.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def key_for(self, snapshot: SessionSnapshot) -> str:
        return session_key(Path(snapshot.repo_path), snapshot.source)

    def path_for(self, key: str) -> Path:
        return get_session_file(self.base_dir, key)

    def save(self, snapshot: SessionSnapshot) -> Path:
        """Write a snapshot atomically.

        The JSON is written to a temporary file in the same directory and
        moved into place, so a crash never leaves a partial session file.

        Returns:
            Path of the written session file.

        Raises:
            SessionError: If the file cannot be written.
        """
        path = self.path_for(self.key_for(snapshot))
        tmp_name = None
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.base_dir, prefix=f".{path.stem}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(snapshot.model_dump_json(indent=2))
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise SessionError(f"Failed to save session to {path}: {e}")
        return path

    def load(self, key: str) -> tuple[Optional[SessionSnapshot], list[str]]:
        """Load the snapshot stored under a key.

        Returns:
            Tuple of (snapshot or None, list of warning messages). A missing
            file gives (None, []); an unreadable, corrupt or incompatible
            file gives (None, [warning]).
        """
        path = self.path_for(key)
        if not path.exists():
            return None, []

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            return None, [f"Could not read saved session {path}: {e}"]
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return None, [f"Saved session {path} is corrupt and was ignored: {e}"]

        if not isinstance(data, dict):
            return None, [f"Saved session {path} is corrupt and was ignored"]

        version = data.get("schema_version")
        if version != SCHEMA_VERSION:
            return None, [
                f"Saved session {path} has unsupported schema version {version!r} and was ignored"
            ]

        try:
            return SessionSnapshot.model_validate(data), []
        except ValidationError as e:
            return None, [f"Saved session {path} is invalid and was ignored: {e.error_count()} error(s)"]

    def delete(self, key: str) -> bool:
        """Delete a session file. Returns True if one existed."""
        path = self.path_for(key)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise SessionError(f"Failed to delete session {path}: {e}")
        return True

    def list_sessions(self) -> list[str]:
        """Return the keys of all stored sessions, sorted."""
        if not self.base_dir.is_dir():
            return []
        return sorted(p.stem for p in self.base_dir.glob("*.json"))
