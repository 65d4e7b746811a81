"""Session file naming.

Contains:
- session_key: Deterministic key for a repository + diff source
- get_session_file: Path of a session file under a base directory
"""

import hashlib
from pathlib import Path

from diffnote.vcs.models import DiffSource


def session_key(repo_path: Path, source: DiffSource) -> str:
    """Compute the session key for a repository and diff source.

    The key is "<repo-name>-<hash>", where the hash covers the resolved
    repository path, the source kind and the revision ids, so distinct
    repositories, worktrees and ranges never share a session.

    Args:
        repo_path: The repository root.
        source: What is being reviewed.

    Returns:
        Filesystem-safe session key.
    """
    resolved = Path(repo_path).resolve()
    identity = "\n".join([str(resolved), source.kind.value, *source.revisions])
    digest = hashlib.sha256(identity.encode()).hexdigest()[:16]

    name = "".join(c if c.isalnum() or c in "-_." else "_" for c in resolved.name) or "repo"
    return f"{name}-{digest}"


def get_session_file(base_dir: Path, key: str) -> Path:
    """Return the path of the session file for a key."""
    return base_dir / f"{key}.json"
