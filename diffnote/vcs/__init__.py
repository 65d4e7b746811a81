"""VCS abstraction layer for diffnote.

This package provides one query interface over three version-control tools:
- exceptions: VcsError, NotARepositoryError, NoChangesError, ...
- runner: run_vcs_command, probe_root
- models: RevisionRef, VcsInfo, VcsType, DiffSource, DiffSourceKind
- base: VcsBackend
- jj / git / hg: the three backend implementations

Detection order is Jujutsu, then Git, then Mercurial. Jujutsu comes first
because jj repositories are git-backed and would otherwise be detected as git.
"""

from pathlib import Path
from typing import Optional

# Exceptions
from diffnote.vcs.exceptions import (
    ContextFetchError,
    NoChangesError,
    NotARepositoryError,
    VcsError,
)

# Models
from diffnote.vcs.models import (
    WORKING_TREE_ID,
    DiffSource,
    DiffSourceKind,
    RevisionRef,
    VcsInfo,
    VcsType,
    working_tree_ref,
)

# Runner
from diffnote.vcs.runner import (
    probe_root,
    run_vcs_command,
)

# Backends
from diffnote.vcs.base import VcsBackend
from diffnote.vcs.git import GitBackend
from diffnote.vcs.hg import HgBackend
from diffnote.vcs.jj import JjBackend


BACKEND_PROBE_ORDER: tuple[type[VcsBackend], ...] = (JjBackend, GitBackend, HgBackend)


def detect_backend(cwd: Optional[Path] = None) -> VcsBackend:
    """Detect the VCS serving cwd and return its backend.

    Args:
        cwd: Directory to probe from (defaults to the process cwd).

    Returns:
        The first backend whose repository-root probe succeeds.

    Raises:
        NotARepositoryError: If no backend recognises the directory.
    """
    for backend_cls in BACKEND_PROBE_ORDER:
        backend = backend_cls.discover(cwd)
        if backend is not None:
            return backend

    raise NotARepositoryError(
        "Not in a jj, git or hg repository. Run this command from within a repository."
    )


__all__ = [
    # Exceptions
    "ContextFetchError",
    "NoChangesError",
    "NotARepositoryError",
    "VcsError",
    # Models
    "WORKING_TREE_ID",
    "DiffSource",
    "DiffSourceKind",
    "RevisionRef",
    "VcsInfo",
    "VcsType",
    "working_tree_ref",
    # Runner
    "probe_root",
    "run_vcs_command",
    # Backends
    "BACKEND_PROBE_ORDER",
    "VcsBackend",
    "GitBackend",
    "HgBackend",
    "JjBackend",
    "detect_backend",
]
