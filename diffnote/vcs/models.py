"""Data models for the diffnote VCS layer.

Contains:
- VcsType: Which backend serves the repository
- DiffSourceKind: What a review is looking at
- DiffSource: A concrete diff request (source kind + revision ids)
- RevisionRef: Immutable commit metadata
- VcsInfo: Repository information reported by a backend
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


# Reserved id of the synthetic "uncommitted changes" selection entry
WORKING_TREE_ID = "__diffnote_working_tree__"


class VcsType(str, Enum):
    """Supported version-control backends."""

    GIT = "git"
    MERCURIAL = "hg"
    JUJUTSU = "jj"


class DiffSourceKind(str, Enum):
    """What the current review diff was built from."""

    WORKING_TREE = "working_tree"
    COMMIT_RANGE = "commit_range"
    WORKING_TREE_AND_COMMITS = "working_tree_and_commits"


@dataclass(frozen=True)
class DiffSource:
    """A diff request: uncommitted changes, a commit range, or both.

    Revision ids are ordered oldest first.
    """

    kind: DiffSourceKind = DiffSourceKind.WORKING_TREE
    revisions: tuple[str, ...] = ()

    @classmethod
    def working_tree(cls) -> "DiffSource":
        return cls(DiffSourceKind.WORKING_TREE)

    @classmethod
    def commit_range(cls, revisions: list[str]) -> "DiffSource":
        return cls(DiffSourceKind.COMMIT_RANGE, tuple(revisions))

    @classmethod
    def working_tree_and_commits(cls, revisions: list[str]) -> "DiffSource":
        return cls(DiffSourceKind.WORKING_TREE_AND_COMMITS, tuple(revisions))

    @property
    def oldest(self) -> Optional[str]:
        return self.revisions[0] if self.revisions else None

    @property
    def newest(self) -> Optional[str]:
        return self.revisions[-1] if self.revisions else None

    @property
    def includes_working_tree(self) -> bool:
        return self.kind != DiffSourceKind.COMMIT_RANGE


@dataclass(frozen=True)
class RevisionRef:
    """A commit as reported by a backend. Never mutated once fetched."""

    id: str
    short_id: str
    summary: str
    parents: tuple[str, ...] = ()
    author: str = ""
    time: Optional[datetime] = None
    body: Optional[str] = None
    branch_name: Optional[str] = None

    @property
    def is_working_tree(self) -> bool:
        return self.id == WORKING_TREE_ID


def working_tree_ref() -> RevisionRef:
    """Build the synthetic selection entry standing for uncommitted changes."""
    return RevisionRef(
        id=WORKING_TREE_ID,
        short_id="WORKTREE",
        summary="Uncommitted changes",
    )


@dataclass
class VcsInfo:
    """Repository information."""

    root_path: Path
    head_commit: str
    vcs_type: VcsType
    branch_name: Optional[str] = None


def split_description(description: str) -> tuple[str, Optional[str]]:
    """Split a commit description into (summary, optional body).

    Args:
        description: Full commit message text.

    Returns:
        The first line as the summary ("(no message)" when empty) and the
        remaining text with leading blank lines removed, or None.
    """
    lines = description.splitlines()
    summary = lines[0] if lines and lines[0].strip() else "(no message)"
    rest = lines[1:]
    while rest and not rest[0].strip():
        rest.pop(0)
    body = "\n".join(rest)
    return summary, (body if body.strip() else None)
