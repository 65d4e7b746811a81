"""Session data models for diffnote.

Contains Pydantic models for persisted sessions:
- SessionSnapshot: Review state plus the diff it was recorded against
"""

from typing import Optional

from pydantic import BaseModel, Field

from diffnote.review.models import ReviewState
from diffnote.vcs.models import DiffSource, DiffSourceKind, VcsType


# Bump when the on-disk layout changes incompatibly
SCHEMA_VERSION = "1"


class SessionSnapshot(BaseModel):
    """Everything needed to restore a review session."""

    schema_version: str = SCHEMA_VERSION
    repo_path: str
    vcs_type: VcsType
    branch_name: Optional[str] = None
    base_revisions: list[str] = Field(default_factory=list)  # Oldest first
    diff_source: DiffSourceKind = DiffSourceKind.WORKING_TREE
    # File identity -> sha256 of the file's patch block when saved
    fingerprints: dict[str, str] = Field(default_factory=dict)
    state: ReviewState = Field(default_factory=ReviewState)
    saved_at: str  # ISO format timestamp

    @property
    def source(self) -> DiffSource:
        return DiffSource(self.diff_source, tuple(self.base_revisions))
