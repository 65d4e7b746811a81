"""Base class for VCS backends.

Contains:
- VcsBackend: Capability interface shared by the jj, git and hg backends
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from diffnote.diff.models import DiffFormat, LineSide
from diffnote.vcs.exceptions import NoChangesError, VcsError
from diffnote.vcs.models import DiffSource, DiffSourceKind, RevisionRef, VcsInfo
from diffnote.vcs.runner import run_vcs_command


class VcsBackend(ABC):
    """Uniform query interface over one version-control tool.

    A backend is selected once at startup by detect_backend() and then used
    for the whole session. Every method blocks until the tool returns; patch
    text is handed to the parser complete.
    """

    tool: str = ""
    diff_format: DiffFormat = DiffFormat.GIT

    def __init__(self, info: VcsInfo):
        self.info = info

    @property
    def root_path(self) -> Path:
        return self.info.root_path

    def _run(self, args: list[str], strip: bool = True, ok_returncodes: tuple[int, ...] = ()) -> str:
        """Run the backend's tool from the repository root."""
        return run_vcs_command(self.tool, args, cwd=self.root_path, strip=strip, ok_returncodes=ok_returncodes)

    @classmethod
    @abstractmethod
    def discover(cls, cwd: Optional[Path] = None) -> Optional["VcsBackend"]:
        """Return a backend for the repository containing cwd, or None."""
        pass

    @abstractmethod
    def list_revisions(self, offset: int = 0, limit: int = 50) -> list[RevisionRef]:
        """List recent revisions, newest first."""
        pass

    @abstractmethod
    def resolve_revisions(self, expression: str) -> list[str]:
        """Resolve a backend-specific revision expression to ids, oldest first.

        The expression is passed to the tool untouched; syntax errors surface
        as VcsError carrying the tool's own message.
        """
        pass

    @abstractmethod
    def get_revisions(self, ids: list[str]) -> list[RevisionRef]:
        """Return metadata for the given ids, in input order."""
        pass

    @abstractmethod
    def diff_uncommitted(self) -> str:
        """Return raw patch text for uncommitted changes."""
        pass

    @abstractmethod
    def diff_range(self, ids: list[str]) -> str:
        """Return raw patch text from the parent of ids[0] to ids[-1]."""
        pass

    @abstractmethod
    def diff_uncommitted_with(self, ids: list[str]) -> str:
        """Return raw patch text from the parent of ids[0] to the working tree."""
        pass

    @abstractmethod
    def show_file(self, path: str, revision: str) -> str:
        """Return the content of a file at a revision."""
        pass

    @abstractmethod
    def base_revision(self, source: DiffSource) -> Optional[str]:
        """Revision holding the old side of a diff, or None for an empty tree."""
        pass

    def get_diff(self, source: DiffSource) -> str:
        """Return raw patch text for a diff source.

        Raises:
            NoChangesError: If the source produces an empty diff.
        """
        if source.kind == DiffSourceKind.WORKING_TREE:
            text = self.diff_uncommitted()
        else:
            if not source.revisions:
                raise NoChangesError("No revisions selected.")
            ids = list(source.revisions)
            if source.kind == DiffSourceKind.COMMIT_RANGE:
                text = self.diff_range(ids)
            else:
                text = self.diff_uncommitted_with(ids)

        if not text.strip():
            raise NoChangesError("No changes to review.")
        return text

    def has_uncommitted_changes(self) -> bool:
        try:
            return bool(self.diff_uncommitted().strip())
        except VcsError:
            return False

    def read_file_lines(self, path: str, side: LineSide, source: DiffSource) -> list[str]:
        """Return the full content of one side of a file, split into lines.

        The new side comes from the working tree when the source includes it,
        otherwise from the newest revision; the old side from the base revision.
        """
        if side == LineSide.NEW:
            if source.includes_working_tree:
                return (self.root_path / path).read_text().splitlines()
            return self.show_file(path, source.newest).splitlines()

        base = self.base_revision(source)
        if base is None:
            return []
        return self.show_file(path, base).splitlines()

    def fetch_file_lines(
        self, path: str, side: LineSide, source: DiffSource, start: int, end: int
    ) -> list[str]:
        """Return lines start..end (1-based, inclusive) of one side of a file."""
        if start < 1 or start > end:
            return []
        lines = self.read_file_lines(path, side, source)
        return lines[start - 1:end]
