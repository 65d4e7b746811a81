"""Data models for the diffnote diff model.

Contains:
- DiffFormat: Patch dialect produced by a backend
- ChangeKind: How a file changed
- LineKind: Whether a diff line is context, added or removed
- LineSide: Old or new side of the diff
- LineAddress: Stable (file, side, line) address of a diff line
- DiffLine: A single rendered diff line
- HiddenContext: Unrendered unchanged lines before a hunk (or after the last)
- Hunk: A contiguous block of a diff
- FileDiff: Diff for a single file containing multiple hunks

These objects are rebuilt from scratch on every diff (re)load and never
mutated afterwards. Review state refers to them by file identity and
LineAddress only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from diffnote.diff.fingerprint import compute_fingerprint


class DiffFormat(str, Enum):
    """Patch dialects understood by the parser."""

    GIT = "git"  # "diff --git" headers (git, jj --git)
    HG = "hg"  # "diff -r" headers, paths may carry timestamps


class ChangeKind(str, Enum):
    """How a file changed."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    BINARY = "binary"

    @property
    def letter(self) -> str:
        return {
            ChangeKind.ADDED: "A",
            ChangeKind.DELETED: "D",
            ChangeKind.MODIFIED: "M",
            ChangeKind.RENAMED: "R",
            ChangeKind.COPIED: "C",
            ChangeKind.BINARY: "B",
        }[self]


class LineKind(str, Enum):
    """Origin of a diff line."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


class LineSide(str, Enum):
    """Side of the diff a line number refers to."""

    OLD = "old"
    NEW = "new"


@dataclass(frozen=True)
class LineAddress:
    """Stable address of a diff line: (file identity, side, line number)."""

    file: str
    side: LineSide
    line: int

    def sort_key(self) -> tuple[str, int, int]:
        """Order by file, then line number, new side before old side."""
        return (self.file, self.line, 0 if self.side == LineSide.NEW else 1)


@dataclass(frozen=True)
class DiffLine:
    """A single diff line with its line numbers on both sides."""

    kind: LineKind
    text: str
    file: str
    old_line: Optional[int] = None
    new_line: Optional[int] = None

    @property
    def address(self) -> LineAddress:
        """Primary address: removed lines live on the old side, all others on the new side."""
        if self.kind == LineKind.REMOVED:
            return LineAddress(self.file, LineSide.OLD, self.old_line)
        return LineAddress(self.file, LineSide.NEW, self.new_line)

    def address_on(self, side: LineSide) -> Optional[LineAddress]:
        line = self.old_line if side == LineSide.OLD else self.new_line
        if line is None:
            return None
        return LineAddress(self.file, side, line)

    @property
    def prefix(self) -> str:
        return {LineKind.CONTEXT: " ", LineKind.ADDED: "+", LineKind.REMOVED: "-"}[self.kind]


@dataclass(frozen=True)
class HiddenContext:
    """Unchanged lines that the patch does not render.

    Index 0 is the gap before the first hunk, index k the gap between hunk
    k-1 and hunk k, and index len(hunks) the trailing gap after the last hunk.
    Lines new_start..new_start+count-1 (and the matching old-side range) are
    fetched on demand.
    """

    file: str
    index: int
    old_start: int
    new_start: int
    count: int

    @property
    def new_end(self) -> int:
        return self.new_start + self.count - 1

    @property
    def old_end(self) -> int:
        return self.old_start + self.count - 1


@dataclass
class Hunk:
    """A contiguous block of a diff."""

    header: str  # The @@ ... @@ line
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[DiffLine] = field(default_factory=list)
    section: str = ""  # Text after the closing @@, usually the enclosing function
    gap_before: Optional[HiddenContext] = None

    @property
    def first_old_line(self) -> int:
        # A zero-length side reports the line *before* the change
        return self.old_start if self.old_count else self.old_start + 1

    @property
    def first_new_line(self) -> int:
        return self.new_start if self.new_count else self.new_start + 1

    @property
    def old_end_exclusive(self) -> int:
        return self.first_old_line + self.old_count

    @property
    def new_end_exclusive(self) -> int:
        return self.first_new_line + self.new_count


@dataclass
class FileDiff:
    """Diff for a single file containing multiple hunks."""

    old_path: Optional[str]
    new_path: Optional[str]
    kind: ChangeKind = ChangeKind.MODIFIED
    hunks: list[Hunk] = field(default_factory=list)
    header_lines: list[str] = field(default_factory=list)  # From the diff header up to first @@
    raw_text: str = ""  # The file's full patch block
    is_binary: bool = False

    @property
    def path(self) -> str:
        """File identity: the new path, or the old path for deletions."""
        return self.new_path or self.old_path

    @property
    def gaps(self) -> list[HiddenContext]:
        return [h.gap_before for h in self.hunks if h.gap_before is not None]

    @property
    def fingerprint(self) -> str:
        return compute_fingerprint(self.raw_text)

    @property
    def additions(self) -> int:
        return sum(1 for h in self.hunks for ln in h.lines if ln.kind == LineKind.ADDED)

    @property
    def deletions(self) -> int:
        return sum(1 for h in self.hunks for ln in h.lines if ln.kind == LineKind.REMOVED)

    def find_line(self, address: LineAddress) -> Optional[DiffLine]:
        """Find the hunk line rendered at an address, if any."""
        if address.file != self.path:
            return None
        for hunk in self.hunks:
            for line in hunk.lines:
                if line.address_on(address.side) == address:
                    return line
        return None
