"""On-demand materialisation of hidden context lines.

Contains:
- ContextExpander: Fetches and caches unchanged lines for HiddenContext gaps
- lines_with_context: A file's hunk lines interleaved with expanded context
"""

from typing import TYPE_CHECKING, Optional, Union

from diffnote.diff.models import ChangeKind, DiffLine, FileDiff, HiddenContext, LineKind, LineSide
from diffnote.vcs.exceptions import ContextFetchError, VcsError
from diffnote.vcs.models import DiffSource

if TYPE_CHECKING:
    # vcs.base imports the diff models
    from diffnote.vcs.base import VcsBackend


class ContextExpander:
    """Cache of materialised context lines keyed by (file identity, gap index).

    Expanded lines are numbered from the gap's own start positions, so the
    order in which gaps are expanded never changes any line number. A failure
    only affects the gap being expanded.
    """

    def __init__(self, backend: "VcsBackend", source: DiffSource):
        self.backend = backend
        self.source = source
        self._expanded: dict[tuple[str, int], list[DiffLine]] = {}
        self._trailing: dict[str, Optional[HiddenContext]] = {}

    def _read_side(self, file_diff: FileDiff) -> tuple[str, LineSide]:
        # Deleted files only have an old side to read from
        if file_diff.kind == ChangeKind.DELETED:
            return file_diff.old_path, LineSide.OLD
        return file_diff.path, LineSide.NEW

    def expand(self, file_diff: FileDiff, gap: HiddenContext) -> list[DiffLine]:
        """Materialise the lines of one gap.

        Args:
            file_diff: The file the gap belongs to.
            gap: The HiddenContext to expand.

        Returns:
            Context DiffLines for the gap; a repeated call returns the cached lines.

        Raises:
            ContextFetchError: If the backend cannot provide the lines.
        """
        key = (gap.file, gap.index)
        if key in self._expanded:
            return self._expanded[key]
        if gap.count <= 0:
            return []

        path, side = self._read_side(file_diff)
        start = gap.new_start if side == LineSide.NEW else gap.old_start
        try:
            texts = self.backend.fetch_file_lines(path, side, self.source, start, start + gap.count - 1)
        except (VcsError, OSError, UnicodeDecodeError) as e:
            raise ContextFetchError(f"Could not load context for {gap.file}: {e}") from e

        lines = [
            DiffLine(
                kind=LineKind.CONTEXT,
                text=text,
                file=gap.file,
                old_line=gap.old_start + offset,
                new_line=gap.new_start + offset,
            )
            for offset, text in enumerate(texts)
        ]
        self._expanded[key] = lines
        return lines

    def is_expanded(self, file: str, index: int) -> bool:
        return (file, index) in self._expanded

    def expanded_lines(self, file: str, index: int) -> Optional[list[DiffLine]]:
        return self._expanded.get((file, index))

    def collapse(self, file: str, index: int) -> bool:
        """Forget one materialised gap. Returns True if it was expanded."""
        return self._expanded.pop((file, index), None) is not None

    def clear(self) -> None:
        """Drop every materialisation, e.g. after the diff is reloaded."""
        self._expanded.clear()
        self._trailing.clear()

    def trailing_gap(self, file_diff: FileDiff) -> Optional[HiddenContext]:
        """Return the gap after the last hunk, once the file length is known.

        Raises:
            ContextFetchError: If the file length cannot be determined.
        """
        if file_diff.is_binary:
            return None
        if file_diff.path in self._trailing:
            return self._trailing[file_diff.path]

        path, side = self._read_side(file_diff)
        try:
            total = len(self.backend.read_file_lines(path, side, self.source))
        except (VcsError, OSError, UnicodeDecodeError) as e:
            raise ContextFetchError(f"Could not read {path}: {e}") from e

        if file_diff.hunks:
            last = file_diff.hunks[-1]
            old_start, new_start = last.old_end_exclusive, last.new_end_exclusive
        else:
            old_start = new_start = 1

        start = new_start if side == LineSide.NEW else old_start
        count = total - start + 1
        gap = None
        if count > 0:
            gap = HiddenContext(
                file=file_diff.path,
                index=len(file_diff.hunks),
                old_start=old_start,
                new_start=new_start,
                count=count,
            )
        self._trailing[file_diff.path] = gap
        return gap

    def known_trailing_gap(self, file: str) -> Optional[HiddenContext]:
        """Return the trailing gap if trailing_gap() has already computed it."""
        return self._trailing.get(file)

    def find_gap(self, file_diff: FileDiff, index: int) -> Optional[HiddenContext]:
        """Look up a gap by index, including the trailing gap."""
        for gap in file_diff.gaps:
            if gap.index == index:
                return gap
        if index == len(file_diff.hunks):
            return self.trailing_gap(file_diff)
        return None


def lines_with_context(
    file_diff: FileDiff, expander: Optional[ContextExpander] = None
) -> list[Union[DiffLine, HiddenContext]]:
    """Return a file's rendered sequence.

    Expanded gaps contribute their context lines; gaps not yet expanded
    appear as HiddenContext placeholders.
    """
    rendered: list[Union[DiffLine, HiddenContext]] = []

    def _add_gap(gap: HiddenContext) -> None:
        lines = expander.expanded_lines(gap.file, gap.index) if expander else None
        if lines is None:
            rendered.append(gap)
        else:
            rendered.extend(lines)

    for hunk in file_diff.hunks:
        if hunk.gap_before is not None:
            _add_gap(hunk.gap_before)
        rendered.extend(hunk.lines)

    if expander is not None:
        trailing = expander.known_trailing_gap(file_diff.path)
        if trailing is not None:
            _add_gap(trailing)

    return rendered
