"""Commit range selection.

Contains:
- CommitSelection: A contiguous selection over a list of candidate revisions
- ConfirmedSelection: The revisions a confirmed selection resolves to
"""

from dataclasses import dataclass
from typing import Optional

from diffnote.selection.exceptions import EmptySelectionError
from diffnote.vcs.models import DiffSource, RevisionRef


@dataclass(frozen=True)
class ConfirmedSelection:
    """Result of confirming a selection."""

    revision_ids: tuple[str, ...]  # Oldest first, synthetic entry removed
    includes_working_tree: bool

    @property
    def source(self) -> DiffSource:
        if not self.revision_ids:
            return DiffSource.working_tree()
        if self.includes_working_tree:
            return DiffSource.working_tree_and_commits(list(self.revision_ids))
        return DiffSource.commit_range(list(self.revision_ids))


class CommitSelection:
    """A contiguous interval of selected candidates.

    Candidates are ordered newest first, with the synthetic working-tree
    entry (if any) at index 0. The selection is either empty or a single
    interval (start, end) with start <= end.

    Toggle rules:
        - empty selection: select the index alone
        - interval endpoint: shrink (a one-element interval becomes empty)
        - interior index: no change
        - index adjacent to the interval: extend
        - index further away: replace the selection with the index alone
    """

    def __init__(self, candidates: list[RevisionRef]):
        self.candidates = list(candidates)
        self.interval: Optional[tuple[int, int]] = None

    def __len__(self) -> int:
        return len(self.candidates)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.candidates):
            raise IndexError(f"Candidate index {index} out of range (0-{len(self.candidates) - 1})")

    def toggle(self, index: int) -> bool:
        """Toggle a candidate.

        Args:
            index: Candidate position (0 = newest).

        Returns:
            True if the selection changed.

        Raises:
            IndexError: If the index is out of range.
        """
        self._check_index(index)

        if self.interval is None:
            self.interval = (index, index)
            return True

        start, end = self.interval
        if index == start and index == end:
            self.interval = None
        elif index == start:
            self.interval = (start + 1, end)
        elif index == end:
            self.interval = (start, end - 1)
        elif start < index < end:
            return False
        elif index == start - 1:
            self.interval = (index, end)
        elif index == end + 1:
            self.interval = (start, index)
        else:
            self.interval = (index, index)
        return True

    def select_all(self) -> None:
        if self.candidates:
            self.interval = (0, len(self.candidates) - 1)

    def clear(self) -> None:
        self.interval = None

    def is_selected(self, index: int) -> bool:
        if self.interval is None:
            return False
        start, end = self.interval
        return start <= index <= end

    @property
    def selected_indices(self) -> list[int]:
        if self.interval is None:
            return []
        start, end = self.interval
        return list(range(start, end + 1))

    @property
    def is_empty(self) -> bool:
        return self.interval is None

    def _all(self) -> Optional[tuple[int, int]]:
        return (0, len(self.candidates) - 1) if self.candidates else None

    def cycle_next(self) -> None:
        """Step a single-commit selection towards the end of the list.

        all -> last, i -> i+1, last -> all, a partial range -> its last entry,
        nothing -> all.
        """
        if not self.candidates:
            return
        n = len(self.candidates)
        if self.interval is None:
            self.interval = self._all()
        elif self.interval == self._all():
            self.interval = (n - 1, n - 1)
        else:
            start, end = self.interval
            if start != end:
                self.interval = (end, end)
            elif start == n - 1:
                self.interval = self._all()
            else:
                self.interval = (start + 1, start + 1)

    def cycle_prev(self) -> None:
        """Step a single-commit selection towards the start of the list.

        all -> first, i -> i-1, first -> all, a partial range -> its first
        entry, nothing -> all.
        """
        if not self.candidates:
            return
        if self.interval is None:
            self.interval = self._all()
        elif self.interval == self._all():
            self.interval = (0, 0)
        else:
            start, end = self.interval
            if start != end:
                self.interval = (start, start)
            elif start == 0:
                self.interval = self._all()
            else:
                self.interval = (start - 1, start - 1)

    def extend_candidates(self, revisions: list[RevisionRef]) -> int:
        """Append older revisions (the next page of history).

        Revisions already present are skipped.

        Returns:
            Number of candidates added.
        """
        known = {c.id for c in self.candidates}
        added = [r for r in revisions if r.id not in known]
        self.candidates.extend(added)
        return len(added)

    def confirm(self) -> ConfirmedSelection:
        """Resolve the selection to revision ids.

        Raises:
            EmptySelectionError: If nothing is selected.
        """
        if self.interval is None:
            raise EmptySelectionError("Select at least one commit")

        selected = [self.candidates[i] for i in self.selected_indices]
        includes_working_tree = any(r.is_working_tree for r in selected)
        # Candidates are newest first; diff requests want oldest first
        revision_ids = tuple(r.id for r in reversed(selected) if not r.is_working_tree)
        return ConfirmedSelection(
            revision_ids=revision_ids,
            includes_working_tree=includes_working_tree,
        )
