"""Tests for diffnote.selection module."""

import random

import pytest

from diffnote.selection import CommitSelection, EmptySelectionError
from diffnote.vcs import DiffSourceKind, RevisionRef, working_tree_ref


def revisions(count: int) -> list[RevisionRef]:
    """Candidates r0 (newest) .. r{count-1} (oldest)."""
    return [RevisionRef(id=f"r{i}", short_id=f"r{i}", summary=f"commit {i}") for i in range(count)]


@pytest.fixture
def selection():
    return CommitSelection(revisions(5))


class TestToggle:
    """Tests for CommitSelection.toggle."""

    def test_first_toggle_selects_one(self, selection):
        assert selection.toggle(2) is True
        assert selection.selected_indices == [2]

    def test_adjacent_extends(self, selection):
        selection.toggle(2)
        selection.toggle(3)
        selection.toggle(1)
        assert selection.selected_indices == [1, 2, 3]

    def test_non_adjacent_replaces(self, selection):
        """Test toggling 1 then 3 leaves only 3 selected."""
        selection.toggle(1)
        selection.toggle(3)
        assert selection.selected_indices == [3]

    def test_endpoint_shrinks(self, selection):
        for i in (1, 2, 3):
            selection.toggle(i)

        selection.toggle(1)
        assert selection.selected_indices == [2, 3]
        selection.toggle(3)
        assert selection.selected_indices == [2]
        selection.toggle(2)
        assert selection.is_empty

    def test_interior_is_noop(self, selection):
        for i in (1, 2, 3):
            selection.toggle(i)

        assert selection.toggle(2) is False
        assert selection.selected_indices == [1, 2, 3]

    @pytest.mark.parametrize("index", [-1, 5, 100])
    def test_out_of_range(self, selection, index):
        with pytest.raises(IndexError):
            selection.toggle(index)
        assert selection.is_empty

    def test_stays_contiguous(self):
        """Test any toggle sequence leaves an empty or contiguous selection."""
        rng = random.Random(1234)
        selection = CommitSelection(revisions(8))
        for _ in range(500):
            selection.toggle(rng.randrange(8))
            indices = selection.selected_indices
            if indices:
                assert indices == list(range(indices[0], indices[-1] + 1))
            else:
                assert selection.is_empty


class TestBulk:
    """Tests for select_all, clear and is_selected."""

    def test_select_all_and_clear(self, selection):
        selection.select_all()
        assert selection.selected_indices == [0, 1, 2, 3, 4]
        assert selection.is_selected(4)

        selection.clear()
        assert selection.is_empty
        assert not selection.is_selected(0)

    def test_select_all_without_candidates(self):
        selection = CommitSelection([])
        selection.select_all()
        assert selection.is_empty


class TestCycle:
    """Tests for cycle_next and cycle_prev."""

    def test_cycle_next(self, selection):
        selection.cycle_next()
        assert selection.selected_indices == [0, 1, 2, 3, 4]
        selection.cycle_next()
        assert selection.selected_indices == [4]
        selection.cycle_next()
        assert selection.selected_indices == [0, 1, 2, 3, 4]

        selection.clear()
        selection.toggle(2)
        selection.cycle_next()
        assert selection.selected_indices == [3]

    def test_cycle_next_from_range(self, selection):
        selection.toggle(1)
        selection.toggle(2)
        selection.cycle_next()
        assert selection.selected_indices == [2]

    def test_cycle_prev(self, selection):
        selection.cycle_prev()
        assert selection.selected_indices == [0, 1, 2, 3, 4]
        selection.cycle_prev()
        assert selection.selected_indices == [0]
        selection.cycle_prev()
        assert selection.selected_indices == [0, 1, 2, 3, 4]

        selection.clear()
        selection.toggle(3)
        selection.toggle(2)
        selection.cycle_prev()
        assert selection.selected_indices == [2]
        selection.cycle_prev()
        assert selection.selected_indices == [1]

    def test_cycle_without_candidates(self):
        selection = CommitSelection([])
        selection.cycle_next()
        selection.cycle_prev()
        assert selection.is_empty


class TestExtendCandidates:
    """Tests for CommitSelection.extend_candidates."""

    def test_appends_new_revisions(self, selection):
        more = revisions(8)[3:]
        assert selection.extend_candidates(more) == 3
        assert [c.id for c in selection.candidates] == [f"r{i}" for i in range(8)]

    def test_keeps_selection(self, selection):
        selection.toggle(4)
        selection.extend_candidates(revisions(7)[5:])
        selection.toggle(5)
        assert selection.selected_indices == [4, 5]


class TestConfirm:
    """Tests for CommitSelection.confirm."""

    def test_empty_selection(self, selection):
        with pytest.raises(EmptySelectionError):
            selection.confirm()

    def test_oldest_first(self, selection):
        selection.toggle(1)
        selection.toggle(2)
        selection.toggle(3)

        confirmed = selection.confirm()
        assert confirmed.revision_ids == ("r3", "r2", "r1")
        assert not confirmed.includes_working_tree
        assert confirmed.source.kind == DiffSourceKind.COMMIT_RANGE
        assert confirmed.source.oldest == "r3"
        assert confirmed.source.newest == "r1"

    def test_working_tree_only(self):
        selection = CommitSelection([working_tree_ref()] + revisions(3))
        selection.toggle(0)

        confirmed = selection.confirm()
        assert confirmed.revision_ids == ()
        assert confirmed.includes_working_tree
        assert confirmed.source.kind == DiffSourceKind.WORKING_TREE

    def test_working_tree_and_commits(self):
        selection = CommitSelection([working_tree_ref()] + revisions(3))
        selection.toggle(0)
        selection.toggle(1)
        selection.toggle(2)

        confirmed = selection.confirm()
        assert confirmed.revision_ids == ("r1", "r0")
        assert confirmed.source.kind == DiffSourceKind.WORKING_TREE_AND_COMMITS
