"""Tests for diffnote.review store and models."""

import pytest

from diffnote.diff import LineAddress, LineSide, parse_unified_diff
from diffnote.review import (
    CommentNotFoundError,
    CommentType,
    FileAnchor,
    InvalidAnchorError,
    InvalidCommentError,
    RangeAnchor,
    ReviewState,
    ReviewStore,
    UnknownFileError,
)


@pytest.fixture
def store(sample_diff):
    files, _ = parse_unified_diff(sample_diff)
    store = ReviewStore()
    store.bind(files)
    return store


def new_line(line: int, file: str = "src/auth.rs") -> LineAddress:
    return LineAddress(file, LineSide.NEW, line)


class TestCommentType:
    """Tests for CommentType helpers."""

    def test_tags(self):
        assert [t.tag for t in CommentType] == ["NOTE", "SUGGESTION", "ISSUE", "PRAISE"]

    def test_descriptions(self):
        assert CommentType.ISSUE.description == "problems to fix"
        assert CommentType.PRAISE.description == "positive feedback"


class TestBind:
    """Tests for ReviewStore.bind."""

    def test_creates_file_entries(self, store):
        """Test every diff file gets an unreviewed entry."""
        assert store.bound_paths == ["src/auth.rs", "docs/notes.md", "old/legacy.py"]
        assert set(store.state.files) == set(store.bound_paths)
        assert store.reviewed_count == 0

    def test_keeps_existing_state(self, sample_diff):
        """Test rebinding does not reset existing entries."""
        files, _ = parse_unified_diff(sample_diff)
        store = ReviewStore()
        store.bind(files)
        store.toggle_reviewed("src/auth.rs")

        store.bind(files)
        assert store.is_reviewed("src/auth.rs")


class TestReviewed:
    """Tests for reviewed flags."""

    def test_toggle(self, store):
        assert store.toggle_reviewed("docs/notes.md") is True
        assert store.is_reviewed("docs/notes.md")
        assert store.reviewed_count == 1
        assert store.toggle_reviewed("docs/notes.md") is False
        assert store.reviewed_count == 0

    def test_unknown_file(self, store):
        with pytest.raises(UnknownFileError):
            store.toggle_reviewed("nope.py")
        assert "nope.py" not in store.state.files


class TestRangeAnchor:
    """Tests for ReviewStore.range_anchor."""

    def test_normalises_order(self):
        """Test endpoints given in reverse order are swapped."""
        anchor = ReviewStore.range_anchor(new_line(44), new_line(42))
        assert (anchor.start, anchor.end) == (42, 44)
        assert anchor.side == LineSide.NEW

    def test_rejects_cross_file(self):
        with pytest.raises(InvalidAnchorError, match="span files"):
            ReviewStore.range_anchor(new_line(1), new_line(1, "docs/notes.md"))

    def test_rejects_cross_side(self):
        with pytest.raises(InvalidAnchorError, match="old and new"):
            ReviewStore.range_anchor(new_line(4), LineAddress("src/auth.rs", LineSide.OLD, 4))

    def test_covers(self):
        anchor = RangeAnchor(file="src/auth.rs", side=LineSide.NEW, start=3, end=5)
        assert anchor.covers(new_line(4))
        assert not anchor.covers(new_line(6))
        assert not anchor.covers(LineAddress("src/auth.rs", LineSide.OLD, 4))


class TestAddComment:
    """Tests for ReviewStore.add_comment."""

    def test_single_line(self, store):
        """Test a comment on one new-side line."""
        anchor = RangeAnchor(file="src/auth.rs", side=LineSide.NEW, start=42, end=42)
        comment_id = store.add_comment(anchor, CommentType.ISSUE, "Magic number")

        comment = store.get_comment(comment_id)
        assert comment_id == "c1"
        assert comment.body == "Magic number"
        assert comment.type == CommentType.ISSUE
        assert comment.line_text == "    let timeout = 42 * 1000;"
        assert comment.created_at == comment.updated_at
        assert not comment.orphaned

    def test_ids_are_sequential(self, store):
        first = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "one")
        second = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "two")
        assert (first, second) == ("c1", "c2")
        assert store.state.next_seq == 3

    def test_ids_not_reused_after_delete(self, store):
        first = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "one")
        store.delete_comment(first)
        assert store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "two") == "c2"

    def test_body_is_stripped(self, store):
        comment_id = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "  hi \n")
        assert store.get_comment(comment_id).body == "hi"

    def test_old_side_line_text(self, store):
        """Test a comment on a removed line records the removed text."""
        anchor = RangeAnchor(file="src/auth.rs", side=LineSide.OLD, start=41, end=41)
        comment_id = store.add_comment(anchor, CommentType.NOTE, "was 42")
        assert store.get_comment(comment_id).line_text == "    let timeout = 42;"

    def test_line_outside_hunks(self, store):
        """Test lines in hidden context are accepted without line text."""
        anchor = RangeAnchor(file="src/auth.rs", side=LineSide.NEW, start=20, end=22)
        comment_id = store.add_comment(anchor, CommentType.SUGGESTION, "extract this")
        assert store.get_comment(comment_id).line_text is None

    @pytest.mark.parametrize("body", ["", "   ", "\n\t"])
    def test_empty_body(self, store, body):
        """Test empty bodies are rejected without changing state."""
        before = store.state.model_dump()
        with pytest.raises(InvalidCommentError):
            store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, body)
        assert store.state.model_dump() == before

    def test_unknown_file(self, store):
        before = store.state.model_dump()
        with pytest.raises(UnknownFileError):
            store.add_comment(FileAnchor(file="missing.py"), CommentType.NOTE, "x")
        assert store.state.model_dump() == before

    @pytest.mark.parametrize("start,end", [(0, 1), (5, 3), (-1, -1)])
    def test_invalid_range(self, store, start, end):
        before = store.state.model_dump()
        anchor = RangeAnchor(file="src/auth.rs", side=LineSide.NEW, start=start, end=end)
        with pytest.raises(InvalidAnchorError):
            store.add_comment(anchor, CommentType.NOTE, "x")
        assert store.state.model_dump() == before


class TestEditDelete:
    """Tests for editing and deleting comments."""

    def test_edit_body_and_type(self, store):
        comment_id = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "old")
        created = store.get_comment(comment_id).created_at

        comment = store.edit_comment(comment_id, body="new", comment_type=CommentType.PRAISE)

        assert comment.body == "new"
        assert comment.type == CommentType.PRAISE
        assert comment.created_at == created
        assert comment.anchor == FileAnchor(file="docs/notes.md")

    def test_edit_type_only(self, store):
        comment_id = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "keep")
        store.edit_comment(comment_id, comment_type=CommentType.ISSUE)
        assert store.get_comment(comment_id).body == "keep"

    def test_edit_empty_body(self, store):
        comment_id = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "keep")
        with pytest.raises(InvalidCommentError):
            store.edit_comment(comment_id, body=" ", comment_type=CommentType.ISSUE)
        comment = store.get_comment(comment_id)
        assert (comment.body, comment.type) == ("keep", CommentType.NOTE)

    def test_edit_unknown(self, store):
        with pytest.raises(CommentNotFoundError):
            store.edit_comment("c99", body="x")

    def test_delete(self, store):
        comment_id = store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "bye")
        deleted = store.delete_comment(comment_id)

        assert deleted.body == "bye"
        assert store.comments_for("docs/notes.md") == []
        with pytest.raises(CommentNotFoundError):
            store.delete_comment(comment_id)


class TestQueries:
    """Tests for comment queries."""

    def test_comments_at(self, store):
        """Test range comments match covered lines and file comments match every line."""
        wide = store.add_comment(
            RangeAnchor(file="src/auth.rs", side=LineSide.NEW, start=40, end=43), CommentType.NOTE, "block"
        )
        whole = store.add_comment(FileAnchor(file="src/auth.rs"), CommentType.NOTE, "file")
        single = store.add_comment(
            RangeAnchor(file="src/auth.rs", side=LineSide.NEW, start=42, end=42), CommentType.ISSUE, "line"
        )
        store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "other file")

        assert [c.id for c in store.comments_at(new_line(42))] == [wide, whole, single]
        assert [c.id for c in store.comments_at(new_line(40))] == [wide, whole]
        assert [c.id for c in store.comments_at(new_line(10))] == [whole]
        assert [c.id for c in store.comments_at(LineAddress("src/auth.rs", LineSide.OLD, 4))] == [whole]

    def test_counts_and_clear(self, store):
        store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "a")
        store.add_comment(FileAnchor(file="src/auth.rs"), CommentType.NOTE, "b")
        store.toggle_reviewed("src/auth.rs")

        assert store.comment_count == 2
        assert store.has_comments
        assert store.clear_all() == 2
        assert not store.has_comments
        assert store.is_reviewed("src/auth.rs")

    def test_notes(self, store):
        store.set_notes("  Looks good overall  ")
        assert store.state.notes == "Looks good overall"
        store.set_notes("   ")
        assert store.state.notes is None


class TestStateSerialization:
    """Tests for ReviewState persistence shape."""

    def test_anchor_union_round_trip(self, store):
        """Test both anchor kinds survive a JSON round trip."""
        store.add_comment(FileAnchor(file="docs/notes.md"), CommentType.NOTE, "file")
        store.add_comment(
            RangeAnchor(file="src/auth.rs", side=LineSide.OLD, start=4, end=4), CommentType.ISSUE, "range"
        )

        restored = ReviewState.model_validate_json(store.state.model_dump_json())

        anchors = [c.anchor for c in restored.iter_comments()]
        assert isinstance(anchors[0], RangeAnchor)
        assert anchors[0].side == LineSide.OLD
        assert isinstance(anchors[1], FileAnchor)
        assert restored.next_seq == 3
