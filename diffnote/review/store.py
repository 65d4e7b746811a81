"""Review state store.

Contains:
- ReviewStore: Owns the session's ReviewState and applies every mutation
"""

from datetime import datetime, timezone
from typing import Optional, Union

from diffnote.diff.models import FileDiff, LineAddress
from diffnote.review.exceptions import (
    CommentNotFoundError,
    InvalidAnchorError,
    InvalidCommentError,
    UnknownFileError,
)
from diffnote.review.models import (
    Comment,
    CommentType,
    FileAnchor,
    FileReview,
    RangeAnchor,
    ReviewState,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReviewStore:
    """Single writer of review state.

    Review state is keyed by file identity and line address only, so it
    survives any number of diff reloads. bind() tells the store which files
    the current diff contains; comments and reviewed flags can only be set
    on those files. Every operation validates before it mutates, so a failed
    call leaves the state unchanged.
    """

    def __init__(self, state: Optional[ReviewState] = None):
        self.state = state if state is not None else ReviewState()
        self._files: dict[str, FileDiff] = {}

    def bind(self, files: list[FileDiff]) -> None:
        """Set the current diff model and create entries for new files."""
        self._files = {f.path: f for f in files}
        for path in self._files:
            if path not in self.state.files:
                self.state.files[path] = FileReview(path=path)

    @property
    def bound_paths(self) -> list[str]:
        return list(self._files)

    def _require_file(self, path: str) -> FileReview:
        if path not in self._files:
            raise UnknownFileError(f"File is not part of the current diff: {path}")
        return self.state.files[path]

    # Reviewed flags

    def toggle_reviewed(self, path: str) -> bool:
        """Flip the reviewed flag of a file.

        Returns:
            The new value.

        Raises:
            UnknownFileError: If the path is not in the current diff.
        """
        review = self._require_file(path)
        review.reviewed = not review.reviewed
        return review.reviewed

    def is_reviewed(self, path: str) -> bool:
        review = self.state.files.get(path)
        return review.reviewed if review else False

    @property
    def reviewed_count(self) -> int:
        return sum(1 for path in self._files if self.is_reviewed(path))

    # Comments

    @staticmethod
    def range_anchor(first: LineAddress, second: LineAddress) -> RangeAnchor:
        """Build a range anchor from two addresses given in either order.

        Raises:
            InvalidAnchorError: If the addresses are on different files or sides.
        """
        if first.file != second.file:
            raise InvalidAnchorError(
                f"A comment range cannot span files ({first.file}, {second.file})"
            )
        if first.side != second.side:
            raise InvalidAnchorError("A comment range cannot span the old and new side")
        return RangeAnchor(
            file=first.file,
            side=first.side,
            start=min(first.line, second.line),
            end=max(first.line, second.line),
        )

    def _validate_anchor(self, anchor: Union[FileAnchor, RangeAnchor]) -> FileReview:
        review = self._require_file(anchor.file)
        if isinstance(anchor, RangeAnchor):
            if anchor.start < 1 or anchor.end < 1:
                raise InvalidAnchorError(f"Line numbers start at 1: {anchor.start}-{anchor.end}")
            if anchor.start > anchor.end:
                raise InvalidAnchorError(f"Range start {anchor.start} is after end {anchor.end}")
        return review

    @staticmethod
    def _validate_body(body: str) -> str:
        if not body or not body.strip():
            raise InvalidCommentError("Comment body cannot be empty")
        return body.strip()

    def _line_text(self, anchor: Union[FileAnchor, RangeAnchor]) -> Optional[str]:
        if not isinstance(anchor, RangeAnchor):
            return None
        line = self._files[anchor.file].find_line(anchor.start_address)
        return line.text if line else None

    def add_comment(
        self,
        anchor: Union[FileAnchor, RangeAnchor],
        comment_type: CommentType,
        body: str,
    ) -> str:
        """Add a comment.

        Args:
            anchor: Where the comment applies.
            comment_type: Category of the comment.
            body: Comment text.

        Returns:
            The new comment's id.

        Raises:
            UnknownFileError: If the anchor's file is not in the current diff.
            InvalidAnchorError: If the range is invalid.
            InvalidCommentError: If the body is empty.
        """
        review = self._validate_anchor(anchor)
        body = self._validate_body(body)

        seq = self.state.next_seq
        now = _now()
        comment = Comment(
            id=f"c{seq}",
            seq=seq,
            anchor=anchor,
            type=comment_type,
            body=body,
            created_at=now,
            updated_at=now,
            line_text=self._line_text(anchor),
        )
        review.comments.append(comment)
        self.state.next_seq = seq + 1
        return comment.id

    def get_comment(self, comment_id: str) -> Comment:
        """Raises CommentNotFoundError for unknown ids."""
        for comment in self.state.iter_comments():
            if comment.id == comment_id:
                return comment
        raise CommentNotFoundError(f"No comment with id {comment_id}")

    def edit_comment(
        self,
        comment_id: str,
        body: Optional[str] = None,
        comment_type: Optional[CommentType] = None,
    ) -> Comment:
        """Change a comment's body and/or type.

        The anchor, creation time and orphan flag are kept.
        """
        comment = self.get_comment(comment_id)
        if body is not None:
            body = self._validate_body(body)

        if body is not None:
            comment.body = body
        if comment_type is not None:
            comment.type = comment_type
        comment.updated_at = _now()
        return comment

    def delete_comment(self, comment_id: str) -> Comment:
        comment = self.get_comment(comment_id)
        self.state.files[comment.file].comments.remove(comment)
        return comment

    def comments_for(self, path: str) -> list[Comment]:
        review = self.state.files.get(path)
        if review is None:
            return []
        return sorted(review.comments, key=lambda c: c.seq)

    def comments_at(self, address: LineAddress) -> list[Comment]:
        """Return the comments covering an address, in creation order.

        File comments cover every address in their file.
        """
        return [
            c for c in self.comments_for(address.file)
            if not isinstance(c.anchor, RangeAnchor) or c.anchor.covers(address)
        ]

    def clear_all(self) -> int:
        """Remove every comment, keeping reviewed flags.

        Returns:
            Number of comments removed.
        """
        removed = 0
        for review in self.state.files.values():
            removed += len(review.comments)
            review.comments.clear()
        return removed

    @property
    def comment_count(self) -> int:
        return sum(1 for _ in self.state.iter_comments())

    @property
    def has_comments(self) -> bool:
        return self.comment_count > 0

    def set_notes(self, text: Optional[str]) -> None:
        """Set the session summary; blank text clears it."""
        self.state.notes = text.strip() if text and text.strip() else None
