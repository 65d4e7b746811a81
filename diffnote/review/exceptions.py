"""Review state exception classes.

Contains all exception classes for review state operations:
- ReviewError: Base exception for review state errors
- UnknownFileError: Raised when a path is not part of the current diff
- InvalidAnchorError: Raised when a comment anchor is malformed
- InvalidCommentError: Raised when a comment body is empty
- CommentNotFoundError: Raised when a comment id does not exist
"""


class ReviewError(Exception):
    """Base exception for review state errors."""

    pass


class UnknownFileError(ReviewError):
    """Raised when a file identity is not part of the current diff."""

    pass


class InvalidAnchorError(ReviewError):
    """Raised when an anchor spans files or sides, or its range is invalid."""

    pass


class InvalidCommentError(ReviewError):
    """Raised when a comment has an empty body."""

    pass


class CommentNotFoundError(ReviewError):
    """Raised when no comment has the given id."""

    pass
