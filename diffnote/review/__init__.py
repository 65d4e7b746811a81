"""Review state for diffnote.

This package owns everything a reviewer records about a diff:
- exceptions: ReviewError, UnknownFileError, InvalidAnchorError, ...
- models: Comment, CommentType, FileAnchor, RangeAnchor, FileReview, ReviewState
- store: ReviewStore
"""

# Exceptions
from diffnote.review.exceptions import (
    CommentNotFoundError,
    InvalidAnchorError,
    InvalidCommentError,
    ReviewError,
    UnknownFileError,
)

# Models
from diffnote.review.models import (
    Anchor,
    Comment,
    CommentType,
    FileAnchor,
    FileReview,
    RangeAnchor,
    ReviewState,
)

# Store
from diffnote.review.store import ReviewStore


__all__ = [
    # Exceptions
    "CommentNotFoundError",
    "InvalidAnchorError",
    "InvalidCommentError",
    "ReviewError",
    "UnknownFileError",
    # Models
    "Anchor",
    "Comment",
    "CommentType",
    "FileAnchor",
    "FileReview",
    "RangeAnchor",
    "ReviewState",
    # Store
    "ReviewStore",
]
