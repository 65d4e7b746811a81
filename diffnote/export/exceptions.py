"""Export exception classes.

Contains:
- ExportError: Base exception for export errors
- NoCommentsError: Raised when there is nothing to export
"""


class ExportError(Exception):
    """Base exception for export errors."""

    pass


class NoCommentsError(ExportError):
    """Raised when a review has no comments to export."""

    pass
