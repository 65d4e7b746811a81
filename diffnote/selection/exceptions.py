"""Commit selection exception classes.

Contains:
- SelectionError: Base exception for commit selection errors
- EmptySelectionError: Raised when confirming an empty selection
"""


class SelectionError(Exception):
    """Base exception for commit selection errors."""

    pass


class EmptySelectionError(SelectionError):
    """Raised when a selection is confirmed with no commits selected."""

    pass
