"""Commit range selection for diffnote.

This package provides:
- exceptions: SelectionError, EmptySelectionError
- selector: CommitSelection, ConfirmedSelection
"""

# Exceptions
from diffnote.selection.exceptions import (
    EmptySelectionError,
    SelectionError,
)

# Selector
from diffnote.selection.selector import (
    CommitSelection,
    ConfirmedSelection,
)


__all__ = [
    # Exceptions
    "EmptySelectionError",
    "SelectionError",
    # Selector
    "CommitSelection",
    "ConfirmedSelection",
]
