"""Diff model for diffnote.

This package turns backend patch text into a navigable diff model:
- models: FileDiff, Hunk, DiffLine, HiddenContext, LineAddress, ...
- parser: parse_unified_diff
- fingerprint: compute_fingerprint
- expansion: ContextExpander, lines_with_context
- ignore: filter_ignored, load_ignore_patterns
"""

# Models
from diffnote.diff.models import (
    ChangeKind,
    DiffFormat,
    DiffLine,
    FileDiff,
    HiddenContext,
    Hunk,
    LineAddress,
    LineKind,
    LineSide,
)

# Fingerprint
from diffnote.diff.fingerprint import (
    compute_fingerprint,
)

# Parser
from diffnote.diff.parser import (
    parse_unified_diff,
)

# Expansion
from diffnote.diff.expansion import (
    ContextExpander,
    lines_with_context,
)

# Ignore rules
from diffnote.diff.ignore import (
    IGNORE_FILENAME,
    filter_ignored,
    load_ignore_patterns,
)


__all__ = [
    # Models
    "ChangeKind",
    "DiffFormat",
    "DiffLine",
    "FileDiff",
    "HiddenContext",
    "Hunk",
    "LineAddress",
    "LineKind",
    "LineSide",
    # Fingerprint
    "compute_fingerprint",
    # Parser
    "parse_unified_diff",
    # Expansion
    "ContextExpander",
    "lines_with_context",
    # Ignore rules
    "IGNORE_FILENAME",
    "filter_ignored",
    "load_ignore_patterns",
]
