"""Review export for diffnote.

This package provides:
- exceptions: ExportError, NoCommentsError
- markdown: generate_markdown, export_review, format_location
"""

# Exceptions
from diffnote.export.exceptions import (
    ExportError,
    NoCommentsError,
)

# Markdown
from diffnote.export.markdown import (
    export_review,
    format_location,
    generate_markdown,
)


__all__ = [
    # Exceptions
    "ExportError",
    "NoCommentsError",
    # Markdown
    "export_review",
    "format_location",
    "generate_markdown",
]
