"""Markdown export of review comments.

Contains:
- generate_markdown: Render review state as a numbered Markdown list
- export_review: generate_markdown, refusing to export an empty review
- format_location: Render a comment anchor as path[:line[-line]]
"""

from typing import Optional, Union

from diffnote.diff.models import FileDiff, LineSide
from diffnote.export.exceptions import NoCommentsError
from diffnote.review.models import Comment, CommentType, FileAnchor, RangeAnchor, ReviewState
from diffnote.vcs.models import DiffSource, DiffSourceKind


INTRO = "I reviewed your code and have the following comments. Please address them."

SHORT_ID_LENGTH = 7


def _short(revision_id: str) -> str:
    return revision_id[:SHORT_ID_LENGTH]


def _source_line(source: Optional[DiffSource]) -> Optional[str]:
    if source is None or not source.revisions:
        return None
    short_ids = ", ".join(_short(r) for r in source.revisions)
    if source.kind == DiffSourceKind.WORKING_TREE_AND_COMMITS:
        return f"Reviewing working tree + commits: {short_ids}"
    if len(source.revisions) == 1:
        return f"Reviewing commit: {short_ids}"
    return f"Reviewing commits: {short_ids}"


def _comment_types_line() -> str:
    order = [CommentType.ISSUE, CommentType.SUGGESTION, CommentType.NOTE, CommentType.PRAISE]
    return "Comment types: " + ", ".join(f"{t.tag} ({t.description})" for t in order)


def format_location(anchor: Union[FileAnchor, RangeAnchor]) -> str:
    """Render an anchor: "path", "path:N", "path:N-M"; old side uses "~"."""
    if isinstance(anchor, FileAnchor):
        return anchor.file
    mark = "~" if anchor.side == LineSide.OLD else ""
    if anchor.is_single:
        return f"{anchor.file}:{mark}{anchor.start}"
    return f"{anchor.file}:{mark}{anchor.start}-{mark}{anchor.end}"


def _ordered_comments(comments: list[Comment]) -> list[Comment]:
    """File comments first, then range comments by line, new side first."""
    file_comments = sorted(
        (c for c in comments if isinstance(c.anchor, FileAnchor)), key=lambda c: c.seq
    )
    range_comments = sorted(
        (c for c in comments if isinstance(c.anchor, RangeAnchor)),
        key=lambda c: (c.anchor.start, 0 if c.anchor.side == LineSide.NEW else 1, c.seq),
    )
    return file_comments + range_comments


def _file_order(files: list[FileDiff], state: ReviewState) -> list[str]:
    """Diff order first, then files that only remain in review state, by path."""
    in_diff = [f.path for f in files]
    known = set(in_diff)
    leftover = sorted(p for p in state.files if p not in known)
    return in_diff + leftover


def generate_markdown(
    files: list[FileDiff],
    state: ReviewState,
    source: Optional[DiffSource] = None,
    reviewed_only: bool = False,
) -> str:
    """Render review state as Markdown for another party to act on.

    The output only depends on the arguments, so identical inputs always give
    identical text.

    Args:
        files: The current diff model, which fixes the file order.
        state: Review state to export.
        source: What was reviewed; commit sources add a "Reviewing ..." line.
        reviewed_only: Only include comments on files marked reviewed.

    Returns:
        The Markdown text.
    """
    lines = [INTRO, ""]

    source_line = _source_line(source)
    if source_line:
        lines.extend([source_line, ""])

    lines.extend([_comment_types_line(), ""])

    if state.notes:
        lines.extend([f"Summary: {state.notes}", ""])

    number = 0
    for path in _file_order(files, state):
        review = state.files.get(path)
        if review is None or (reviewed_only and not review.reviewed):
            continue
        for comment in _ordered_comments(review.comments):
            number += 1
            suffix = " (outdated)" if comment.orphaned else ""
            lines.append(
                f"{number}. **[{comment.type.tag}]** {format_location(comment.anchor)} - {comment.body}{suffix}"
            )

    return "\n".join(lines) + "\n"


def _exportable(state: ReviewState, reviewed_only: bool) -> bool:
    for review in state.files.values():
        if review.comments and (review.reviewed or not reviewed_only):
            return True
    return False


def export_review(
    files: list[FileDiff],
    state: ReviewState,
    source: Optional[DiffSource] = None,
    reviewed_only: bool = False,
) -> str:
    """Like generate_markdown, but fail when there is nothing to export.

    Raises:
        NoCommentsError: If no comment passes the filter.
    """
    if not _exportable(state, reviewed_only):
        if reviewed_only and any(True for _ in state.iter_comments()):
            raise NoCommentsError("No comments on reviewed files to export")
        raise NoCommentsError("No comments to export")
    return generate_markdown(files, state, source=source, reviewed_only=reviewed_only)
