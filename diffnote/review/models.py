"""Review state data models for diffnote.

Contains Pydantic models for review state, which is what gets persisted:
- CommentType: Category of a review comment
- FileAnchor: A comment on a whole file
- RangeAnchor: A comment on an inclusive line range on one side of one file
- Anchor: Discriminated union of the two anchor kinds
- Comment: A typed review comment
- FileReview: Reviewed flag and comments for one file
- ReviewState: All review state for a session
"""

from enum import Enum
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, Field

from diffnote.diff.models import LineAddress, LineSide


class CommentType(str, Enum):
    """Category of a review comment."""

    NOTE = "note"
    SUGGESTION = "suggestion"
    ISSUE = "issue"
    PRAISE = "praise"

    @property
    def tag(self) -> str:
        """Upper-case label used in exports, e.g. "ISSUE"."""
        return self.value.upper()

    @property
    def description(self) -> str:
        return {
            CommentType.ISSUE: "problems to fix",
            CommentType.SUGGESTION: "improvements",
            CommentType.NOTE: "observations",
            CommentType.PRAISE: "positive feedback",
        }[self]


class FileAnchor(BaseModel):
    """Anchors a comment to a whole file."""

    kind: Literal["file"] = "file"
    file: str


class RangeAnchor(BaseModel):
    """Anchors a comment to lines start..end (inclusive) on one side of one file."""

    kind: Literal["range"] = "range"
    file: str
    side: LineSide
    start: int
    end: int

    @property
    def start_address(self) -> LineAddress:
        return LineAddress(self.file, self.side, self.start)

    @property
    def end_address(self) -> LineAddress:
        return LineAddress(self.file, self.side, self.end)

    @property
    def is_single(self) -> bool:
        return self.start == self.end

    def covers(self, address: LineAddress) -> bool:
        return (
            address.file == self.file
            and address.side == self.side
            and self.start <= address.line <= self.end
        )


Anchor = Annotated[Union[FileAnchor, RangeAnchor], Field(discriminator="kind")]


class Comment(BaseModel):
    """A typed review comment."""

    id: str  # "c<seq>", allocated by the store
    seq: int  # Creation order
    anchor: Anchor
    type: CommentType
    body: str
    created_at: str  # ISO format timestamp
    updated_at: str  # ISO format timestamp
    # Set when the file's diff changed since the comment was written
    orphaned: bool = False
    # Text of the first anchored line when the comment was written
    line_text: Optional[str] = None

    @property
    def file(self) -> str:
        return self.anchor.file


class FileReview(BaseModel):
    """Review state for one file."""

    path: str
    reviewed: bool = False
    comments: list[Comment] = Field(default_factory=list)


class ReviewState(BaseModel):
    """All review state for a session, keyed by file identity."""

    files: dict[str, FileReview] = Field(default_factory=dict)
    next_seq: int = 1
    notes: Optional[str] = None  # Session-level summary

    def iter_comments(self) -> Iterator[Comment]:
        for review in self.files.values():
            yield from review.comments
