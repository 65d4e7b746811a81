"""Reconciliation of saved review state with a freshly loaded diff.

Contains:
- ReconcileResult: The reconciled state and what happened to each file
- reconcile: Merge a saved snapshot into the current diff
"""

from dataclasses import dataclass, field

from diffnote.diff.models import FileDiff
from diffnote.review.models import FileReview, ReviewState
from diffnote.session.models import SessionSnapshot


@dataclass
class ReconcileResult:
    """Outcome of reconciling a snapshot with the current diff."""

    state: ReviewState
    carried: list[str] = field(default_factory=list)  # Unchanged, state kept as is
    reset: list[str] = field(default_factory=list)  # Reviewed flag cleared
    orphaned: list[str] = field(default_factory=list)  # Comments flagged orphaned

    @property
    def changed(self) -> bool:
        return bool(self.reset or self.orphaned)


def reconcile(snapshot: SessionSnapshot, files: list[FileDiff]) -> ReconcileResult:
    """Merge saved review state into the current diff.

    For each file in the snapshot:
    - same fingerprint in the new diff: reviewed flag and comments carried over
    - fingerprint differs or file gone: reviewed flag reset, comments kept
      with their anchors and marked orphaned

    Files new to the diff get fresh entries. The diff model is not modified.

    Args:
        snapshot: The saved session.
        files: The freshly parsed diff.

    Returns:
        ReconcileResult with a new ReviewState.
    """
    current = {f.path: f.fingerprint for f in files}
    result = ReconcileResult(
        state=ReviewState(next_seq=snapshot.state.next_seq, notes=snapshot.state.notes)
    )

    for path, saved in snapshot.state.files.items():
        review = saved.model_copy(deep=True)
        unchanged = path in current and snapshot.fingerprints.get(path) == current[path]

        if unchanged:
            result.carried.append(path)
        else:
            if review.reviewed:
                review.reviewed = False
                result.reset.append(path)
            if review.comments:
                for comment in review.comments:
                    comment.orphaned = True
                result.orphaned.append(path)

        # Entries for vanished files only survive if they hold comments
        if path in current or review.comments:
            result.state.files[path] = review

    for path in current:
        if path not in result.state.files:
            result.state.files[path] = FileReview(path=path)

    # Sequence numbers must stay unique even for hand-edited files
    highest = max((c.seq for c in result.state.iter_comments()), default=0)
    result.state.next_seq = max(result.state.next_seq, highest + 1)
    return result
