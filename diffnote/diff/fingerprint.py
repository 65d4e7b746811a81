"""Content fingerprints for file diffs.

Contains:
- compute_fingerprint: SHA256 of a file's patch block, ignoring revision noise
- _normalize_header_line: Drop the revision-specific parts of a header line
"""

import hashlib
from typing import Optional


def _normalize_header_line(line: str) -> Optional[str]:
    """Drop the revision-specific parts of a patch header line.

    "index <old>..<new>" (git/jj) and "diff -r <rev>" (hg) lines name blob or
    revision ids that change on a rebase even when the patch does not; hg also
    appends timestamps after a tab on ---/+++ lines.

    Returns:
        The normalized line, or None to drop it.
    """
    if line.startswith("index ") or line.startswith("diff -r "):
        return None
    if line.startswith("--- ") or line.startswith("+++ "):
        return line.split("\t", 1)[0]
    return line


def compute_fingerprint(raw_text: str) -> str:
    """Compute the SHA256 fingerprint of a file's patch block.

    Only the header lines before the first hunk are normalized; hunk lines
    are hashed verbatim.

    Args:
        raw_text: The file's full patch text.

    Returns:
        SHA256 hex digest.
    """
    kept = []
    in_hunks = False
    for line in raw_text.split("\n"):
        if not in_hunks and line.startswith("@@"):
            in_hunks = True
        if in_hunks:
            kept.append(line)
            continue
        normalized = _normalize_header_line(line)
        if normalized is not None:
            kept.append(normalized)
    return hashlib.sha256("\n".join(kept).encode()).hexdigest()
