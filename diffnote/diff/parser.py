"""Diff parser for diffnote.

Contains functions for parsing unified diff output from jj, git and hg:
- parse_unified_diff: Parse raw patch text into FileDiff objects
- _parse_file_block: Parse a single file block from the diff
- _parse_header_path: Extract old/new paths from the file header line
- _parse_binary_line: Extract paths from a "Binary files ..." line
- _parse_hunks: Parse hunks from the hunk portion of a file diff
- _attach_gaps: Record hidden context before each hunk
"""

import re
from typing import Optional

from diffnote.diff.models import (
    ChangeKind,
    DiffFormat,
    DiffLine,
    FileDiff,
    HiddenContext,
    Hunk,
    LineKind,
)


# Format: @@ -old_start[,old_len] +new_start[,new_len] @@ optional section
HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")

# hg: "diff -r abc123 path" or "diff -r abc123 -r def456 path"
HG_HEADER_RE = re.compile(r"^diff(?: -r \S+)+ (.*)$")

GIT_HEADER_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")

BLOCK_SPLIT_RE = {
    DiffFormat.GIT: re.compile(r"(?=^diff --git )", re.MULTILINE),
    DiffFormat.HG: re.compile(r"(?=^diff )", re.MULTILINE),
}


def parse_unified_diff(
    diff_output: str, fmt: DiffFormat = DiffFormat.GIT
) -> tuple[list[FileDiff], list[str]]:
    """Parse unified diff output into FileDiff objects.

    Args:
        diff_output: Raw patch text from a backend.
        fmt: Patch dialect (git-style headers or hg headers).

    Returns:
        Tuple of (list of FileDiff objects in patch order, list of warning messages)
    """
    files: list[FileDiff] = []
    warnings: list[str] = []

    if not diff_output.strip():
        return files, warnings

    for block in BLOCK_SPLIT_RE[fmt].split(diff_output):
        if not block.startswith("diff "):
            continue

        file_diff = _parse_file_block(block.rstrip("\n"), warnings)
        if file_diff:
            files.append(file_diff)

    return files, warnings


def _strip_side_prefix(path: str, prefix: str) -> Optional[str]:
    """Normalize a path from a ---/+++ line. Returns None for /dev/null."""
    # hg appends a timestamp after a tab
    path = path.split("\t", 1)[0]
    if path == "/dev/null":
        return None
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _parse_header_path(line: str) -> tuple[Optional[str], Optional[str]]:
    """Extract (old_path, new_path) from a "diff ..." header line."""
    match = GIT_HEADER_RE.match(line)
    if match:
        return match.group(1), match.group(2)
    match = HG_HEADER_RE.match(line)
    if match:
        return match.group(1), match.group(1)
    return None, None


def _parse_binary_line(line: str) -> Optional[tuple[Optional[str], Optional[str]]]:
    """Parse paths from a binary file line.

    Git format: "Binary files a/<old> and b/<new> differ"
    Hg format: "Binary file <path> has changed"

    Returns:
        (old_path, new_path) where either can be None for /dev/null, or None
        if the line is not a recognised binary marker.
    """
    if line.startswith("Binary files ") and line.endswith(" differ"):
        content = line[len("Binary files "):-len(" differ")]
        if " and " not in content:
            return None
        old_part, new_part = content.split(" and ", 1)
        old_path = None if old_part == "/dev/null" else old_part.removeprefix("a/")
        new_path = None if new_part == "/dev/null" else new_part.removeprefix("b/")
        return old_path, new_path

    if line.startswith("Binary file ") and line.endswith(" has changed"):
        path = line[len("Binary file "):-len(" has changed")]
        return path, path

    return None


def _parse_file_block(block: str, warnings: list[str]) -> Optional[FileDiff]:
    """Parse a single file block from the diff.

    Args:
        block: Raw text of the file block, starting at its "diff" line
        warnings: List to append warnings to

    Returns:
        FileDiff object or None if the header is unrecognisable
    """
    lines = block.split("\n")
    old_path, new_path = _parse_header_path(lines[0])
    if old_path is None and new_path is None:
        warnings.append(f"Unrecognised diff header skipped: {lines[0]}")
        return None

    kind = ChangeKind.MODIFIED
    is_binary = False
    header_lines = [lines[0]]
    hunk_start_idx = len(lines)

    for i in range(1, len(lines)):
        line = lines[i]
        if line.startswith("@@"):
            hunk_start_idx = i
            break
        header_lines.append(line)

        if line.startswith("new file"):
            kind = ChangeKind.ADDED
        elif line.startswith("deleted file"):
            kind = ChangeKind.DELETED
        elif line.startswith("rename from "):
            kind = ChangeKind.RENAMED
            old_path = line[len("rename from "):]
        elif line.startswith("rename to "):
            new_path = line[len("rename to "):]
        elif line.startswith("copy from "):
            kind = ChangeKind.COPIED
            old_path = line[len("copy from "):]
        elif line.startswith("copy to "):
            new_path = line[len("copy to "):]
        elif line.startswith("--- "):
            old_path = _strip_side_prefix(line[4:], "a/")
        elif line.startswith("+++ "):
            new_path = _strip_side_prefix(line[4:], "b/")
        elif line.startswith("GIT binary patch"):
            is_binary = True
        else:
            binary_paths = _parse_binary_line(line)
            if binary_paths is not None:
                is_binary = True
                binary_old, binary_new = binary_paths
                if binary_old is None:
                    old_path = None
                if binary_new is None:
                    new_path = None

    # Determine kind from /dev/null sides if metadata did not set it
    if kind == ChangeKind.MODIFIED:
        if old_path is None and new_path is not None:
            kind = ChangeKind.ADDED
        elif old_path is not None and new_path is None:
            kind = ChangeKind.DELETED
    if kind == ChangeKind.ADDED:
        old_path = None
    elif kind == ChangeKind.DELETED:
        new_path = None

    if is_binary:
        return FileDiff(
            old_path=old_path,
            new_path=new_path,
            kind=ChangeKind.BINARY,
            hunks=[],
            header_lines=header_lines,
            raw_text=block,
            is_binary=True,
        )

    file_path = new_path or old_path
    hunks = _parse_hunks(lines[hunk_start_idx:], file_path, warnings)
    _attach_gaps(hunks, file_path)

    return FileDiff(
        old_path=old_path,
        new_path=new_path,
        kind=kind,
        hunks=hunks,
        header_lines=header_lines,
        raw_text=block,
    )


def _parse_hunks(lines: list[str], file_path: str, warnings: list[str]) -> list[Hunk]:
    """Parse hunks from the hunk portion of a file diff.

    Line numbers are assigned while reading, from the hunk header onwards, so
    every DiffLine carries its final address.

    Args:
        lines: Lines starting from the first @@
        file_path: File identity for the produced lines
        warnings: List to append warnings to

    Returns:
        List of Hunk objects
    """
    hunks: list[Hunk] = []
    current: Optional[Hunk] = None
    old_remaining = new_remaining = 0
    old_lineno = new_lineno = 0

    for line in lines:
        if line.startswith("@@"):
            match = HUNK_HEADER_RE.match(line)
            if not match:
                warnings.append(f"Malformed hunk header in {file_path}: {line}")
                current = None
                continue

            old_start = int(match.group(1))
            old_count = int(match.group(2)) if match.group(2) is not None else 1
            new_start = int(match.group(3))
            new_count = int(match.group(4)) if match.group(4) is not None else 1
            current = Hunk(
                header=line,
                old_start=old_start,
                old_count=old_count,
                new_start=new_start,
                new_count=new_count,
                section=match.group(5).strip(),
            )
            hunks.append(current)
            old_remaining, new_remaining = old_count, new_count
            old_lineno, new_lineno = current.first_old_line, current.first_new_line
            continue

        if current is None or (old_remaining <= 0 and new_remaining <= 0):
            # "\ No newline at end of file" and trailing noise
            continue

        if line.startswith("+"):
            current.lines.append(DiffLine(LineKind.ADDED, line[1:], file_path, None, new_lineno))
            new_lineno += 1
            new_remaining -= 1
        elif line.startswith("-"):
            current.lines.append(DiffLine(LineKind.REMOVED, line[1:], file_path, old_lineno, None))
            old_lineno += 1
            old_remaining -= 1
        elif line.startswith(" ") or line == "":
            # An empty line is a context line whose leading space was trimmed
            current.lines.append(DiffLine(LineKind.CONTEXT, line[1:], file_path, old_lineno, new_lineno))
            old_lineno += 1
            new_lineno += 1
            old_remaining -= 1
            new_remaining -= 1

    return hunks


def _attach_gaps(hunks: list[Hunk], file_path: str) -> None:
    """Record the hidden context before each hunk.

    The gap before hunk k spans from the end of hunk k-1 (or line 1) to the
    first line of hunk k on the new side; the old side is offset by the
    difference in line numbering accumulated so far.
    """
    prev_old_end = prev_new_end = 1
    for index, hunk in enumerate(hunks):
        count = hunk.first_new_line - prev_new_end
        if count > 0:
            hunk.gap_before = HiddenContext(
                file=file_path,
                index=index,
                old_start=prev_old_end,
                new_start=prev_new_end,
                count=count,
            )
        prev_old_end = hunk.old_end_exclusive
        prev_new_end = hunk.new_end_exclusive
