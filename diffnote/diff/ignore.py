"""Ignore rules for review diffs.

Contains:
- IGNORE_FILENAME: Name of the ignore file at the repository root
- load_ignore_patterns: Read patterns from the ignore file
- _should_ignore_file: Check a path against gitignore-style patterns
- filter_ignored: Drop ignored files from a parsed diff
"""

import fnmatch
from pathlib import Path, PurePosixPath

from diffnote.diff.models import FileDiff


IGNORE_FILENAME = ".diffnoteignore"


def load_ignore_patterns(repo_root: Path) -> list[str]:
    """Read patterns from the repository's ignore file.

    Blank lines and lines starting with "#" are skipped.

    Args:
        repo_root: The repository root directory.

    Returns:
        List of patterns in file order (empty if the file does not exist).
    """
    ignore_file = repo_root / IGNORE_FILENAME
    if not ignore_file.is_file():
        return []

    patterns = []
    for line in ignore_file.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def _rule_matches(path: str, pattern: str) -> bool:
    """Check whether one (non-negated) rule matches a path or any of its parents."""
    dir_only = pattern.endswith("/")
    pattern = pattern.rstrip("/")
    anchored = "/" in pattern
    pattern = pattern.lstrip("/")

    parts = PurePosixPath(path).parts
    # A directory rule can only match a parent, never the file itself
    candidates = range(1, len(parts)) if dir_only else range(1, len(parts) + 1)

    for i in candidates:
        if anchored:
            if fnmatch.fnmatch("/".join(parts[:i]), pattern):
                return True
        elif fnmatch.fnmatch(parts[i - 1], pattern):
            return True
    return False


def _should_ignore_file(path: str, patterns: list[str]) -> bool:
    """Check if a file should be ignored based on gitignore-style patterns.

    Supports glob patterns like *.lock, directory rules like build/, and
    "!" negation. The last matching rule wins.

    Args:
        path: The file path to check, relative to the repository root.
        patterns: List of patterns to match against.

    Returns:
        True if the file should be ignored.
    """
    ignored = False
    for pattern in patterns:
        negated = pattern.startswith("!")
        rule = pattern[1:] if negated else pattern
        if rule and _rule_matches(path, rule):
            ignored = not negated
    return ignored


def filter_ignored(repo_root: Path, files: list[FileDiff]) -> list[FileDiff]:
    """Drop files matched by the repository's ignore file.

    Args:
        repo_root: The repository root directory.
        files: Parsed file diffs.

    Returns:
        The files that are not ignored, in their original order.
    """
    patterns = load_ignore_patterns(repo_root)
    if not patterns:
        return files
    return [f for f in files if not _should_ignore_file(f.path, patterns)]
