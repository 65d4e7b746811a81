"""Mercurial backend driven through the hg CLI.

Revisions are passed to hg as 12-character short hashes, which both
Mercurial and Sapling accept in every command used here.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from diffnote.diff.models import DiffFormat
from diffnote.vcs.base import VcsBackend
from diffnote.vcs.exceptions import NoChangesError, VcsError
from diffnote.vcs.models import DiffSource, DiffSourceKind, RevisionRef, VcsInfo, VcsType, split_description
from diffnote.vcs.runner import probe_root, run_vcs_command


NULL_NODE = "0" * 40

# hg expands the escapes itself; the raw string keeps the backslashes intact
LOG_TEMPLATE = r"{node}\x00{node|short}\x00{p1node} {p2node}\x00{author|user}\x00{date|hgdate}\x00{desc}\x01"


def _short(node: str) -> str:
    return node[:12]


def _parse_log_records(output: str) -> list[RevisionRef]:
    """Parse hg log output produced with LOG_TEMPLATE."""
    revisions = []
    for record in output.split("\x01"):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split("\x00")
        if len(parts) < 6:
            continue

        node, short_id, parents, author, hgdate, description = parts[:6]
        summary, body = split_description(description)

        # hgdate format is "<unix timestamp> <timezone offset>"
        try:
            time = datetime.fromtimestamp(int(hgdate.split()[0]), tz=timezone.utc)
        except (ValueError, IndexError):
            time = None

        revisions.append(
            RevisionRef(
                id=node.strip(),
                short_id=short_id,
                summary=summary,
                parents=tuple(p for p in parents.split() if p != NULL_NODE),
                author=author,
                time=time,
                body=body,
            )
        )
    return revisions


class HgBackend(VcsBackend):
    """Mercurial backend implementation using hg CLI commands."""

    tool = "hg"
    diff_format = DiffFormat.HG

    @classmethod
    def discover(cls, cwd: Optional[Path] = None) -> Optional["HgBackend"]:
        root = probe_root("hg", ["root"], cwd=cwd)
        if root is None:
            return None
        root = root.resolve()

        try:
            head_commit = run_vcs_command("hg", ["id", "-i"], cwd=root).rstrip("+")
        except VcsError:
            head_commit = "unknown"

        try:
            branch_name = run_vcs_command("hg", ["branch"], cwd=root) or None
        except VcsError:
            branch_name = None

        return cls(VcsInfo(root_path=root, head_commit=head_commit, vcs_type=VcsType.MERCURIAL, branch_name=branch_name))

    def _parent_of(self, node: str) -> Optional[str]:
        """Return the first parent of a revision, or None for a root revision."""
        try:
            parent = self._run(["log", "-r", f"p1({_short(node)})", "--template", "{node|short}"])
        except VcsError:
            return None
        return parent or None

    def list_revisions(self, offset: int = 0, limit: int = 50) -> list[RevisionRef]:
        # hg log has no skip option, so fetch offset + limit and drop the first offset
        output = self._run(["log", "-l", str(offset + limit), "--template", LOG_TEMPLATE], strip=False)
        return _parse_log_records(output)[offset:]

    def resolve_revisions(self, expression: str) -> list[str]:
        output = self._run(["log", "-r", expression, "--template", r"{rev} {node}\n"])
        entries = []
        for line in output.splitlines():
            parts = line.split()
            if len(parts) == 2:
                entries.append((int(parts[0]), parts[1]))
        if not entries:
            raise NoChangesError(f"No commits in revset: {expression}")
        # Revset output order depends on the expression; local revision numbers are topological
        return [node for _, node in sorted(entries)]

    def get_revisions(self, ids: list[str]) -> list[RevisionRef]:
        if not ids:
            return []
        revset = " | ".join(_short(i) for i in ids)
        output = self._run(["log", "-r", revset, "--template", LOG_TEMPLATE], strip=False)
        by_short = {_short(rev.id): rev for rev in _parse_log_records(output)}
        return [by_short[_short(i)] for i in ids if _short(i) in by_short]

    def diff_uncommitted(self) -> str:
        return self._run(["diff"], strip=False)

    def diff_range(self, ids: list[str]) -> str:
        base = self._parent_of(ids[0]) or "null"
        return self._run(["diff", "-r", base, "-r", _short(ids[-1])], strip=False)

    def diff_uncommitted_with(self, ids: list[str]) -> str:
        base = self._parent_of(ids[0]) or "null"
        return self._run(["diff", "-r", base], strip=False)

    def show_file(self, path: str, revision: str) -> str:
        return self._run(["cat", "-r", revision, path], strip=False)

    def base_revision(self, source: DiffSource) -> Optional[str]:
        if source.kind == DiffSourceKind.WORKING_TREE:
            return "."
        return self._parent_of(source.oldest)
