"""Jujutsu (jj) backend driven through the jj CLI.

jj repositories are git-backed and contain a .git directory, so jj must be
probed before git.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from diffnote.diff.models import DiffFormat
from diffnote.vcs.base import VcsBackend
from diffnote.vcs.exceptions import NoChangesError, VcsError
from diffnote.vcs.models import DiffSource, DiffSourceKind, RevisionRef, VcsInfo, VcsType, split_description
from diffnote.vcs.runner import probe_root, run_vcs_command


# Template fields separated by NUL, records separated by SOH (jj parses the escapes)
LOG_TEMPLATE = (
    r'commit_id ++ "\x00" ++ commit_id.short() ++ "\x00" '
    r'++ parents.map(|c| c.commit_id()).join(" ") ++ "\x00" '
    r'++ author.email() ++ "\x00" ++ committer.timestamp() ++ "\x00" '
    r'++ description ++ "\x01"'
)


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def _parse_log_records(output: str) -> list[RevisionRef]:
    """Parse jj log output produced with LOG_TEMPLATE."""
    revisions = []
    for record in output.split("\x01"):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split("\x00")
        if len(parts) < 6:
            continue

        commit_id, short_id, parents, author, timestamp, description = parts[:6]
        summary, body = split_description(description)
        revisions.append(
            RevisionRef(
                id=commit_id.strip(),
                short_id=short_id,
                summary=summary,
                parents=tuple(parents.split()),
                author=author,
                time=_parse_timestamp(timestamp),
                body=body,
            )
        )
    return revisions


def _first_local_bookmark(bookmarks: str) -> Optional[str]:
    """Pick the first local bookmark, skipping remote ones like "main@origin"."""
    names = bookmarks.split()
    if not names:
        return None
    for name in names:
        if "@" not in name:
            return name.rstrip("*")
    return names[0]


class JjBackend(VcsBackend):
    """Jujutsu backend implementation using jj CLI commands."""

    tool = "jj"
    diff_format = DiffFormat.GIT

    @classmethod
    def discover(cls, cwd: Optional[Path] = None) -> Optional["JjBackend"]:
        root = probe_root("jj", ["root"], cwd=cwd)
        if root is None:
            return None
        root = root.resolve()

        # jj identifies changes by change id rather than commit hash
        try:
            head_commit = run_vcs_command(
                "jj", ["log", "-r", "@", "--no-graph", "-T", "change_id.short()"], cwd=root
            )
        except VcsError:
            head_commit = "unknown"

        # Prefer a bookmark on @, otherwise the closest ancestor bookmark
        branch_name = None
        for revset in ("@", "heads(::@ & bookmarks())"):
            try:
                bookmarks = run_vcs_command(
                    "jj",
                    ["log", "-r", revset, "--no-graph", "-T", "bookmarks", "--limit", "1"],
                    cwd=root,
                )
            except VcsError:
                continue
            branch_name = _first_local_bookmark(bookmarks)
            if branch_name:
                break

        return cls(VcsInfo(root_path=root, head_commit=head_commit, vcs_type=VcsType.JUJUTSU, branch_name=branch_name))

    def list_revisions(self, offset: int = 0, limit: int = 50) -> list[RevisionRef]:
        # jj log has no --skip, so fetch offset + limit and drop the first offset
        output = self._run(
            ["log", "-r", "::@", "--limit", str(offset + limit), "--no-graph", "-T", LOG_TEMPLATE],
            strip=False,
        )
        return _parse_log_records(output)[offset:]

    def resolve_revisions(self, expression: str) -> list[str]:
        output = self._run(["log", "-r", expression, "--no-graph", "-T", r'commit_id ++ "\n"'])
        commit_ids = [line.strip() for line in output.splitlines() if line.strip()]
        if not commit_ids:
            raise NoChangesError(f"No commits in revset: {expression}")
        # jj log prints newest first
        commit_ids.reverse()
        return commit_ids

    def get_revisions(self, ids: list[str]) -> list[RevisionRef]:
        if not ids:
            return []
        output = self._run(
            ["log", "-r", " | ".join(ids), "--no-graph", "-T", LOG_TEMPLATE],
            strip=False,
        )
        by_id = {rev.id: rev for rev in _parse_log_records(output)}
        return [by_id[i] for i in ids if i in by_id]

    def diff_uncommitted(self) -> str:
        return self._run(["diff", "--git"], strip=False)

    def diff_range(self, ids: list[str]) -> str:
        return self._run(["diff", "--from", f"{ids[0]}-", "--to", ids[-1], "--git"], strip=False)

    def diff_uncommitted_with(self, ids: list[str]) -> str:
        return self._run(["diff", "--from", f"{ids[0]}-", "--to", "@", "--git"], strip=False)

    def show_file(self, path: str, revision: str) -> str:
        return self._run(["file", "show", "-r", revision, path], strip=False)

    def base_revision(self, source: DiffSource) -> Optional[str]:
        if source.kind == DiffSourceKind.WORKING_TREE:
            return "@-"
        return f"{source.oldest}-"
