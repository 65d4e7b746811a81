"""Git backend driven through the git CLI.

Contains:
- GitBackend: VcsBackend implementation for git repositories
- _parse_log_records: Parse NUL/SOH separated git log output
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from diffnote.diff.models import DiffFormat
from diffnote.vcs.base import VcsBackend
from diffnote.vcs.exceptions import NoChangesError, VcsError
from diffnote.vcs.models import DiffSource, DiffSourceKind, RevisionRef, VcsInfo, VcsType, split_description
from diffnote.vcs.runner import probe_root, run_vcs_command


# The well-known id of git's empty tree, used as the base of root commits
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

# Flags that pin the patch dialect regardless of user git config
DIFF_FLAGS = [
    "--no-color",
    "--no-ext-diff",
    "-M",
    "--src-prefix=a/",
    "--dst-prefix=b/",
]

# Fields: id, short id, parents, author, commit time, decorations, message
LOG_FORMAT = "%H%x00%h%x00%P%x00%an%x00%ct%x00%D%x00%B%x01"


def _parse_log_records(output: str) -> list[RevisionRef]:
    """Parse git log output produced with LOG_FORMAT.

    Args:
        output: Raw git log output.

    Returns:
        List of RevisionRef in output order.
    """
    revisions = []
    for record in output.split("\x01"):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split("\x00")
        if len(parts) < 7:
            continue

        commit_id, short_id, parents, author, timestamp, decorations, message = parts[:7]
        summary, body = split_description(message)

        try:
            time = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        except ValueError:
            time = None

        # Decorations look like "HEAD -> main, origin/main, tag: v1"
        branch_name = None
        for ref in decorations.split(","):
            ref = ref.strip().replace("HEAD -> ", "")
            if ref and ref != "HEAD" and not ref.startswith("tag: ") and "/" not in ref:
                branch_name = ref
                break

        revisions.append(
            RevisionRef(
                id=commit_id.strip(),
                short_id=short_id,
                summary=summary,
                parents=tuple(parents.split()),
                author=author,
                time=time,
                body=body,
                branch_name=branch_name,
            )
        )
    return revisions


class GitBackend(VcsBackend):
    """Git backend implementation using git CLI commands."""

    tool = "git"
    diff_format = DiffFormat.GIT

    @classmethod
    def discover(cls, cwd: Optional[Path] = None) -> Optional["GitBackend"]:
        root = probe_root("git", ["rev-parse", "--show-toplevel"], cwd=cwd)
        if root is None:
            return None
        root = root.resolve()

        try:
            head_commit = run_vcs_command("git", ["rev-parse", "--verify", "HEAD"], cwd=root)
        except VcsError:
            head_commit = "HEAD"

        try:
            branch_name = run_vcs_command("git", ["branch", "--show-current"], cwd=root) or None
        except VcsError:
            branch_name = None

        return cls(VcsInfo(root_path=root, head_commit=head_commit, vcs_type=VcsType.GIT, branch_name=branch_name))

    def _has_head(self) -> bool:
        return self.info.head_commit != "HEAD"

    def _parent_of(self, commit_id: str) -> Optional[str]:
        """Return the first parent of a commit, or None for a root commit."""
        try:
            return self._run(["rev-parse", "--verify", "--quiet", f"{commit_id}^"])
        except VcsError:
            return None

    def list_revisions(self, offset: int = 0, limit: int = 50) -> list[RevisionRef]:
        if not self._has_head():
            return []
        output = self._run(
            ["log", f"--skip={offset}", "-n", str(limit), f"--format={LOG_FORMAT}"],
            strip=False,
        )
        return _parse_log_records(output)

    def resolve_revisions(self, expression: str) -> list[str]:
        if ".." in expression:
            output = self._run(["rev-list", "--reverse", "--topo-order", expression])
            commit_ids = [line.strip() for line in output.splitlines() if line.strip()]
        else:
            commit_ids = [self._run(["rev-parse", "--verify", f"{expression}^{{commit}}"])]

        if not commit_ids:
            raise NoChangesError(f"No commits in revision range: {expression}")
        return commit_ids

    def get_revisions(self, ids: list[str]) -> list[RevisionRef]:
        if not ids:
            return []
        output = self._run(["show", "-s", f"--format={LOG_FORMAT}"] + ids, strip=False)
        by_id = {rev.id: rev for rev in _parse_log_records(output)}
        return [by_id[i] for i in ids if i in by_id]

    def _untracked_patch(self) -> str:
        """Build patch text for untracked files, which git diff does not show."""
        output = self._run(["ls-files", "--others", "--exclude-standard", "-z"])
        patches = []
        for path in output.split("\x00"):
            if not path:
                continue
            patch = self._run(
                ["diff", "--no-index"] + DIFF_FLAGS + ["--", "/dev/null", path],
                strip=False,
                ok_returncodes=(1,),
            )
            patches.append(patch)
        return "".join(patches)

    def diff_uncommitted(self) -> str:
        base = "HEAD" if self._has_head() else EMPTY_TREE
        tracked = self._run(["diff"] + DIFF_FLAGS + [base], strip=False)
        return tracked + self._untracked_patch()

    def diff_range(self, ids: list[str]) -> str:
        base = self._parent_of(ids[0]) or EMPTY_TREE
        return self._run(["diff"] + DIFF_FLAGS + [base, ids[-1]], strip=False)

    def diff_uncommitted_with(self, ids: list[str]) -> str:
        base = self._parent_of(ids[0]) or EMPTY_TREE
        tracked = self._run(["diff"] + DIFF_FLAGS + [base], strip=False)
        return tracked + self._untracked_patch()

    def show_file(self, path: str, revision: str) -> str:
        return self._run(["show", f"{revision}:{path}"], strip=False)

    def base_revision(self, source: DiffSource) -> Optional[str]:
        if source.kind == DiffSourceKind.WORKING_TREE:
            return "HEAD" if self._has_head() else None
        return self._parent_of(source.oldest)
