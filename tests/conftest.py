"""Shared test fixtures and configuration."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest

from diffnote.vcs import (
    DiffSource,
    DiffSourceKind,
    RevisionRef,
    VcsBackend,
    VcsError,
    VcsInfo,
    VcsType,
)


SAMPLE_DIFF = """diff --git a/src/auth.rs b/src/auth.rs
index 1111111..2222222 100644
--- a/src/auth.rs
+++ b/src/auth.rs
@@ -3,3 +3,4 @@ fn setup() {
 line 3
-line 4
+line 4 changed
+line 4b
 line 5
@@ -40,3 +41,3 @@ fn check() {
 line 40
-    let timeout = 42;
+    let timeout = 42 * 1000;
 line 42
diff --git a/docs/notes.md b/docs/notes.md
new file mode 100644
index 0000000..3333333
--- /dev/null
+++ b/docs/notes.md
@@ -0,0 +1,2 @@
+# Notes
+First note
diff --git a/old/legacy.py b/old/legacy.py
deleted file mode 100644
index 4444444..0000000
--- a/old/legacy.py
+++ /dev/null
@@ -1,2 +0,0 @@
-import os
-print(os.getcwd())
"""


def auth_old_lines() -> list[str]:
    """Old side of src/auth.rs (45 lines)."""
    lines = [f"line {n}" for n in range(1, 46)]
    lines[41 - 1] = "    let timeout = 42;"
    return lines


def auth_new_lines() -> list[str]:
    """New side of src/auth.rs (46 lines) matching SAMPLE_DIFF."""
    old = auth_old_lines()
    new = old[:3] + ["line 4 changed", "line 4b"] + old[4:]
    new[42 - 1] = "    let timeout = 42 * 1000;"
    return new


class FakeBackend(VcsBackend):
    """In-memory backend serving canned patches and file contents."""

    tool = "fake"

    def __init__(
        self,
        info: VcsInfo,
        uncommitted: str = "",
        range_diff: str = "",
        revisions: Optional[list[RevisionRef]] = None,
        contents: Optional[dict[tuple[str, str], str]] = None,
        ranges: Optional[dict[str, list[str]]] = None,
    ):
        super().__init__(info)
        self.uncommitted = uncommitted
        self.range_diff = range_diff
        self.revisions = revisions or []
        self.contents = contents or {}
        self.ranges = ranges or {}
        self.diff_requests: list[tuple[str, list[str]]] = []

    @classmethod
    def discover(cls, cwd=None):
        return None

    def list_revisions(self, offset=0, limit=50):
        return self.revisions[offset:offset + limit]

    def resolve_revisions(self, expression):
        if expression not in self.ranges:
            raise VcsError(f"fake command failed: unknown revision '{expression}'")
        return list(self.ranges[expression])

    def get_revisions(self, ids):
        by_id = {r.id: r for r in self.revisions}
        return [by_id[i] for i in ids if i in by_id]

    def diff_uncommitted(self):
        self.diff_requests.append(("uncommitted", []))
        return self.uncommitted

    def diff_range(self, ids):
        self.diff_requests.append(("range", list(ids)))
        return self.range_diff

    def diff_uncommitted_with(self, ids):
        self.diff_requests.append(("uncommitted_with", list(ids)))
        return self.range_diff

    def show_file(self, path, revision):
        try:
            return self.contents[(revision, path)]
        except KeyError:
            raise VcsError(f"fake command failed: no {path} at {revision}")

    def base_revision(self, source: DiffSource):
        if source.kind == DiffSourceKind.WORKING_TREE:
            return "BASE"
        return f"{source.oldest}^"


def make_revisions(count: int) -> list[RevisionRef]:
    """Revisions r0 (newest) .. r{count-1} (oldest)."""
    return [
        RevisionRef(
            id=f"{n:040x}",
            short_id=f"{n:07x}",
            summary=f"Commit number {n}",
            author="Dev",
            time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        for n in range(count)
    ]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def repo_root(temp_dir):
    """A working copy containing the new side of SAMPLE_DIFF."""
    root = temp_dir / "repo"
    (root / "src").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "src" / "auth.rs").write_text("\n".join(auth_new_lines()) + "\n")
    (root / "docs" / "notes.md").write_text("# Notes\nFirst note\n")
    return root


@pytest.fixture
def sample_diff():
    """Sample git-style patch with a modified, an added and a deleted file."""
    return SAMPLE_DIFF


@pytest.fixture
def fake_backend(repo_root):
    """FakeBackend over repo_root serving SAMPLE_DIFF as uncommitted changes."""
    return FakeBackend(
        VcsInfo(root_path=repo_root, head_commit="abc1234", vcs_type=VcsType.GIT, branch_name="main"),
        uncommitted=SAMPLE_DIFF,
        range_diff=SAMPLE_DIFF,
        revisions=make_revisions(5),
        contents={
            ("BASE", "src/auth.rs"): "\n".join(auth_old_lines()) + "\n",
            ("BASE", "old/legacy.py"): "import os\nprint(os.getcwd())\n",
        },
    )


@pytest.fixture
def diffnote_home(temp_dir, monkeypatch):
    """Point DIFFNOTE_HOME at a temporary directory."""
    home = temp_dir / "home"
    monkeypatch.setenv("DIFFNOTE_HOME", str(home))
    return home


@pytest.fixture
def mock_subprocess(mocker):
    """Mock subprocess.run for VCS commands."""
    return mocker.patch("subprocess.run")


@pytest.fixture
def backend_factory(repo_root):
    """Build FakeBackends over repo_root with custom patches and contents."""

    def _make(**kwargs) -> FakeBackend:
        info = VcsInfo(root_path=repo_root, head_commit="abc1234", vcs_type=VcsType.GIT, branch_name="main")
        return FakeBackend(info, **kwargs)

    return _make


@pytest.fixture
def auth_lines():
    """(old, new) content lines of src/auth.rs."""
    return auth_old_lines(), auth_new_lines()
