"""VCS command runner.

Contains:
- run_vcs_command: Run a jj, git or hg command and return its output
- probe_root: Ask a VCS tool for the repository root, returning None on failure
"""

import subprocess
from pathlib import Path
from typing import Optional

from diffnote.vcs.exceptions import VcsError


def run_vcs_command(
    tool: str,
    args: list[str],
    cwd: Optional[Path] = None,
    strip: bool = True,
    ok_returncodes: tuple[int, ...] = (),
) -> str:
    """Run a VCS command and return its output.

    Args:
        tool: Executable name ("jj", "git" or "hg").
        args: List of arguments to pass to the tool.
        cwd: Directory to run the command in.
        strip: Strip surrounding whitespace from stdout. Patch text must be
            returned verbatim, so diff callers pass False.
        ok_returncodes: Non-zero exit codes that still count as success
            (git diff --no-index exits 1 when files differ).

    Returns:
        The stdout of the command.

    Raises:
        VcsError: If the command fails or the tool is not installed.
    """
    try:
        result = subprocess.run(
            [tool] + args,
            capture_output=True,
            text=True,
            check=True,
            cwd=str(cwd) if cwd else None,
        )
        stdout = result.stdout
    except subprocess.CalledProcessError as e:
        if e.returncode not in ok_returncodes:
            stderr = (e.stderr or "").strip()
            raise VcsError(f"{tool} command failed: {tool} {' '.join(args)}\n{stderr}")
        stdout = e.stdout or ""
    except FileNotFoundError:
        raise VcsError(f"{tool} is not installed or not in PATH.")
    return stdout.strip() if strip else stdout


def probe_root(tool: str, args: list[str], cwd: Optional[Path] = None) -> Optional[Path]:
    """Return the repository root reported by a VCS tool, or None.

    Args:
        tool: Executable name.
        args: Arguments that print the repository root.
        cwd: Directory to probe from.

    Returns:
        Path to the repository root, or None if the tool is missing or the
        directory is not one of its repositories.
    """
    try:
        root = run_vcs_command(tool, args, cwd=cwd)
    except VcsError:
        return None
    if not root:
        return None
    return Path(root)
