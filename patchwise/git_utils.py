"""
Git integration — thin subprocess wrapper used by the merge backend.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)

# Identity and signing settings for throwaway repositories, so a user's
# global git configuration cannot break scratch commits.
SCRATCH_CONFIG = (
    "-c", "user.name=patchwise",
    "-c", "user.email=patchwise@localhost",
    "-c", "commit.gpgsign=false",
    "-c", "core.autocrlf=false",
    "-c", "init.defaultBranch=main",
)


def run_git(
    args: list[str],
    cwd: Optional[str] = None,
    git_binary: str = "git",
    timeout: Optional[float] = 30.0,
) -> tuple[bool, str]:
    """Run a git command and return ``(success, output)``.

    Failures to launch git at all are reported the same way as a non-zero
    exit status.
    """
    cmd = [git_binary, *SCRATCH_CONFIG, *args]
    logger.debug("[DiffEdit] Running git command: %s", " ".join(args))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        return False, str(exc)

    output = (result.stdout + result.stderr).strip()
    return result.returncode == 0, output


def rev_parse_head(cwd: str, git_binary: str = "git") -> Optional[str]:
    """Return the commit id of ``HEAD`` in *cwd*, or ``None`` on failure."""
    ok, output = run_git(["rev-parse", "HEAD"], cwd=cwd, git_binary=git_binary)
    if not ok or not output:
        return None
    return output.splitlines()[0].strip()
