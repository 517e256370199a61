"""
Merge backends — three-way merge of a hunk onto drifted file content.

The edit engine only needs ``merge(original, pre_image, post_image)``;
``GitMergeBackend`` delegates the actual diff3 resolution to git so the
algorithm is not reimplemented here.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Optional

from ..git_utils import rev_parse_head, run_git
from .errors import MergeEnvironmentError
from .text_utils import split_lines

logger = logging.getLogger(__name__)

_MERGE_FILE = "file.txt"


class MergeBackend(ABC):
    """Applies the change ``pre_image -> post_image`` onto ``original``."""

    @abstractmethod
    def merge(
        self,
        original: list[str],
        pre_image: list[str],
        post_image: list[str],
    ) -> Optional[list[str]]:
        """Return the merged lines, or ``None`` if the merge did not succeed."""


class GitMergeBackend(MergeBackend):
    """Three-way merge via cherry-pick in a throwaway repository.

    Commits the original content, then the pre-image and post-image as
    two further commits, checks out the original commit and cherry-picks
    the post-image commit. The scratch directory is removed on every exit
    path.
    """

    def __init__(self, git_binary: str = "git") -> None:
        self._git = git_binary

    def merge(
        self,
        original: list[str],
        pre_image: list[str],
        post_image: list[str],
    ) -> Optional[list[str]]:
        try:
            scratch = tempfile.TemporaryDirectory(prefix="patchwise-merge-")
        except OSError as exc:
            raise MergeEnvironmentError(
                f"cannot create scratch directory for git merge: {exc}"
            ) from exc

        with scratch as repo:
            return self._merge_in(repo, original, pre_image, post_image)

    def _merge_in(
        self,
        repo: str,
        original: list[str],
        pre_image: list[str],
        post_image: list[str],
    ) -> Optional[list[str]]:
        ok, output = run_git(["init", "-q"], cwd=repo, git_binary=self._git)
        if not ok:
            logger.warning("[DiffEdit] git init failed: %s", output)
            return None

        original_commit = self._commit(repo, original, "original")
        if original_commit is None:
            return None
        if self._commit(repo, pre_image, "search") is None:
            return None
        replace_commit = self._commit(repo, post_image, "replace")
        if replace_commit is None:
            return None

        ok, output = run_git(
            ["checkout", "-q", original_commit], cwd=repo, git_binary=self._git
        )
        if not ok:
            logger.warning("[DiffEdit] git checkout failed: %s", output)
            return None

        ok, output = run_git(
            ["cherry-pick", "-X", "diff-algorithm=minimal", "--allow-empty", replace_commit],
            cwd=repo, git_binary=self._git,
        )
        if not ok:
            logger.debug("[DiffEdit] git cherry-pick did not merge cleanly: %s", output)
            return None

        try:
            with open(os.path.join(repo, _MERGE_FILE), "r",
                      encoding="utf-8", newline="") as f:
                return split_lines(f.read())
        except OSError as exc:
            logger.warning("[DiffEdit] Could not read merge result: %s", exc)
            return None

    def _commit(self, repo: str, lines: list[str], message: str) -> Optional[str]:
        """Write *lines* to the merge file and commit them; return the commit id."""
        # Every line, including the last, ends with a newline so the
        # pre-image's last line compares equal to the same line in the file.
        text = "".join(line + "\n" for line in lines)
        try:
            with open(os.path.join(repo, _MERGE_FILE), "w",
                      encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as exc:
            logger.warning("[DiffEdit] Could not write %s commit: %s", message, exc)
            return None

        for args in (
            ["add", _MERGE_FILE],
            ["commit", "-q", "--allow-empty", "-m", message],
        ):
            ok, output = run_git(args, cwd=repo, git_binary=self._git)
            if not ok:
                logger.warning(
                    "[DiffEdit] git %s failed for %s commit: %s",
                    args[0], message, output,
                )
                return None

        return rev_parse_head(repo, git_binary=self._git)
