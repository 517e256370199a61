"""
Unified diff strategy — strict application at the declared line numbers.

A low-fidelity dialect for well-formed ``diff -U3`` output; drifted files
are the business of :mod:`.new_unified`.
"""

from __future__ import annotations

import logging
from typing import Optional

from unidiff import PatchSet
from unidiff.constants import LINE_TYPE_NO_NEWLINE
from unidiff.errors import UnidiffParseError

from ..types import DiffResult, ToolArgs
from .base import DiffStrategy

logger = logging.getLogger(__name__)


class UnifiedPatchMismatch(Exception):
    """A hunk's context or removed lines disagree with the file."""


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def _extend(new_lines: list[str], lines: list[str]) -> None:
    """Append *lines*, terminating an unterminated last line first."""
    if lines and new_lines and not new_lines[-1].endswith("\n"):
        new_lines[-1] += "\n"
    new_lines.extend(lines)


class UnifiedDiffStrategy(DiffStrategy):
    name = "unified"

    def describe(self, tool_args: ToolArgs) -> str:
        return f"""## apply_diff
Description: Apply a unified diff to a file at the specified path. Use this
to make specific modifications described as a set of changes in unified diff
format (diff -U3). Line numbers in the hunk headers must be correct.

Parameters:
- path: (required) The path of the file to apply the diff to (relative to the current working directory {tool_args.cwd})
- diff: (required) The diff content in unified format to apply to the file.

Format Requirements:

1. Header (REQUIRED):
    ```
    --- path/to/original/file
    +++ path/to/modified/file
    ```
    - Use actual file paths, no timestamps after the paths

2. Hunks:
    ```
    @@ -lineStart,lineCount +lineStart,lineCount @@
    -removed line
    +added line
    ```
    - Each hunk starts with @@ giving the line numbers it covers
    - Use - for removed lines and + for added lines
    - Indentation must match exactly"""

    def apply(
        self,
        original_content: str,
        diff_content: str,
        start_line: Optional[int] = None,
        end_line: Optional[int] = None,
    ) -> DiffResult:
        try:
            patch = PatchSet(diff_content.splitlines(keepends=True))
        except UnidiffParseError as exc:
            return DiffResult.fail(f"Failed to parse unified diff: {exc}")

        if len(patch) != 1:
            return DiffResult.fail(
                "Failed to parse unified diff: expected changes for exactly one "
                f"file, found {len(patch)}"
            )

        try:
            content = self._apply_file(original_content, patch[0])
        except UnifiedPatchMismatch as exc:
            logger.warning("[DiffEdit] Unified diff did not apply: %s", exc)
            return DiffResult.fail(f"Failed to apply unified diff: {exc}")

        return DiffResult.ok(content)

    @staticmethod
    def _apply_file(original_content: str, patched_file) -> str:
        original = original_content.splitlines(keepends=True)
        new_lines: list[str] = []
        index = 0
        # Set by a "\ No newline at end of file" marker on the new side
        drop_final_eol = False

        for hunk in patched_file:
            # A zero-length source range inserts after the given line
            if hunk.source_length == 0:
                position = hunk.source_start
            else:
                position = hunk.source_start - 1
            if position < index or position > len(original):
                raise UnifiedPatchMismatch(
                    f"hunk at line {hunk.source_start} is out of order or past "
                    f"the end of the file ({len(original)} lines)"
                )

            _extend(new_lines, original[index:position])
            index = position

            previous = None
            for line in hunk:
                if line.line_type == LINE_TYPE_NO_NEWLINE:
                    # The marker describes the line before it; after a removed
                    # line it only concerns the old file
                    if previous is not None and not previous.is_removed:
                        drop_final_eol = True
                    continue
                previous = line

                if line.is_added:
                    value = line.value
                    if not value.endswith("\n"):
                        value += "\n"
                    _extend(new_lines, [value])
                elif line.is_removed or line.is_context:
                    if index >= len(original) or (
                        _strip_eol(original[index]) != _strip_eol(line.value)
                    ):
                        found = _strip_eol(original[index]) if index < len(original) else "<end of file>"
                        raise UnifiedPatchMismatch(
                            f"line {index + 1} does not match: expected "
                            f"{_strip_eol(line.value)!r}, found {found!r}"
                        )
                    if line.is_context:
                        _extend(new_lines, [original[index]])
                    index += 1

        _extend(new_lines, original[index:])
        if drop_final_eol and new_lines:
            new_lines[-1] = _strip_eol(new_lines[-1])
        return "".join(new_lines)
