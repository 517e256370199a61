"""
New unified diff strategy — content-located, confidence-scored hunks.

Hunks are located by their content rather than their declared line
numbers, so ``@@ ... @@`` headers without numbers are fine. Each hunk goes
through search -> edit; a hunk that cannot be located as a whole is split
into smaller sub-hunks that are attempted one by one against the
progressively edited lines.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..edit import apply_edit
from ..merge import MergeBackend
from ..search import find_best_match, prepare_search_string
from ..settings import DEFAULT_SETTINGS, MatchSettings
from ..text_utils import split_lines
from ..types import (
    Change,
    ChangeType,
    Diff,
    DiffResult,
    DiffResultDetails,
    EditResult,
    Hunk,
    MatchedRange,
    SearchResult,
    ToolArgs,
)
from .base import DiffStrategy

logger = logging.getLogger(__name__)

_MARKERS = {
    " ": ChangeType.CONTEXT,
    "+": ChangeType.ADD,
    "-": ChangeType.REMOVE,
}

# git extended header lines between file sections
_GIT_HEADER_PREFIXES = (
    "diff --git ",
    "index ",
    "new file mode ",
    "deleted file mode ",
    "old mode ",
    "new mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
    "Binary files ",
)


def _percent(value: float) -> int:
    return math.floor(value * 100)


def parse_change(line: str) -> Change:
    """Turn one diff body line into a :class:`Change`.

    Empty lines are blank context; lines without a diff marker are taken
    verbatim as context.
    """
    if not line:
        return Change(ChangeType.CONTEXT, "", "", "")

    change_type = _MARKERS.get(line[0])
    if change_type is None:
        change_type, body = ChangeType.CONTEXT, line
    else:
        body = line[1:]

    content = body.lstrip()
    indent = body[:len(body) - len(content)]
    return Change(change_type, content, indent, body)


class NewUnifiedDiffStrategy(DiffStrategy):
    """Apply unified diffs to drifted files with confidence scoring.

    Parameters
    ----------
    confidence_threshold:
        Minimum confidence for a located hunk and its edit; defaults to 1.0
        and is never allowed below ``settings.min_confidence``.
    settings:
        Tunables for the search and edit engines.
    merge_backend:
        Three-way merge used when splicing is not confident enough.
        Defaults to :class:`~patchwise.editing.merge.GitMergeBackend`.
    """

    name = "new_unified"

    def __init__(
        self,
        confidence_threshold: Optional[float] = None,
        settings: Optional[MatchSettings] = None,
        merge_backend: Optional[MergeBackend] = None,
    ) -> None:
        self._settings = settings or DEFAULT_SETTINGS
        threshold = 1.0 if confidence_threshold is None else confidence_threshold
        self._confidence_threshold = max(threshold, self._settings.min_confidence)
        self._merge_backend = merge_backend

    @property
    def confidence_threshold(self) -> float:
        return self._confidence_threshold

    def __repr__(self) -> str:
        return (
            "NewUnifiedDiffStrategy("
            f"confidence_threshold={self._confidence_threshold})"
        )

    def describe(self, tool_args: ToolArgs) -> str:
        return f"""# apply_diff Tool - Generate Precise Code Changes

Generate a unified diff that can be cleanly applied to modify code files.

## Step-by-Step Instructions:

1. Start with file headers:
   - First line: "--- {{original_file_path}}"
   - Second line: "+++ {{new_file_path}}"

2. For each change section:
   - Begin with "@@ ... @@" separator line without line numbers
   - Include 2-3 lines of context before and after changes
   - Mark removed lines with "-"
   - Mark added lines with "+"
   - Preserve exact indentation

3. Group related changes:
   - Keep related modifications in the same hunk
   - Start new hunks for logically separate changes
   - When modifying functions/methods, include the entire block

## Requirements:

1. MUST include exact indentation
2. MUST include sufficient context for unique matching
3. MUST group related changes together
4. MUST use proper unified diff format
5. MUST NOT include timestamps in file headers
6. MUST NOT include line numbers in the @@ header

Parameters:
- path: (required) File path relative to {tool_args.cwd}
- diff: (required) Unified diff content in unified format to apply to the file."""

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_unified_diff(self, diff: str) -> Diff:
        """Parse *diff* into hunks, dropping hunks without any edits."""
        lines = split_lines(diff)
        hunks: list[Hunk] = []
        current: Optional[Hunk] = None

        i = 0
        while i < len(lines) and not lines[i].startswith("@@"):
            i += 1

        while i < len(lines):
            line = lines[i]
            if line.startswith("@@"):
                self._close_hunk(current, hunks)
                current = Hunk()
            elif (
                line.startswith("--- ")
                and i + 1 < len(lines)
                and lines[i + 1].startswith("+++ ")
            ):
                # File header of a following diff section
                i += 1
            elif line.startswith("\\") or line.startswith(_GIT_HEADER_PREFIXES):
                pass
            elif not line and self._only_blank_until_hunk_end(lines, i):
                # Stray blank lines trailing a hunk are not context
                pass
            elif current is not None:
                current.changes.append(parse_change(line))
            i += 1

        self._close_hunk(current, hunks)
        return Diff(hunks)

    @staticmethod
    def _only_blank_until_hunk_end(lines: list[str], index: int) -> bool:
        for line in lines[index:]:
            if line.startswith("@@"):
                return True
            if line:
                return False
        return True

    def _close_hunk(self, hunk: Optional[Hunk], hunks: list[Hunk]) -> None:
        if hunk is None or not hunk.has_edits:
            return
        hunks.append(self._trim_context(hunk))

    def _trim_context(self, hunk: Hunk) -> Hunk:
        """Keep at most ``max_context_lines`` of context around the edits."""
        limit = self._settings.max_context_lines
        edit_positions = [
            j for j, change in enumerate(hunk.changes) if not change.is_context
        ]
        start = max(edit_positions[0] - limit, 0)
        end = min(edit_positions[-1] + limit, len(hunk.changes) - 1)
        return Hunk(hunk.changes[start:end + 1])

    def split_hunk(self, hunk: Hunk) -> list[Hunk]:
        """Break *hunk* into sub-hunks around each run of edits.

        Runs separated by more than ``split_context_lines`` context lines
        become separate sub-hunks, each keeping at most that much context
        on either side.
        """
        limit = self._settings.split_context_lines
        result: list[Hunk] = []
        current: Optional[Hunk] = None
        context_before: list[Change] = []
        context_after: list[Change] = []

        for change in hunk.changes:
            if change.is_context:
                if current is None:
                    context_before.append(change)
                    if len(context_before) > limit:
                        context_before.pop(0)
                else:
                    context_after.append(change)
                    if len(context_after) > limit:
                        current.changes.extend(context_after[:limit])
                        result.append(current)
                        current = None
                        context_before = context_after[-limit:] if limit else []
                        context_after = []
            else:
                if current is None:
                    current = Hunk(list(context_before))
                    context_after = []
                elif context_after:
                    current.changes.extend(context_after)
                    context_after = []
                current.changes.append(change)

        if current is not None:
            current.changes.extend(context_after)
            result.append(current)

        return result

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(
        self,
        original_content: str,
        diff_content: str,
        start_line: Optional[int] = None,
        end_line: Optional[int] = None,
    ) -> DiffResult:
        parsed = self.parse_unified_diff(diff_content)
        if not parsed.hunks:
            return DiffResult.fail(
                "No hunks found in diff. Please ensure your diff includes actual "
                "changes and follows the unified diff format."
            )

        result = split_lines(original_content)
        threshold = self._confidence_threshold

        for number, hunk in enumerate(parsed.hunks, 1):
            search_str = prepare_search_string(hunk.changes)
            search_result = find_best_match(search_str, result, 0, threshold, self._settings)

            if search_result.confidence < threshold:
                logger.debug(
                    "[DiffEdit] Hunk %d located at %.0f%% only, splitting",
                    number, search_result.confidence * 100,
                )
                sub_hunks = self.split_hunk(hunk)
                split_result = self._apply_sub_hunks(sub_hunks, result)
                if split_result is not None:
                    result = split_result
                    continue
                return self._location_failure(
                    hunk, search_result, search_str, result,
                    len(sub_hunks), start_line, end_line,
                )

            edit_result = apply_edit(
                hunk, result, search_result.index, search_result.confidence,
                threshold, self._settings, self._merge_backend,
            )
            if edit_result.confidence < threshold:
                return self._edit_failure(edit_result, search_result, search_str, result)

            logger.debug(
                "[DiffEdit] Hunk %d applied at line %d via %s (%.0f%%)",
                number, search_result.index + 1, edit_result.strategy,
                edit_result.confidence * 100,
            )
            result = edit_result.result

        return DiffResult.ok("\n".join(result))

    def _apply_sub_hunks(
        self,
        sub_hunks: list[Hunk],
        content: list[str],
    ) -> Optional[list[str]]:
        """Apply every sub-hunk in order; ``None`` if any of them fails."""
        if not sub_hunks:
            return None

        threshold = self._confidence_threshold
        result = content
        for sub_hunk in sub_hunks:
            search_str = prepare_search_string(sub_hunk.changes)
            search_result = find_best_match(search_str, result, 0, threshold, self._settings)
            if search_result.confidence < threshold:
                return None

            edit_result = apply_edit(
                sub_hunk, result, search_result.index, search_result.confidence,
                threshold, self._settings, self._merge_backend,
            )
            if edit_result.confidence < threshold:
                return None
            result = edit_result.result

        return result

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _details(
        self,
        search_result: SearchResult,
        search_str: str,
        content: list[str],
    ) -> DiffResultDetails:
        matched_range = None
        best_match = None
        if search_result.found:
            size = len(search_str.split("\n"))
            matched_range = MatchedRange(search_result.index + 1, search_result.index + size)
            best_match = "\n".join(content[search_result.index:search_result.index + size])
        return DiffResultDetails(
            similarity=search_result.confidence,
            threshold=self._confidence_threshold,
            matched_range=matched_range,
            search_content=search_str,
            best_match=best_match,
        )

    def _location_failure(
        self,
        hunk: Hunk,
        search_result: SearchResult,
        search_str: str,
        content: list[str],
        sub_hunk_count: int,
        start_line: Optional[int],
        end_line: Optional[int],
    ) -> DiffResult:
        context_lines = hunk.context_count
        total_lines = len(hunk.changes)
        context_ratio = context_lines / total_lines if total_lines else 0.0

        error = (
            "Failed to find a matching location in the file "
            f"({_percent(search_result.confidence)}% confidence, "
            f"needs {_percent(self._confidence_threshold)}%)\n\n"
            "Debug Info:\n"
            f"- Search Strategy Used: {search_result.strategy}\n"
            f"- Context Lines: {context_lines} out of {total_lines} total lines "
            f"({_percent(context_ratio)}%)\n"
            f"- Attempted to split into {sub_hunk_count} sub-hunks but still failed\n"
            "\nPossible Issues:\n"
        )
        if context_ratio < 0.2:
            error += (
                "- Not enough context lines to uniquely identify the location\n"
                "- Add a few more lines of unchanged code around your changes\n"
            )
        elif context_ratio > 0.5:
            error += (
                "- Too many context lines may reduce search accuracy\n"
                "- Try to keep only 2-3 lines of context before and after changes\n"
            )
        else:
            error += (
                "- The diff may be targeting a different version of the file\n"
                "- There may be too many changes in a single hunk, try splitting "
                "the changes into multiple hunks\n"
            )
        if start_line is not None and end_line is not None:
            error += f"\nSearch Range: lines {start_line}-{end_line}\n"

        logger.warning(
            "[DiffEdit] Hunk not located (%d%% < %d%%, strategy=%s)",
            _percent(search_result.confidence),
            _percent(self._confidence_threshold),
            search_result.strategy,
        )
        return DiffResult.fail(error, self._details(search_result, search_str, content))

    def _edit_failure(
        self,
        edit_result: EditResult,
        search_result: SearchResult,
        search_str: str,
        content: list[str],
    ) -> DiffResult:
        error = (
            f"Failed to apply the edit using {edit_result.strategy} strategy "
            f"({_percent(edit_result.confidence)}% confidence)\n\n"
            "Debug Info:\n"
            "- The location was found but the content didn't match exactly\n"
            "- This usually means the file has been modified since the diff was created\n"
            "- Or the diff may be targeting a different version of the file\n"
            "\nPossible Solutions:\n"
            "1. Refresh your view of the file and create a new diff\n"
            "2. Double-check that the removed lines (-) match the current file content\n"
            "3. Ensure your diff targets the correct version of the file"
        )
        logger.warning(
            "[DiffEdit] Hunk located at line %d but edit not confident (%d%%, %s)",
            search_result.index + 1, _percent(edit_result.confidence),
            edit_result.strategy,
        )
        return DiffResult.fail(error, self._details(search_result, search_str, content))
