"""
SEARCH/REPLACE strategy — replaces one block located by (fuzzy) match.

Diff format::

    <<<<<<< SEARCH
    exact content to find
    =======
    new content
    >>>>>>> REPLACE

Only the first block in the diff is applied.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..text_utils import (
    normalize_whitespace,
    normalized_levenshtein,
    similarity_upper_bound,
    split_lines,
    whitespace_similarity,
)
from ..types import DiffResult, DiffResultDetails, MatchedRange, ToolArgs
from .base import DiffStrategy

logger = logging.getLogger(__name__)

BUFFER_LINES = 20

_BLOCK_PATTERN = re.compile(
    r"^<{7} SEARCH[ \t]*\n(.*?)\n?^={7}[ \t]*\n(.*?)\n?^>{7} REPLACE",
    re.DOTALL | re.MULTILINE,
)


class SearchReplaceDiffStrategy(DiffStrategy):
    """Replace the best-matching window of lines with the REPLACE text.

    Parameters
    ----------
    fuzzy_threshold:
        Minimum whitespace-insensitive similarity for a window to match.
        ``1.0`` (the default) only accepts exact matches.
    buffer_lines:
        How far past a hinted line range the scan may look.
    """

    name = "search_replace"

    def __init__(
        self,
        fuzzy_threshold: Optional[float] = None,
        buffer_lines: Optional[int] = None,
    ) -> None:
        self._fuzzy_threshold = 1.0 if fuzzy_threshold is None else fuzzy_threshold
        self._buffer_lines = BUFFER_LINES if buffer_lines is None else buffer_lines

    @property
    def fuzzy_threshold(self) -> float:
        return self._fuzzy_threshold

    def __repr__(self) -> str:
        return (
            f"SearchReplaceDiffStrategy(fuzzy_threshold={self._fuzzy_threshold}, "
            f"buffer_lines={self._buffer_lines})"
        )

    def describe(self, tool_args: ToolArgs) -> str:
        return f"""## apply_diff
Description: Replace existing code using a single search and replace block.
The SEARCH section is located in the file (indentation and other whitespace
differences are tolerated only when fuzzy matching is enabled) and replaced
with the REPLACE section. Only one block is applied per tool use; read the
file first if you are unsure of its exact current content, and remember to
update closing brackets or other syntax affected further down the file.

Parameters:
- path: (required) The path of the file to modify (relative to the current working directory {tool_args.cwd})
- diff: (required) The search/replace block defining the changes.
- start_line: (optional) The line number where the search block starts.
- end_line: (optional) The line number where the search block ends.
  With an empty SEARCH section, start_line and end_line must be equal and
  the REPLACE text is inserted before that line.

Diff format:
```
<<<<<<< SEARCH
[exact content to find including whitespace]
=======
[new content to replace with]
>>>>>>> REPLACE
```"""

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
        match = _BLOCK_PATTERN.search(diff_content.replace("\r\n", "\n"))
        if match is None:
            return DiffResult.fail(
                "Invalid diff format - missing required SEARCH/REPLACE sections"
            )

        search_content, replace_content = match.group(1), match.group(2)
        original_lines = split_lines(original_content)
        search_lines = split_lines(search_content)
        replace_lines = split_lines(replace_content)

        if not search_lines:
            if start_line != end_line:
                return DiffResult.fail(
                    "Empty search content requires start_line and end_line "
                    f"to be the same (got {start_line or 0}-{end_line or 0})"
                )
            if start_line is None:
                return DiffResult.fail(
                    "Empty search content requires start_line to be specified"
                )

        best_index: Optional[int] = None
        best_score = 0.0

        if start_line is not None and end_line is not None:
            start_idx = start_line - 1
            end_idx = min(end_line, len(original_lines))
            # An empty search may insert just past the last line
            last_start = len(original_lines) if not search_lines else len(original_lines) - 1
            if start_idx < 0 or start_idx > last_start or end_line < start_line:
                return DiffResult.fail(
                    f"Line range {start_line}-{end_line} is invalid "
                    f"(file has {len(original_lines)} lines)"
                )

            window_str = "\n".join(original_lines[start_idx:end_idx])
            similarity = whitespace_similarity(window_str, search_content)
            if similarity >= self._fuzzy_threshold:
                best_index, best_score = start_idx, similarity

        if best_index is None:
            best_index, best_score = self._scan(
                original_lines, search_content, len(search_lines),
                start_line, end_line,
            )

        if best_index is None or best_score < self._fuzzy_threshold:
            return self._no_match_failure(
                original_lines, search_content, len(search_lines),
                best_index, best_score, start_line, end_line,
            )

        logger.debug(
            "[DiffEdit] SEARCH block matched at line %d (%.0f%% similar)",
            best_index + 1, best_score * 100,
        )
        result = (
            original_lines[:best_index]
            + replace_lines
            + original_lines[best_index + len(search_lines):]
        )
        return DiffResult.ok("\n".join(result))

    def _scan(
        self,
        original_lines: list[str],
        search_content: str,
        size: int,
        start_line: Optional[int],
        end_line: Optional[int],
    ) -> tuple[Optional[int], float]:
        """Score every window of *size* lines in the (buffered) search range."""
        range_start = 0
        if start_line is not None:
            range_start = max(start_line - 1 - self._buffer_lines, 0)
        range_end = len(original_lines)
        if end_line is not None:
            range_end = min(end_line + self._buffer_lines, len(original_lines))

        norm_search = normalize_whitespace(search_content)
        best_index: Optional[int] = None
        best_score = 0.0

        for i in range(range_start, range_end - size + 1):
            norm_window = normalize_whitespace("\n".join(original_lines[i:i + size]))
            if norm_window == norm_search:
                # Nothing can beat an exact match; the first one wins
                return i, 1.0
            if similarity_upper_bound(norm_window, norm_search) <= best_score:
                continue
            score = normalized_levenshtein(
                norm_window, norm_search, score_cutoff=best_score,
            )
            if score > best_score:
                best_index, best_score = i, score

        return best_index, best_score

    def _no_match_failure(
        self,
        original_lines: list[str],
        search_content: str,
        size: int,
        best_index: Optional[int],
        best_score: float,
        start_line: Optional[int],
        end_line: Optional[int],
    ) -> DiffResult:
        matched_range = None
        best_match = None
        if best_index is not None:
            matched_range = MatchedRange(best_index + 1, best_index + size)
            best_match = "\n".join(original_lines[best_index:best_index + size])

        error = (
            f"No sufficiently similar match found "
            f"({int(best_score * 100)}% similar, needs {int(self._fuzzy_threshold * 100)}%)\n\n"
            "Debug Info:\n"
            f"- Similarity Score: {int(best_score * 100)}%\n"
            f"- Required Threshold: {int(self._fuzzy_threshold * 100)}%\n"
        )
        if start_line is not None and end_line is not None:
            error += f"- Search Range: lines {start_line}-{end_line}\n"
        else:
            error += "- Search Range: start to end\n"
        if matched_range is not None:
            error += (
                f"- Best Match Found: lines {matched_range.start}-{matched_range.end}\n"
                f"\nBest Match:\n{best_match}\n"
            )
        else:
            error += "- Best Match Found: (no match)\n"
        error += f"\nSearch Content:\n{search_content}"

        logger.warning(
            "[DiffEdit] SEARCH block not found (%.0f%% < %.0f%%)",
            best_score * 100, self._fuzzy_threshold * 100,
        )
        return DiffResult.fail(
            error,
            DiffResultDetails(
                similarity=best_score,
                threshold=self._fuzzy_threshold,
                matched_range=matched_range,
                search_content=search_content,
                best_match=best_match,
            ),
        )
