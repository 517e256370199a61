"""
Search engine — locates a hunk's pre-image inside the current file lines.

Two independent strategies are tried and the most confident one wins:

* **exact** — literal substring search over overlapping windows.
* **similarity** — one-line sliding window scored by normalized
  Levenshtein similarity.

Both cap their raw score with a context-validation score that adapts the
threshold to the file size and rewards anchors on distinctive lines.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .settings import DEFAULT_SETTINGS, MatchSettings
from .text_utils import normalized_levenshtein, similarity_upper_bound, split_lines
from .types import Change, ChangeType, Hunk, SearchResult

logger = logging.getLogger(__name__)

NOT_FOUND = -1


def _search_lines(search_str: str) -> list[str]:
    # Search strings are newline-joined lines; a trailing blank line counts
    return search_str.split("\n") if search_str else []


def prepare_search_string(changes: list[Change]) -> str:
    """Join the context and removed lines of *changes* into one block."""
    return "\n".join(
        c.line for c in changes
        if c.change_type in (ChangeType.CONTEXT, ChangeType.REMOVE)
    )


# ------------------------------------------------------------------
# Context validation
# ------------------------------------------------------------------

def get_adaptive_threshold(
    haystack_lines: int,
    base_threshold: float,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> float:
    """Relax *base_threshold* for large files, never below the floor."""
    if haystack_lines <= settings.large_file_lines:
        return base_threshold
    return max(
        base_threshold - settings.large_file_relaxation,
        settings.adaptive_floor,
    )


def evaluate_content_uniqueness(search_str: str, haystack: list[str]) -> float:
    """Fraction of distinct search lines occurring at most twice in *haystack*.

    Blank lines never count as distinctive.
    """
    unique_lines = set(split_lines(search_str))
    if not unique_lines:
        return 0.0

    content_str = "\n".join(haystack)
    unique_count = 0
    for line in unique_lines:
        if not line.strip():
            continue
        if 1 <= content_str.count(line) <= 2:
            unique_count += 1
    return unique_count / len(unique_lines)


def count_block_occurrences(
    search_lines: list[str],
    haystack: list[str],
    limit: Optional[int] = None,
) -> int:
    """Count line-aligned occurrences of *search_lines* in *haystack*."""
    size = len(search_lines)
    if size == 0:
        return 0

    first = search_lines[0]
    count = 0
    for i in range(len(haystack) - size + 1):
        if haystack[i] == first and haystack[i:i + size] == search_lines:
            count += 1
            if limit is not None and count >= limit:
                break
    return count


def _context_validator(
    search_str: str,
    haystack: list[str],
    confidence_threshold: float,
    settings: MatchSettings,
) -> Callable[[float], float]:
    """Precompute the haystack-wide parts of context validation.

    The returned callable maps a raw similarity to the validated score.
    """
    threshold = get_adaptive_threshold(len(haystack), confidence_threshold, settings)
    boost = (
        evaluate_content_uniqueness(search_str, haystack)
        * settings.unique_content_boost
    )
    ambiguous = count_block_occurrences(_search_lines(search_str), haystack, limit=2) > 1

    def validate(similarity: float) -> float:
        if similarity < threshold or ambiguous:
            return similarity * settings.below_threshold_factor + boost
        return similarity + boost

    return validate


def validate_context_lines(
    search_str: str,
    matched: str,
    haystack: list[str],
    confidence_threshold: float,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> float:
    """Score how well *matched* anchors *search_str* within *haystack*.

    Matches below the adaptive threshold, and blocks that occur more than
    once in the haystack, are penalized rather than discarded so they can
    still surface in diagnostics.
    """
    validate = _context_validator(search_str, haystack, confidence_threshold, settings)
    return validate(normalized_levenshtein(search_str, matched))


# ------------------------------------------------------------------
# Search strategies
# ------------------------------------------------------------------

def create_overlapping_windows(
    content: list[str],
    search_size: int,
    overlap_size: Optional[int] = None,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> list[tuple[list[str], int]]:
    """Split *content* into ``(window, start_index)`` pairs.

    Windows are twice the search size (capped by ``max_window_size``) and
    overlap by a few lines; windows shorter than the search are dropped.
    """
    if search_size <= 0:
        return []

    if overlap_size is None:
        overlap_size = settings.window_overlap
    window_size = max(search_size, min(search_size, settings.max_window_size) * 2)
    overlap_size = min(overlap_size, window_size - 1)
    step = max(window_size - overlap_size, 1)

    windows: list[tuple[list[str], int]] = []
    for i in range(0, len(content), step):
        window = content[i:i + window_size]
        if len(window) >= search_size:
            windows.append((window, i))
    return windows


def find_exact_match(
    search_str: str,
    content: list[str],
    start_index: int = 0,
    confidence_threshold: float = 1.0,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> SearchResult:
    search_lines = _search_lines(search_str)
    best = SearchResult(NOT_FOUND, 0.0, "exact")
    if not search_lines:
        return best

    size = len(search_lines)
    validate = None
    windows = create_overlapping_windows(content[start_index:], size, settings=settings)
    for window, window_index in windows:
        window_str = "\n".join(window)
        pos = window_str.find(search_str)
        while pos != -1:
            line_index = window_str.count("\n", 0, pos)
            matched = "\n".join(window[line_index:line_index + size])
            similarity = normalized_levenshtein(search_str, matched)
            if validate is None:
                validate = _context_validator(
                    search_str, content, confidence_threshold, settings
                )
            confidence = min(similarity, validate(similarity))

            if confidence > best.confidence:
                best = SearchResult(
                    start_index + window_index + line_index, confidence, "exact"
                )
            pos = window_str.find(search_str, pos + 1)

    return best


def find_similarity_match(
    search_str: str,
    content: list[str],
    start_index: int = 0,
    confidence_threshold: float = 1.0,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> SearchResult:
    search_lines = _search_lines(search_str)
    best = SearchResult(NOT_FOUND, 0.0, "similarity")
    if not search_lines:
        return best

    size = len(search_lines)
    validate = None
    for i in range(start_index, len(content) - size + 1):
        window_str = "\n".join(content[i:i + size])
        # Windows that cannot beat the current best or reach the threshold
        # are not worth a full edit-distance computation.
        bound = similarity_upper_bound(search_str, window_str)
        if bound <= best.confidence or bound < confidence_threshold:
            continue

        score = normalized_levenshtein(
            search_str, window_str,
            score_cutoff=max(best.confidence, confidence_threshold),
        )
        if score > best.confidence and score >= confidence_threshold:
            if validate is None:
                validate = _context_validator(
                    search_str, content, confidence_threshold, settings
                )
            adjusted = min(score, validate(score))
            if adjusted > best.confidence:
                best = SearchResult(i, adjusted, "similarity")

    return best


def find_best_match(
    search_str: str,
    content: list[str],
    start_index: int = 0,
    confidence_threshold: float = 1.0,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> SearchResult:
    """Run every search strategy and keep the most confident result."""
    if not search_str:
        # A hunk with nothing to anchor on can only target an empty file
        if not content[start_index:]:
            return SearchResult(start_index, 1.0, "empty")
        return SearchResult(NOT_FOUND, 0.0, "none")

    best = SearchResult(NOT_FOUND, 0.0, "none")
    for strategy in (find_exact_match, find_similarity_match):
        result = strategy(
            search_str, content, start_index, confidence_threshold, settings
        )
        if result.confidence > best.confidence:
            best = result

    logger.debug(
        "[DiffEdit] Best match: index=%d confidence=%.3f strategy=%s",
        best.index, best.confidence, best.strategy,
    )
    return best


# ------------------------------------------------------------------
# Edit validation
# ------------------------------------------------------------------

def _join_changes(hunk: Hunk, kinds: tuple[ChangeType, ...]) -> str:
    return "\n".join(
        c.indent + c.content for c in hunk.changes if c.change_type in kinds
    )


def validate_edit_result(
    hunk: Hunk,
    result: str,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> float:
    """Score a reconstructed region against the hunk's expected post-image.

    A region that still looks like the pre-image while not matching the
    post-image exactly is a likely no-op and gets penalized.
    """
    expected = _join_changes(hunk, (ChangeType.CONTEXT, ChangeType.ADD))
    similarity = normalized_levenshtein(expected, result)

    original = _join_changes(hunk, (ChangeType.CONTEXT, ChangeType.REMOVE))
    original_similarity = normalized_levenshtein(original, result)
    if original_similarity > settings.no_op_similarity and similarity != 1.0:
        return settings.no_op_penalty * similarity
    return similarity
