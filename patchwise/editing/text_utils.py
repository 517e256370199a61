"""
Text helpers — line splitting and Levenshtein-based similarity.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from rapidfuzz.distance import Levenshtein

_WHITESPACE_RUN = re.compile(r"\s+")


def split_lines(text: str) -> list[str]:
    """Split *text* into lines without line terminators.

    A single trailing newline does not produce an empty last line, so
    ``"a\\nb\\n"`` and ``"a\\nb"`` both give ``["a", "b"]``.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def levenshtein_distance(a: str, b: str, max_distance: Optional[int] = None) -> int:
    """Number of single-character edits turning *a* into *b*.

    With *max_distance*, computation stops as soon as the distance is known
    to exceed it and ``max_distance + 1`` is returned.
    """
    return Levenshtein.distance(a, b, score_cutoff=max_distance)


def normalized_levenshtein(
    a: str,
    b: str,
    score_cutoff: Optional[float] = None,
) -> float:
    """Similarity in [0, 1]: ``1 - distance / max(len(a), len(b))``.

    Scores below *score_cutoff* are reported as ``0.0``. The cutoff bounds
    the edit distance up front, so windows that cannot reach it are
    abandoned early instead of being scored in full.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    if score_cutoff is None:
        return 1.0 - levenshtein_distance(a, b) / longest

    # Whole edits only; the epsilon keeps an exact-boundary score inside
    max_distance = math.floor((1.0 - score_cutoff) * longest + 1e-9)
    if max_distance < 0:
        return 0.0
    distance = levenshtein_distance(a, b, max_distance)
    if distance > max_distance:
        return 0.0
    return 1.0 - distance / longest


def similarity_upper_bound(a: str, b: str) -> float:
    """Cheap upper bound on :func:`normalized_levenshtein` from lengths alone."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - abs(len(a) - len(b)) / longest


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip()


def whitespace_similarity(original: str, search: str) -> float:
    """Similarity that ignores differences in whitespace runs.

    An empty search matches anything.
    """
    if not search:
        return 1.0
    norm_original = normalize_whitespace(original)
    norm_search = normalize_whitespace(search)
    if norm_original == norm_search:
        return 1.0
    return normalized_levenshtein(norm_original, norm_search)
