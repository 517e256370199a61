"""Diff dialects — one strategy per supported diff format."""

from __future__ import annotations

from typing import Optional

from ..merge import MergeBackend
from ..settings import MatchSettings
from .base import DiffStrategy
from .new_unified import NewUnifiedDiffStrategy
from .search_replace import SearchReplaceDiffStrategy
from .unified import UnifiedDiffStrategy

STRATEGY_NAMES = ("search_replace", "unified", "new_unified")


def get_diff_strategy(
    name: str = "search_replace",
    fuzzy_match_threshold: Optional[float] = None,
    settings: Optional[MatchSettings] = None,
    buffer_lines: Optional[int] = None,
    merge_backend: Optional[MergeBackend] = None,
) -> DiffStrategy:
    """Build the strategy for dialect *name*.

    Raises ``ValueError`` for names outside :data:`STRATEGY_NAMES`.
    """
    if name == "search_replace":
        return SearchReplaceDiffStrategy(fuzzy_match_threshold, buffer_lines)
    if name == "new_unified":
        return NewUnifiedDiffStrategy(fuzzy_match_threshold, settings, merge_backend)
    if name == "unified":
        return UnifiedDiffStrategy()
    raise ValueError(
        f"Unknown diff strategy {name!r} (expected one of {', '.join(STRATEGY_NAMES)})"
    )


__all__ = [
    "DiffStrategy",
    "SearchReplaceDiffStrategy", "UnifiedDiffStrategy", "NewUnifiedDiffStrategy",
    "STRATEGY_NAMES", "get_diff_strategy",
]
