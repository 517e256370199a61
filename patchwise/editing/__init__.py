"""Diff application engine — locate, splice and merge LLM-proposed edits."""

from .types import (
    Change, ChangeType, Hunk, Diff, SearchResult, EditResult,
    DiffResult, DiffResultDetails, MatchedRange, ToolArgs,
)
from .settings import MatchSettings, DEFAULT_SETTINGS
from .errors import PatchwiseError, MergeEnvironmentError, ConfigError
from .search import find_best_match, prepare_search_string
from .edit import apply_edit, apply_context_matching, apply_git_fallback
from .merge import MergeBackend, GitMergeBackend
from .strategies import (
    DiffStrategy, SearchReplaceDiffStrategy, UnifiedDiffStrategy,
    NewUnifiedDiffStrategy, STRATEGY_NAMES, get_diff_strategy,
)
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "Change", "ChangeType", "Hunk", "Diff", "SearchResult", "EditResult",
    "DiffResult", "DiffResultDetails", "MatchedRange", "ToolArgs",
    "MatchSettings", "DEFAULT_SETTINGS",
    "PatchwiseError", "MergeEnvironmentError", "ConfigError",
    "find_best_match", "prepare_search_string",
    "apply_edit", "apply_context_matching", "apply_git_fallback",
    "MergeBackend", "GitMergeBackend",
    "DiffStrategy", "SearchReplaceDiffStrategy", "UnifiedDiffStrategy",
    "NewUnifiedDiffStrategy", "STRATEGY_NAMES", "get_diff_strategy",
    "log_edit_metric", "read_edit_stats",
]
