"""
Match settings — the tunable knobs of the search and edit engines.

These values were tuned empirically; they live here so callers can
calibrate them instead of patching constants.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class MatchSettings:
    # Adaptive threshold
    large_file_lines: int = 1000
    large_file_relaxation: float = 0.07
    adaptive_floor: float = 0.8

    # Context validation
    unique_content_boost: float = 0.05
    below_threshold_factor: float = 0.3

    # Exact-match windows
    window_overlap: int = 3
    max_window_size: int = 500

    # Edit validation (no-op guard)
    no_op_similarity: float = 0.97
    no_op_penalty: float = 0.8

    # Hunk shaping
    max_context_lines: int = 6
    split_context_lines: int = 3

    # Thresholds
    min_confidence: float = 0.8
    default_edit_threshold: float = 0.97

    @classmethod
    def from_mapping(cls, data: dict | None) -> "MatchSettings":
        """Build settings from a mapping, ignoring unknown keys."""
        if not data:
            return cls()
        known = {f.name: f.type for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            cast = int if known[key] == "int" else float
            kwargs[key] = cast(value)
        return cls(**kwargs)


DEFAULT_SETTINGS = MatchSettings()
