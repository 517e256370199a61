"""
patchwise — apply LLM-proposed edits to drifted files.

Public API for library usage::

    from patchwise import get_diff_strategy

    strategy = get_diff_strategy("new_unified")
    result = strategy.apply(original_text, diff_text)
    if result.success:
        new_text = result.content
"""

from .editing import DiffResult, ToolArgs, get_diff_strategy

__all__ = ["DiffResult", "ToolArgs", "get_diff_strategy"]
