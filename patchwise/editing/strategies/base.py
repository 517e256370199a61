"""
Diff strategy interface shared by every supported diff dialect.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..types import DiffResult, ToolArgs


class DiffStrategy(ABC):
    """Parse one diff dialect and apply it to file content.

    ``apply`` never raises for bad input: malformed diffs, bad line ranges
    and unconfident matches all come back as a failed ``DiffResult``.
    """

    name: str = ""

    @abstractmethod
    def describe(self, tool_args: ToolArgs) -> str:
        """Usage text for the apply_diff tool in this dialect."""

    @abstractmethod
    def apply(
        self,
        original_content: str,
        diff_content: str,
        start_line: Optional[int] = None,
        end_line: Optional[int] = None,
    ) -> DiffResult:
        """Apply *diff_content* to *original_content*.

        *start_line* and *end_line* are optional 1-based inclusive hints.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
