"""
Edit model — the vocabulary shared by every diff strategy.

Nothing here has behaviour beyond small derived views; all objects are
created and consumed within a single ``apply`` call.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Optional


class ChangeType(enum.Enum):
    CONTEXT = "context"
    ADD = "add"
    REMOVE = "remove"


@dataclass
class Change:
    """One diff line, with its leading whitespace split off into ``indent``."""
    change_type: ChangeType
    content: str
    indent: str = ""
    original_line: Optional[str] = None

    @property
    def line(self) -> str:
        """The verbatim source line, rebuilt from indent + content if unknown."""
        if self.original_line is not None:
            return self.original_line
        return self.indent + self.content

    @property
    def is_context(self) -> bool:
        return self.change_type is ChangeType.CONTEXT


@dataclass
class Hunk:
    """A contiguous group of context/add/remove changes."""
    changes: list[Change] = field(default_factory=list)

    @property
    def has_edits(self) -> bool:
        return any(not c.is_context for c in self.changes)

    @property
    def context_count(self) -> int:
        return sum(1 for c in self.changes if c.is_context)

    def pre_image(self) -> list[str]:
        """Lines the hunk expects to find (context + removed)."""
        return [
            c.line for c in self.changes
            if c.change_type in (ChangeType.CONTEXT, ChangeType.REMOVE)
        ]

    def post_image(self) -> list[str]:
        """Lines the hunk leaves behind (context + added)."""
        return [
            c.line for c in self.changes
            if c.change_type in (ChangeType.CONTEXT, ChangeType.ADD)
        ]


@dataclass
class Diff:
    hunks: list[Hunk] = field(default_factory=list)


@dataclass(frozen=True)
class SearchResult:
    """Best location for a search block; ``index == -1`` means not found."""
    index: int
    confidence: float
    strategy: str

    @property
    def found(self) -> bool:
        return self.index >= 0


@dataclass(frozen=True)
class EditResult:
    confidence: float
    result: list[str]
    strategy: str


@dataclass(frozen=True)
class MatchedRange:
    start: int
    end: int


@dataclass(frozen=True)
class DiffResultDetails:
    """Raw values behind a failure, for programmatic inspection."""
    similarity: Optional[float] = None
    threshold: Optional[float] = None
    matched_range: Optional[MatchedRange] = None
    search_content: Optional[str] = None
    best_match: Optional[str] = None


@dataclass(frozen=True)
class DiffResult:
    """Outward-facing result of ``DiffStrategy.apply``.

    Either a success carrying the full new file body, or a failure
    carrying a human-readable diagnostic and optional details.
    """
    success: bool
    content: Optional[str] = None
    error: Optional[str] = None
    details: Optional[DiffResultDetails] = None

    @classmethod
    def ok(cls, content: str) -> "DiffResult":
        return cls(success=True, content=content)

    @classmethod
    def fail(
        cls,
        error: str,
        details: Optional[DiffResultDetails] = None,
    ) -> "DiffResult":
        return cls(success=False, error=error, details=details)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ToolArgs:
    """What a strategy needs to render its usage text."""
    cwd: str = "."
    tool_options: Optional[dict[str, Any]] = None
