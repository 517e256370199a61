"""
Edit engine — rebuilds file lines once a hunk has been located.

``apply_edit`` prefers direct context splicing and only pays for the
merge backend when the located match, or the spliced result, is not
confident enough.
"""

from __future__ import annotations

import logging
from typing import Optional

from .merge import GitMergeBackend, MergeBackend
from .search import validate_edit_result
from .settings import DEFAULT_SETTINGS, MatchSettings
from .types import Change, ChangeType, EditResult, Hunk

logger = logging.getLogger(__name__)


def _added_lines(change: Change) -> list[str]:
    """Lines contributed by an ADD change, re-indented when bare."""
    lines = change.content.split("\n")
    return [
        line if line[:1].isspace() else change.indent + line
        for line in lines
    ]


def apply_context_matching(
    hunk: Hunk,
    content: list[str],
    match_position: int,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> EditResult:
    """Splice *hunk* into *content* at *match_position*.

    Context lines are copied from the file (so drifted whitespace in the
    file wins), added lines are inserted and removed lines skipped. The
    rebuilt region is then scored against the hunk's expected post-image.
    """
    if match_position < 0 or match_position > len(content):
        return EditResult(0.0, list(content), "context")

    new_result = list(content[:match_position])
    source_index = match_position

    for change in hunk.changes:
        if change.change_type is ChangeType.CONTEXT:
            if source_index < len(content):
                new_result.append(content[source_index])
            else:
                # Hunk runs past the end of the file
                new_result.append(change.indent + change.content)
            source_index += 1
        elif change.change_type is ChangeType.ADD:
            new_result.extend(_added_lines(change))
        else:
            source_index += 1

    tail = content[source_index:]
    new_result.extend(tail)

    after_text = "\n".join(new_result[match_position:len(new_result) - len(tail)])
    confidence = validate_edit_result(hunk, after_text, settings)

    return EditResult(confidence, new_result, "context")


def apply_git_fallback(
    hunk: Hunk,
    content: list[str],
    backend: Optional[MergeBackend] = None,
) -> EditResult:
    """Apply *hunk* through a three-way merge.

    Returns confidence 1.0 with the merged lines when the backend succeeds,
    otherwise confidence 0.0 with *content* unchanged.
    """
    backend = backend or GitMergeBackend()
    merged = backend.merge(list(content), hunk.pre_image(), hunk.post_image())
    if merged is None:
        logger.debug("[DiffEdit] Merge backend could not apply hunk")
        return EditResult(0.0, list(content), "git-fallback")
    return EditResult(1.0, merged, "git-fallback")


def apply_edit(
    hunk: Hunk,
    content: list[str],
    match_position: int,
    confidence: float,
    confidence_threshold: Optional[float] = None,
    settings: MatchSettings = DEFAULT_SETTINGS,
    backend: Optional[MergeBackend] = None,
) -> EditResult:
    """Apply *hunk* at a located position, escalating to the merge backend.

    A match below the threshold goes straight to the merge backend;
    otherwise context splicing is tried first and kept if it clears the
    threshold.
    """
    if confidence_threshold is None:
        confidence_threshold = settings.default_edit_threshold

    if confidence < confidence_threshold:
        logger.debug(
            "[DiffEdit] Match confidence %.3f below %.3f, using merge fallback",
            confidence, confidence_threshold,
        )
        return apply_git_fallback(hunk, content, backend)

    context_result = apply_context_matching(hunk, content, match_position, settings)
    if context_result.confidence >= confidence_threshold:
        return context_result

    logger.debug(
        "[DiffEdit] Context splice confidence %.3f below %.3f, using merge fallback",
        context_result.confidence, confidence_threshold,
    )
    return apply_git_fallback(hunk, content, backend)
