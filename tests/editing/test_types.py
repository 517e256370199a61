"""Tests for the edit model and match settings."""

import pytest

from patchwise.editing.settings import DEFAULT_SETTINGS, MatchSettings
from patchwise.editing.types import (
    Change,
    ChangeType,
    DiffResult,
    DiffResultDetails,
    Hunk,
    MatchedRange,
    SearchResult,
)


class TestHunk:
    def test_images(self):
        hunk = Hunk([
            Change(ChangeType.CONTEXT, "def f():"),
            Change(ChangeType.REMOVE, "return 1", "    "),
            Change(ChangeType.ADD, "return 2", "    "),
        ])

        assert hunk.pre_image() == ["def f():", "    return 1"]
        assert hunk.post_image() == ["def f():", "    return 2"]
        assert hunk.has_edits
        assert hunk.context_count == 1

    def test_original_line_wins(self):
        change = Change(ChangeType.CONTEXT, "x", "  ", original_line="  x  ")
        assert change.line == "  x  "

    def test_context_only(self):
        hunk = Hunk([Change(ChangeType.CONTEXT, "a")])
        assert not hunk.has_edits


class TestResults:
    def test_search_result_found(self):
        assert SearchResult(0, 1.0, "exact").found
        assert not SearchResult(-1, 0.0, "none").found

    def test_diff_result_ok(self):
        result = DiffResult.ok("body")
        assert result.success
        assert result.content == "body"
        assert result.error is None

    def test_diff_result_fail(self):
        details = DiffResultDetails(similarity=0.5, matched_range=MatchedRange(1, 2))
        result = DiffResult.fail("nope", details)

        assert not result.success
        assert result.content is None
        assert result.to_dict()["details"]["similarity"] == 0.5


class TestMatchSettings:
    def test_defaults(self):
        assert DEFAULT_SETTINGS.large_file_lines == 1000
        assert DEFAULT_SETTINGS.min_confidence == 0.8
        assert DEFAULT_SETTINGS.no_op_similarity == 0.97

    def test_from_mapping_casts_and_ignores_unknown(self):
        settings = MatchSettings.from_mapping({
            "max_context_lines": "4",
            "unique_content_boost": 0.1,
            "not_a_setting": 1,
        })

        assert settings.max_context_lines == 4
        assert settings.unique_content_boost == 0.1
        assert settings.split_context_lines == 3

    def test_from_mapping_empty(self):
        assert MatchSettings.from_mapping(None) == MatchSettings()

    def test_from_mapping_bad_value(self):
        with pytest.raises(ValueError):
            MatchSettings.from_mapping({"window_overlap": "many"})
