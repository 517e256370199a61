"""Tests for the SEARCH/REPLACE strategy."""

import time

import pytest

from patchwise.editing.strategies import SearchReplaceDiffStrategy
from patchwise.editing.types import ToolArgs


def _block(search, replace):
    return f"<<<<<<< SEARCH\n{search}\n=======\n{replace}\n>>>>>>> REPLACE"


@pytest.fixture
def strategy():
    return SearchReplaceDiffStrategy()


class TestApply:
    def test_replaces_single_line(self, strategy):
        result = strategy.apply("a\nb\nc\n", _block("b", "B"))

        assert result.success
        assert result.content == "a\nB\nc"
        assert result.error is None

    def test_replaces_multi_line_block(self, strategy):
        original = "def f():\n    x = 1\n    return x\n\ndef g():\n    pass\n"
        result = strategy.apply(
            original,
            _block("    x = 1\n    return x", "    x = 2\n    y = x * 2\n    return y"),
        )

        assert result.success
        assert result.content == (
            "def f():\n    x = 2\n    y = x * 2\n    return y\n\ndef g():\n    pass"
        )

    def test_empty_replace_deletes(self, strategy):
        diff = "<<<<<<< SEARCH\nb\n=======\n>>>>>>> REPLACE"
        result = strategy.apply("a\nb\nc", diff)
        assert result.content == "a\nc"

    def test_whitespace_differences_tolerated(self, strategy):
        result = strategy.apply("def f():\n    return 1\n", _block("def f():\n  return 1", "def f():\n    return 2"))

        assert result.success
        assert result.content == "def f():\n    return 2"

    def test_crlf_diff(self, strategy):
        diff = "<<<<<<< SEARCH\r\nb\r\n=======\r\nB\r\n>>>>>>> REPLACE\r\n"
        result = strategy.apply("a\nb\nc", diff)
        assert result.content == "a\nB\nc"

    def test_only_first_block_applied(self, strategy):
        diff = _block("a", "A") + "\n" + _block("c", "C")
        result = strategy.apply("a\nb\nc", diff)
        assert result.content == "A\nb\nc"

    def test_fuzzy_threshold_accepts_close_match(self):
        strategy = SearchReplaceDiffStrategy(fuzzy_threshold=0.8)
        result = strategy.apply(
            "def foo():\n    return 42\n",
            _block("def foo():\n    return 43", "def foo():\n    return 0"),
        )

        assert result.success
        assert result.content == "def foo():\n    return 0"


class TestLineHints:
    def test_hint_selects_occurrence(self, strategy):
        original = "x = 1\ny = 2\nx = 1\ny = 2"
        result = strategy.apply(
            original, _block("x = 1\ny = 2", "x = 9\ny = 2"), start_line=3, end_line=4,
        )
        assert result.content == "x = 1\ny = 2\nx = 9\ny = 2"

    def test_hint_off_by_a_few_lines(self, strategy):
        original = "\n".join(f"line {i}" for i in range(1, 31))
        result = strategy.apply(
            original, _block("line 15\nline 16", "LINE 15\nLINE 16"), start_line=10, end_line=11,
        )

        assert result.success
        lines = result.content.split("\n")
        assert lines[14] == "LINE 15"
        assert lines[15] == "LINE 16"

    def test_empty_search_inserts_before_line(self, strategy):
        diff = "<<<<<<< SEARCH\n=======\nNEW\n>>>>>>> REPLACE"
        result = strategy.apply("a\nb\nc\n", diff, start_line=2, end_line=2)
        assert result.content == "a\nNEW\nb\nc"

    def test_empty_search_appends_after_last_line(self, strategy):
        diff = "<<<<<<< SEARCH\n=======\nd\n>>>>>>> REPLACE"
        result = strategy.apply("a\nb\nc", diff, start_line=4, end_line=4)
        assert result.content == "a\nb\nc\nd"

    def test_empty_search_requires_equal_lines(self, strategy):
        diff = "<<<<<<< SEARCH\n=======\nNEW\n>>>>>>> REPLACE"
        result = strategy.apply("a\nb\nc", diff, start_line=1, end_line=2)

        assert not result.success
        assert "requires start_line and end_line to be the same" in result.error

    def test_empty_search_requires_start_line(self, strategy):
        diff = "<<<<<<< SEARCH\n=======\nNEW\n>>>>>>> REPLACE"
        result = strategy.apply("a\nb\nc", diff)

        assert not result.success
        assert "requires start_line to be specified" in result.error

    def test_invalid_range(self, strategy):
        result = strategy.apply("a\nb\nc", _block("b", "B"), start_line=10, end_line=12)

        assert not result.success
        assert "Line range 10-12 is invalid" in result.error

    def test_reversed_range(self, strategy):
        result = strategy.apply("a\nb\nc", _block("b", "B"), start_line=3, end_line=2)
        assert not result.success


class TestFailures:
    def test_missing_separator(self, strategy):
        result = strategy.apply("a\nb", "<<<<<<< SEARCH\nb\n>>>>>>> REPLACE")

        assert not result.success
        assert "SEARCH/REPLACE sections" in result.error

    def test_no_match_reports_best_candidate(self, strategy):
        result = strategy.apply("a\nb\nc", _block("b2", "B"))

        assert not result.success
        assert "50% similar, needs 100%" in result.error
        assert "Search Range: start to end" in result.error
        assert "Best Match Found: lines 2-2" in result.error

        details = result.details
        assert details.similarity == 0.5
        assert details.threshold == 1.0
        assert details.matched_range.start == 2
        assert details.matched_range.end == 2
        assert details.best_match == "b"
        assert details.search_content == "b2"

    def test_near_miss_in_large_file_is_fast(self, strategy):
        lines = [f"result_{i:04d} = process_item(items[{i}], mode='fast')" for i in range(2000)]
        search = lines[1200:1208]
        search[3] = search[3].replace("process_item", "proces_item")

        started = time.perf_counter()
        result = strategy.apply("\n".join(lines), _block("\n".join(search), "pass"))
        elapsed = time.perf_counter() - started

        assert not result.success
        assert result.details.matched_range.start == 1201
        assert result.details.similarity > 0.99
        assert elapsed < 10

    def test_no_match_with_hints_mentions_range(self, strategy):
        result = strategy.apply("a\nb\nc", _block("zzz", "B"), start_line=1, end_line=2)

        assert not result.success
        assert "Search Range: lines 1-2" in result.error

    def test_failure_serializes(self, strategy):
        result = strategy.apply("a\nb\nc", _block("b2", "B"))
        data = result.to_dict()

        assert data["success"] is False
        assert data["details"]["matched_range"] == {"start": 2, "end": 2}


class TestDescribe:
    def test_mentions_cwd_and_format(self, strategy):
        text = strategy.describe(ToolArgs(cwd="/work/project"))

        assert "/work/project" in text
        assert "<<<<<<< SEARCH" in text
        assert ">>>>>>> REPLACE" in text
        assert "start_line" in text

    def test_repr(self):
        assert "fuzzy_threshold=0.9" in repr(SearchReplaceDiffStrategy(0.9))
