"""Tests for line splitting and Levenshtein-based similarity."""

import pytest

from patchwise.editing.text_utils import (
    levenshtein_distance,
    normalize_whitespace,
    normalized_levenshtein,
    similarity_upper_bound,
    split_lines,
    whitespace_similarity,
)


PAIRS = [
    ("", ""),
    ("", "abc"),
    ("kitten", "sitting"),
    ("flaw", "lawn"),
    ("def foo():\n    return 1", "def foo():\n    return 2"),
    ("same", "same"),
    ("    indented", "indented"),
]


class TestSplitLines:
    def test_trailing_newline_is_dropped(self):
        assert split_lines("a\nb\n") == ["a", "b"]
        assert split_lines("a\nb") == ["a", "b"]

    def test_empty_text(self):
        assert split_lines("") == []

    def test_blank_lines_are_kept(self):
        assert split_lines("a\n\nb") == ["a", "", "b"]
        assert split_lines("\n") == [""]

    def test_carriage_returns_are_stripped(self):
        assert split_lines("a\r\nb\r\n") == ["a", "b"]


class TestLevenshtein:
    def test_known_distances(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("flaw", "lawn") == 2
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "abc") == 0

    def test_max_distance_stops_early(self):
        assert levenshtein_distance("kitten", "sitting", max_distance=1) == 2
        assert levenshtein_distance("kitten", "sitting", max_distance=3) == 3

    def test_normalized_identical_and_empty(self):
        assert normalized_levenshtein("", "") == 1.0
        assert normalized_levenshtein("abc", "abc") == 1.0

    def test_normalized_value(self):
        assert normalized_levenshtein("abc", "abd") == pytest.approx(2 / 3)

    @pytest.mark.parametrize("a,b", PAIRS)
    def test_symmetric_and_bounded(self, a, b):
        forward = normalized_levenshtein(a, b)
        assert forward == normalized_levenshtein(b, a)
        assert 0.0 <= forward <= 1.0

    @pytest.mark.parametrize("a,b", PAIRS)
    def test_upper_bound_holds(self, a, b):
        assert similarity_upper_bound(a, b) >= normalized_levenshtein(a, b)

    def test_score_cutoff(self):
        a = "def foo():\n    return 1"
        b = "def foo():\n    return 2"
        exact = normalized_levenshtein(a, b)
        assert normalized_levenshtein(a, b, score_cutoff=exact) == pytest.approx(exact)
        assert normalized_levenshtein(a, b, score_cutoff=1.0) == 0.0

    def test_score_cutoff_accepts_boundary(self):
        # 9 of 10 characters match: exactly 0.9
        assert normalized_levenshtein(
            "abcdefghij", "abcdefghiX", score_cutoff=0.9,
        ) == pytest.approx(0.9)


class TestWhitespaceSimilarity:
    def test_normalize_whitespace(self):
        assert normalize_whitespace("  foo \t  bar\n\n") == "foo bar"

    def test_whitespace_runs_are_ignored(self):
        assert whitespace_similarity("def f():\n    return 1", "def f():  return 1") == 1.0

    def test_empty_search_matches_anything(self):
        assert whitespace_similarity("anything", "") == 1.0

    def test_different_content(self):
        score = whitespace_similarity("return 1", "return 2")
        assert 0.0 < score < 1.0
