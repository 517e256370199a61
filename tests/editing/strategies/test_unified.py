"""Tests for the strict unified diff strategy."""

import pytest

from patchwise.editing.strategies import UnifiedDiffStrategy
from patchwise.editing.types import ToolArgs


@pytest.fixture
def strategy():
    return UnifiedDiffStrategy()


def _patch(*body):
    return "--- a/file.txt\n+++ b/file.txt\n" + "".join(line + "\n" for line in body)


class TestApply:
    def test_replace_line(self, strategy):
        result = strategy.apply("a\nb\nc\n", _patch("@@ -1,3 +1,3 @@", " a", "-b", "+B", " c"))

        assert result.success
        assert result.content == "a\nB\nc\n"

    def test_insert_after_line(self, strategy):
        result = strategy.apply("a\nb\n", _patch("@@ -1,0 +2,1 @@", "+x"))
        assert result.content == "a\nx\nb\n"

    def test_two_hunks(self, strategy):
        original = "".join(f"{i}\n" for i in range(1, 11))
        result = strategy.apply(original, _patch(
            "@@ -1,2 +1,2 @@", "-1", "+one", " 2",
            "@@ -9,2 +9,2 @@", " 9", "-10", "+ten",
        ))

        assert result.success
        lines = result.content.splitlines()
        assert lines[0] == "one"
        assert lines[-1] == "ten"
        assert len(lines) == 10


class TestEndOfFile:
    def test_append_after_unterminated_last_line(self, strategy):
        result = strategy.apply("a\nb", _patch("@@ -1,2 +1,3 @@", " a", " b", "+c"))

        assert result.success
        assert result.content == "a\nb\nc\n"

    def test_no_newline_marker_on_new_side(self, strategy):
        result = strategy.apply("a\nb", _patch(
            "@@ -1,2 +1,3 @@", " a", " b", "+c", "\\ No newline at end of file",
        ))

        assert result.content == "a\nb\nc"

    def test_no_newline_marker_on_old_side_only(self, strategy):
        result = strategy.apply("a\nb", _patch(
            "@@ -1,2 +1,2 @@", " a", "-b", "\\ No newline at end of file", "+B",
        ))

        assert result.content == "a\nB\n"

    def test_untouched_unterminated_tail_kept(self, strategy):
        result = strategy.apply("a\nb\nc", _patch("@@ -1,1 +1,1 @@", "-a", "+A"))
        assert result.content == "A\nb\nc"


class TestFailures:
    def test_context_mismatch(self, strategy):
        result = strategy.apply("a\nb\nc\n", _patch("@@ -1,3 +1,3 @@", " a", "-x", "+B", " c"))

        assert not result.success
        assert result.error.startswith("Failed to apply unified diff")
        assert "line 2 does not match" in result.error

    def test_past_end_of_file(self, strategy):
        result = strategy.apply("a\n", _patch("@@ -5,1 +5,1 @@", "-e", "+E"))
        assert not result.success

    def test_not_a_diff(self, strategy):
        result = strategy.apply("a\n", "not a diff\n")

        assert not result.success
        assert result.error.startswith("Failed to parse unified diff")

    def test_multiple_files_rejected(self, strategy):
        diff = _patch("@@ -1 +1 @@", "-a", "+b") + (
            "--- a/other.txt\n+++ b/other.txt\n@@ -1 +1 @@\n-c\n+d\n"
        )
        result = strategy.apply("a\n", diff)

        assert not result.success
        assert "found 2" in result.error


class TestDescribe:
    def test_mentions_headers(self, strategy):
        text = strategy.describe(ToolArgs(cwd="/repo"))

        assert "/repo" in text
        assert "--- path/to/original/file" in text
        assert "@@ -lineStart,lineCount +lineStart,lineCount @@" in text
