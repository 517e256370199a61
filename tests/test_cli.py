"""Tests for the patchwise command line."""

import json

import pytest

from patchwise.cli import main


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A scratch project with logs and metrics kept inside it."""
    for key in ("PATCHWISE_DIFF_STRATEGY", "PATCHWISE_FUZZY_MATCH_THRESHOLD",
                "PATCHWISE_RECORD_METRICS"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("PATCHWISE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PATCHWISE_METRICS_DIR", str(tmp_path / "metrics"))
    monkeypatch.chdir(tmp_path)

    target = tmp_path / "app.py"
    target.write_text("def f():\n    return 1\n")
    return tmp_path


def _write_diff(workspace, text, name="change.diff"):
    path = workspace / name
    path.write_text(text)
    return str(path)


SEARCH_REPLACE = "<<<<<<< SEARCH\n    return 1\n=======\n    return 2\n>>>>>>> REPLACE\n"


class TestApply:
    def test_apply_writes_file(self, workspace, capsys):
        diff = _write_diff(workspace, SEARCH_REPLACE)
        code = main(["apply", "app.py", diff, "--yes"])

        assert code == 0
        assert (workspace / "app.py").read_text() == "def f():\n    return 2\n"
        assert "Applied diff to app.py" in capsys.readouterr().out

    def test_dry_run_leaves_file(self, workspace, capsys):
        diff = _write_diff(workspace, SEARCH_REPLACE)
        code = main(["apply", "app.py", diff, "--dry-run"])

        assert code == 0
        assert (workspace / "app.py").read_text() == "def f():\n    return 1\n"
        assert "return 2" in capsys.readouterr().out

    def test_failure_exit_code(self, workspace, capsys):
        diff = _write_diff(
            workspace,
            "<<<<<<< SEARCH\n    return 42\n=======\n    return 2\n>>>>>>> REPLACE\n",
        )
        code = main(["apply", "app.py", diff, "--yes"])

        assert code == 1
        assert (workspace / "app.py").read_text() == "def f():\n    return 1\n"
        assert "No sufficiently similar match found" in capsys.readouterr().err

    def test_new_unified_strategy(self, workspace):
        diff = _write_diff(
            workspace,
            "@@ @@\n def f():\n-    return 1\n+    return 3\n",
        )
        code = main(["apply", "app.py", diff, "--strategy", "new_unified", "--yes"])

        assert code == 0
        assert (workspace / "app.py").read_text() == "def f():\n    return 3\n"

    def test_metrics_recorded(self, workspace):
        diff = _write_diff(workspace, SEARCH_REPLACE)
        main(["apply", "app.py", diff, "--yes"])

        with open(workspace / "metrics" / "edit_metrics.jsonl") as f:
            entry = json.loads(f.readline())
        assert entry["file"] == "app.py"
        assert entry["strategy"] == "search_replace"
        assert entry["success"] is True

    def test_invalid_threshold(self, workspace, capsys):
        diff = _write_diff(workspace, SEARCH_REPLACE)
        code = main(["apply", "app.py", diff, "--threshold", "2"])

        assert code == 1
        assert "threshold must be between 0 and 1" in capsys.readouterr().err

    def test_missing_file(self, workspace, capsys):
        diff = _write_diff(workspace, SEARCH_REPLACE)
        code = main(["apply", "missing.py", diff, "--yes"])

        assert code == 1
        assert "Error:" in capsys.readouterr().err


class TestOtherCommands:
    def test_describe(self, workspace, capsys):
        code = main(["describe", "--strategy", "new_unified", "--cwd", "/work"])

        assert code == 0
        assert "File path relative to /work" in capsys.readouterr().out

    def test_stats(self, workspace, capsys):
        diff = _write_diff(workspace, SEARCH_REPLACE)
        main(["apply", "app.py", diff, "--yes"])
        capsys.readouterr()

        code = main(["stats"])
        out = capsys.readouterr().out

        assert code == 0
        assert "Edits recorded:        1" in out
        assert "100.0%" in out
