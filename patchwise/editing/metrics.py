"""
Edit metrics — records diff-apply outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".patchwise/metrics"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(project_root: str | None = None,
                  metrics_dir: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir or _METRICS_DIR, _METRICS_FILE)


def log_edit_metric(
    data: dict,
    project_root: str | None = None,
    metrics_dir: str | None = None,
) -> None:
    """Append a single apply outcome to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (file, strategy, success, similarity, ...).
    project_root:
        Optional project root directory. Defaults to CWD.
    metrics_dir:
        Directory under the project root holding the log.
    """
    path = _metrics_path(project_root, metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[DiffEdit] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_edits``, ``success_rate`` (percent),
        ``avg_failure_similarity`` over failed edits that reported one,
        and ``strategy_usage`` (percent per strategy).
    """
    path = _metrics_path(project_root, metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[DiffEdit] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "avg_failure_similarity": 0.0,
            "strategy_usage": {},
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("success", False))
    failure_similarities = [
        e["similarity"] for e in entries
        if not e.get("success", False) and e.get("similarity") is not None
    ]
    strategies = Counter(e.get("strategy", "unknown") for e in entries)

    return {
        "total_edits": total,
        "success_rate": successes / total * 100,
        "avg_failure_similarity": (
            sum(failure_similarities) / len(failure_similarities)
            if failure_similarities else 0.0
        ),
        "strategy_usage": {
            strategy: count / total * 100
            for strategy, count in strategies.most_common()
        },
    }
