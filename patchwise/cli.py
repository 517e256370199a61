"""
CLI entry point — argument parsing and the apply/describe/stats commands.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from .cli_display import print_failure, print_success, setup_logger
from .config import Config
from .diff_display import compute_diff, format_colored_diff, prompt_diff_approval
from .editing.errors import PatchwiseError
from .editing.metrics import log_edit_metric, read_edit_stats
from .editing.strategies import STRATEGY_NAMES
from .editing.types import ToolArgs

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchwise",
        description="Apply LLM-proposed diffs to files, even when they have drifted",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .patchwise.yaml config file")
    parser.add_argument("--verbose", action="store_true",
                        help="Echo debug logging to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    apply_p = sub.add_parser("apply", help="Apply a diff to a file")
    apply_p.add_argument("file", help="File to modify")
    apply_p.add_argument("diff", help="File holding the diff ('-' for stdin)")
    apply_p.add_argument("--strategy", choices=STRATEGY_NAMES, default=None,
                         help="Diff dialect (default: from config)")
    apply_p.add_argument("--threshold", type=float, default=None,
                         help="Confidence threshold between 0 and 1 "
                              "(default: from config)")
    apply_p.add_argument("--start-line", type=int, default=None,
                         help="1-based first line of the targeted region")
    apply_p.add_argument("--end-line", type=int, default=None,
                         help="1-based last line of the targeted region")
    apply_p.add_argument("--dry-run", action="store_true",
                         help="Show the resulting diff without writing")
    apply_p.add_argument("--yes", action="store_true",
                         help="Write without asking for approval")
    apply_p.add_argument("--no-tui", action="store_true",
                         help="Ask for approval on the console instead of "
                              "the interactive viewer")

    describe_p = sub.add_parser("describe", help="Print the tool usage text")
    describe_p.add_argument("--strategy", choices=STRATEGY_NAMES, default=None)
    describe_p.add_argument("--cwd", default=None,
                            help="Working directory shown in the text")

    stats_p = sub.add_parser("stats", help="Show recent edit metrics")
    stats_p.add_argument("--last", type=int, default=50,
                         help="Number of recent entries to include")

    return parser


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _safe_write(file_path: str, content: str) -> None:
    """Write content to file atomically via temp file + rename."""
    abs_path = os.path.abspath(file_path)
    tmp_path = abs_path + ".patchwise_tmp"

    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_path, abs_path)
    except OSError:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def _keep_trailing_newline(original: str, content: str) -> str:
    """Results are newline-joined; restore the file's final newline."""
    if original.endswith("\n") and content and not content.endswith("\n"):
        return content + "\n"
    return content


def _cmd_apply(args: argparse.Namespace, cfg: Config) -> int:
    strategy = cfg.build_strategy(args.strategy, args.threshold)
    original = _read_text(args.file)
    diff_text = _read_text(args.diff)

    logger.info("Applying %s diff to %s", strategy.name, args.file)
    result = strategy.apply(original, diff_text, args.start_line, args.end_line)

    if cfg.RECORD_METRICS:
        metric = {
            "file": args.file,
            "strategy": strategy.name,
            "success": result.success,
        }
        if result.details is not None:
            metric["similarity"] = result.details.similarity
        log_edit_metric(metric, metrics_dir=cfg.METRICS_DIR)

    if not result.success:
        logger.warning("Diff failed for %s:\n%s", args.file, result.error)
        print_failure(result.error)
        return 1

    new_content = _keep_trailing_newline(original, result.content)
    diff_preview = compute_diff(args.file, original, new_content)
    if diff_preview is None:
        print(f"  No changes to {args.file}.")
        return 0

    if args.dry_run:
        print(format_colored_diff(diff_preview))
        return 0

    approved = prompt_diff_approval(
        args.file, diff_preview, auto=args.yes, use_tui=not args.no_tui,
    )
    if approved:
        _safe_write(args.file, new_content)
        logger.info("Wrote %s", args.file)
    print_success(args.file, approved)
    return 0 if approved else 2


def _cmd_describe(args: argparse.Namespace, cfg: Config) -> int:
    strategy = cfg.build_strategy(args.strategy)
    print(strategy.describe(ToolArgs(cwd=args.cwd or os.getcwd())))
    return 0


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> int:
    stats = read_edit_stats(last_n=args.last, metrics_dir=cfg.METRICS_DIR)
    print(f"  Edits recorded:        {stats['total_edits']}")
    print(f"  Success rate:          {stats['success_rate']:.1f}%")
    print(f"  Avg failed similarity: {stats['avg_failure_similarity']:.2f}")
    for name, pct in stats["strategy_usage"].items():
        print(f"  {name:<22} {pct:.1f}%")
    return 0


_COMMANDS = {
    "apply": _cmd_apply,
    "describe": _cmd_describe,
    "stats": _cmd_stats,
}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = Config.load(args.config)
        setup_logger(cfg.LOG_DIR, verbose=args.verbose)
        return _COMMANDS[args.command](args, cfg)
    except (PatchwiseError, OSError) as exc:
        logger.error("patchwise %s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
