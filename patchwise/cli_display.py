import logging
import os
import sys
from datetime import datetime


def setup_logger(log_dir: str = ".patchwise/logs",
                 verbose: bool = False) -> logging.Logger:
    """Creates a file logger. All verbose output goes here.

    With *verbose*, DEBUG records are echoed to stderr as well.
    """
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"patchwise_{timestamp}.log")

    logger = logging.getLogger("patchwise")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # File handler — captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    if verbose:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(logging.DEBUG)
        sh.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(sh)

    return logger


def print_failure(error: str) -> None:
    """Show an apply failure, verbatim, on stderr."""
    print(f"\033[31m✘ Diff could not be applied\033[0m\n\n{error}", file=sys.stderr)


def print_success(path: str, written: bool) -> None:
    if written:
        print(f"\033[32m✔ Applied diff to {path}\033[0m")
    else:
        print(f"  Changes to {path} not written.")
