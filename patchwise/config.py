"""
Configuration — loads settings from .patchwise.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

from __future__ import annotations

import os

import yaml

from .editing.errors import ConfigError
from .editing.merge import GitMergeBackend
from .editing.settings import MatchSettings
from .editing.strategies import STRATEGY_NAMES, DiffStrategy, get_diff_strategy


_DEFAULTS = {
    "diff_strategy": "search_replace",
    "fuzzy_match_threshold": 1.0,
    "buffer_lines": 20,
    "git_binary": "git",
    "log_dir": ".patchwise/logs",
    "metrics_dir": ".patchwise/metrics",
    "record_metrics": True,
    "matching": {},
}

# Config file search locations
_CONFIG_FILENAMES = [".patchwise.yaml", ".patchwise.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file; a missing or non-mapping document yields ``{}``."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError:
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    return data if isinstance(data, dict) else {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .patchwise.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return self._cast(env_key, env_val, cast)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return self._cast(yaml_key, yaml_val, cast)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.DIFF_STRATEGY = _get("PATCHWISE_DIFF_STRATEGY", "diff_strategy",
                                  _DEFAULTS["diff_strategy"])
        self.FUZZY_MATCH_THRESHOLD = _get("PATCHWISE_FUZZY_MATCH_THRESHOLD",
                                          "fuzzy_match_threshold",
                                          _DEFAULTS["fuzzy_match_threshold"],
                                          cast=float)
        self.BUFFER_LINES = _get("PATCHWISE_BUFFER_LINES", "buffer_lines",
                                 _DEFAULTS["buffer_lines"], cast=int)
        self.GIT_BINARY = _get("PATCHWISE_GIT_BINARY", "git_binary",
                               _DEFAULTS["git_binary"])

        self.LOG_DIR = _get("PATCHWISE_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])
        self.METRICS_DIR = _get("PATCHWISE_METRICS_DIR", "metrics_dir",
                                _DEFAULTS["metrics_dir"])
        self.RECORD_METRICS = _get_bool("PATCHWISE_RECORD_METRICS",
                                        "record_metrics",
                                        _DEFAULTS["record_metrics"])

        # Search/edit engine tunables
        matching = yd.get("matching", _DEFAULTS["matching"])
        self.MATCHING: dict = matching if isinstance(matching, dict) else {}

        self.validate()

    @staticmethod
    def _cast(key: str, value, cast):
        try:
            return cast(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid value for {key}: {value!r}") from exc

    def validate(self) -> None:
        """Raise ``ConfigError`` for out-of-range or unknown settings."""
        if self.DIFF_STRATEGY not in STRATEGY_NAMES:
            raise ConfigError(
                f"Unknown diff_strategy {self.DIFF_STRATEGY!r} "
                f"(expected one of {', '.join(STRATEGY_NAMES)})"
            )
        if not 0.0 <= self.FUZZY_MATCH_THRESHOLD <= 1.0:
            raise ConfigError(
                f"fuzzy_match_threshold must be between 0 and 1, "
                f"got {self.FUZZY_MATCH_THRESHOLD}"
            )
        if self.BUFFER_LINES < 0:
            raise ConfigError(f"buffer_lines must be >= 0, got {self.BUFFER_LINES}")

    def match_settings(self) -> MatchSettings:
        """Engine tunables from the ``matching:`` section."""
        try:
            return MatchSettings.from_mapping(self.MATCHING)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid matching settings: {exc}") from exc

    def build_strategy(
        self,
        name: str | None = None,
        fuzzy_match_threshold: float | None = None,
    ) -> DiffStrategy:
        """Build the configured diff strategy, with optional CLI overrides."""
        if fuzzy_match_threshold is not None and not 0.0 <= fuzzy_match_threshold <= 1.0:
            raise ConfigError(
                f"threshold must be between 0 and 1, got {fuzzy_match_threshold}"
            )
        return get_diff_strategy(
            name or self.DIFF_STRATEGY,
            fuzzy_match_threshold if fuzzy_match_threshold is not None
            else self.FUZZY_MATCH_THRESHOLD,
            settings=self.match_settings(),
            buffer_lines=self.BUFFER_LINES,
            merge_backend=GitMergeBackend(self.GIT_BINARY),
        )

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
