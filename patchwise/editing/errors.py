"""
Exception types used across patchwise.

Bad diff input never raises; these cover environment and configuration
failures that a single call cannot work around.
"""

from __future__ import annotations


class PatchwiseError(Exception):
    """Base class for all patchwise specific errors."""


class MergeEnvironmentError(PatchwiseError):
    """Raised when the merge backend cannot obtain its scratch directory."""


class ConfigError(PatchwiseError):
    """Raised when configuration values are invalid."""
