"""Error taxonomy for apisniff.

Violations are results, not errors: they never surface as exceptions. The
classes below cover conditions that abort a single compilation unit.
"""

from __future__ import annotations


class ApiSniffError(Exception):
    """Base class for all apisniff failures."""


class ConfigError(ApiSniffError):
    """Raised when configuration cannot be parsed or contains invalid patterns."""


class ResolutionError(ApiSniffError):
    """Raised when a declared signature cannot be resolved or read."""


class EngineError(ApiSniffError):
    """Raised when the checking engine fails or produces unparseable output."""


__all__ = ["ApiSniffError", "ConfigError", "EngineError", "ResolutionError"]
