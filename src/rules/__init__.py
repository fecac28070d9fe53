"""Configuration and pattern rules for apisniff.

Exports are resolved lazily: ``rules.config`` depends on ``check.models``,
which itself imports ``rules.patterns``.
"""

from __future__ import annotations


def __getattr__(name: str) -> object:
    if name in {"ApiSniffConfig", "ConfigError", "load_config", "unit_check_configs"}:
        from rules import config

        return getattr(config, name)

    if name in {"matches_class", "matches_file", "validate_pattern"}:
        from rules import patterns

        return getattr(patterns, name)

    msg = f"module 'rules' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ApiSniffConfig",
    "ConfigError",
    "load_config",
    "matches_class",
    "matches_file",
    "unit_check_configs",
    "validate_pattern",
]
