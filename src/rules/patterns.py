"""File and class pattern validation and matching."""

from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def validate_pattern(pattern: str) -> str:
    """Reject patterns that cannot be matched meaningfully.

    Raises:
        ValueError: If the pattern is empty or has an unterminated ``[`` set.
    """
    if not isinstance(pattern, str) or not pattern.strip():
        msg = "pattern must be a non-empty string"
        raise ValueError(msg)

    depth = 0
    for char in pattern:
        if char == "[":
            if depth:
                msg = f"Malformed pattern {pattern!r}: nested '['"
                raise ValueError(msg)
            depth = 1
        elif char == "]" and depth:
            depth = 0
    if depth:
        msg = f"Malformed pattern {pattern!r}: unterminated '['"
        raise ValueError(msg)

    return pattern.strip()


def validate_patterns(patterns: Iterable[str]) -> list[str]:
    return [validate_pattern(pattern) for pattern in patterns]


def matches_file(path: str | PurePath, patterns: Iterable[str]) -> bool:
    """Check a classpath entry against exclude patterns.

    A pattern matches either the entry's file name (``*-lib2.jar``) or its
    full POSIX path (``*/libs/legacy/*``).
    """
    pure = PurePath(path)
    name = pure.name
    posix = pure.as_posix()
    return any(fnmatchcase(name, pat) or fnmatchcase(posix, pat) for pat in patterns)


def matches_class(class_name: str, patterns: Iterable[str]) -> bool:
    """Check a binary class name against class patterns.

    ``com.pkg.*`` covers the whole package including subpackages; nested
    classes (``Outer$Inner``) match their outer class pattern as well.
    """
    outer = class_name.split("$", 1)[0]
    for pattern in patterns:
        if fnmatchcase(class_name, pattern) or fnmatchcase(outer, pattern):
            return True
    return False


__all__ = ["matches_class", "matches_file", "validate_pattern", "validate_patterns"]
