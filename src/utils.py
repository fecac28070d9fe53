"""Shared utilities for apisniff."""

from __future__ import annotations

import os
from pathlib import Path

CLASS_SUFFIX = ".class"


def canonical_path(path: str | Path) -> str:
    """Return the canonical identity of a filesystem artifact.

    Symlinks are resolved, separators normalized to ``/`` and, on
    case-insensitive platforms, the case is folded. Two paths naming the same
    artifact yield the same key.

    Examples:
        >>> canonical_path("/tmp/../tmp/lib.jar") == canonical_path("/tmp/lib.jar")
        True
    """
    resolved = Path(path).expanduser().resolve(strict=False)
    return os.path.normcase(str(resolved)).replace("\\", "/")


def entry_to_class_name(entry: str) -> str | None:
    """Convert a jar entry or relative class file path to a class name.

    Args:
        entry: Entry name (e.g., "com/acme/Foo.class" or "com\\acme\\Foo$Bar.class")

    Returns:
        Binary class name with dots (e.g., "com.acme.Foo$Bar"), or None for
        entries that are not classes or are module/package descriptors.

    Examples:
        >>> entry_to_class_name("com/acme/Foo.class")
        'com.acme.Foo'
        >>> entry_to_class_name("META-INF/MANIFEST.MF") is None
        True
        >>> entry_to_class_name("module-info.class") is None
        True
    """
    normalized = entry.replace("\\", "/").lstrip("/")
    if not normalized.endswith(CLASS_SUFFIX):
        return None

    # Multi-release jars keep versioned copies under META-INF/versions/<n>/.
    parts = [part for part in normalized[: -len(CLASS_SUFFIX)].split("/") if part]
    if len(parts) > 3 and parts[0] == "META-INF" and parts[1] == "versions":
        parts = parts[3:]
    if not parts or parts[0] == "META-INF":
        return None
    if parts[-1] in {"module-info", "package-info"}:
        return None

    return ".".join(parts)


def package_of(class_name: str) -> str:
    """Return the package part of a class name ('' for the default package)."""
    head, _, _ = class_name.rpartition(".")
    return head


__all__ = ["CLASS_SUFFIX", "canonical_path", "entry_to_class_name", "package_of"]
