"""Classpath partitioning into module (live) and external (cacheable) entries."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from rules.patterns import matches_file

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from classpath.artifacts import ArtifactSet

Classpath = tuple["Path", ...]


class Partition(NamedTuple):
    """Order-preserving split of a classpath.

    ``modules`` holds entries produced by the build itself (volatile, checked
    live on every run); ``external`` holds third-party entries that may be
    folded into the cached signature.
    """

    modules: Classpath
    external: Classpath


def partition(classpath: Sequence[Path], artifacts: ArtifactSet) -> Partition:
    """Split classpath entries by membership in the module artifact set.

    Membership compares canonical paths. Relative order within each subset
    follows the input; duplicates are neither removed nor introduced.
    """
    entries = tuple(classpath)
    if not artifacts:
        return Partition(modules=(), external=entries)

    modules: list[Path] = []
    external: list[Path] = []
    for entry in entries:
        if entry in artifacts:
            modules.append(entry)
        else:
            external.append(entry)
    return Partition(modules=tuple(modules), external=tuple(external))


def apply_excludes(
    classpath: Sequence[Path], patterns: Sequence[str]
) -> Sequence[Path]:
    """Drop classpath entries matching any exclude pattern.

    Returns the input object itself when no patterns are configured.
    """
    if not patterns:
        return classpath
    return tuple(entry for entry in classpath if not matches_file(entry, patterns))


__all__ = ["Classpath", "Partition", "apply_excludes", "partition"]
