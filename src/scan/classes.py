"""Classpath entry scanning: class listings for jars and class directories."""

from __future__ import annotations

import zipfile
from typing import TYPE_CHECKING

from errors import ResolutionError
from logs import get_logger
from utils import CLASS_SUFFIX, entry_to_class_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

logger = get_logger("scan")

ARCHIVE_SUFFIXES = frozenset({".jar", ".zip"})


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def find_files(directory: Path, suffix: str) -> Iterator[Path]:
    """Find regular files with the given suffix under a directory.

    Symlinks escaping the directory are skipped.

    Yields:
        Paths sorted lexicographically by relative POSIX path for
        deterministic ordering.
    """
    if not directory.is_dir():
        return

    matched_files = [
        path
        for path in directory.rglob(f"*{suffix}")
        if path.is_file() and _is_within_root(path, directory)
    ]
    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


def _list_archive_classes(archive: Path) -> list[str]:
    try:
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
    except (OSError, zipfile.BadZipFile) as exc:
        msg = f"Cannot read classpath archive {archive}: {exc}"
        raise ResolutionError(msg) from exc

    classes = {
        class_name
        for class_name in (entry_to_class_name(name) for name in names)
        if class_name is not None
    }
    return sorted(classes)


def _list_directory_classes(directory: Path) -> list[str]:
    classes = {
        class_name
        for class_name in (
            entry_to_class_name(path.relative_to(directory).as_posix())
            for path in find_files(directory, CLASS_SUFFIX)
        )
        if class_name is not None
    }
    return sorted(classes)


def list_classes(entry: Path) -> list[str]:
    """List binary class names provided by one classpath entry.

    Missing entries and non-archive files contribute nothing (resolved
    classpaths routinely contain not-yet-created output dirs).

    Raises:
        ResolutionError: If a jar/zip entry exists but cannot be read.
    """
    if entry.is_dir():
        return _list_directory_classes(entry)
    if entry.is_file():
        if entry.suffix.lower() in ARCHIVE_SUFFIXES:
            return _list_archive_classes(entry)
        logger.debug("Skipping non-archive classpath entry %s", entry)
        return []
    logger.debug("Skipping missing classpath entry %s", entry)
    return []


def has_sources(directories: Iterable[Path]) -> bool:
    """Return True when any compiled-output directory contains a file."""
    for directory in directories:
        if not directory.is_dir():
            continue
        if any(path.is_file() for path in directory.rglob("*")):
            return True
    return False


__all__ = ["ARCHIVE_SUFFIXES", "find_files", "has_sources", "list_classes"]
