from __future__ import annotations

import json
import logging
import zipfile
from collections.abc import Callable, Iterable, Iterator, Mapping
from pathlib import Path

import pytest

MakeJar = Callable[[Path, Iterable[str]], Path]
WriteSignature = Callable[[Path, Iterable[Mapping[str, object]]], Path]
MakeClasses = Callable[..., Path]

CLASS_BYTES = b"\xca\xfe\xba\xbe\x00\x00\x00\x34"


def _class_entry(class_name: str) -> str:
    return class_name.replace(".", "/") + ".class"


def _make_jar(path: Path, classes: Iterable[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        for class_name in classes:
            zf.writestr(_class_entry(class_name), CLASS_BYTES)
    return path


def _write_signature(path: Path, records: Iterable[Mapping[str, object]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [json.dumps(dict(record), sort_keys=True) for record in records]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _make_classes(
    directory: Path,
    classes: Iterable[str],
    refs: Iterable[Mapping[str, object]] = (),
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for class_name in classes:
        class_file = directory / _class_entry(class_name)
        class_file.parent.mkdir(parents=True, exist_ok=True)
        class_file.write_bytes(CLASS_BYTES)
    ref_lines = [json.dumps(dict(ref), sort_keys=True) for ref in refs]
    if ref_lines:
        (directory / "classes.refs.jsonl").write_text(
            "\n".join(ref_lines) + "\n", encoding="utf-8"
        )
    return directory


@pytest.fixture
def make_jar() -> MakeJar:
    """Create a jar containing empty class entries for the given class names."""
    return _make_jar


@pytest.fixture
def write_signature() -> WriteSignature:
    """Write a header-less JSONL signature."""
    return _write_signature


@pytest.fixture
def make_classes() -> MakeClasses:
    """Create a compiled-classes dir with class files and a reference index."""
    return _make_classes


@pytest.fixture(autouse=True)
def _reset_apisniff_logging() -> Iterator[None]:
    """Drop handlers bound to a previous test's captured stderr."""
    yield
    logger = logging.getLogger("apisniff")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
