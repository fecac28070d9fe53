from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from check.engine import ClasspathScan, SymbolIndexEngine
from errors import ResolutionError
from signatures.builder import SignatureCacheBuilder, build_signature_file
from signatures.store import read_signature

if TYPE_CHECKING:
    from collections.abc import Sequence

    from conftest import MakeJar, WriteSignature


class _CountingEngine(SymbolIndexEngine):
    def __init__(self) -> None:
        self.scans = 0
        self.builds: list[tuple[str, ...]] = []

    def scan_classpath(self, classpath: Sequence[Path]) -> ClasspathScan:
        self.scans += 1
        return super().scan_classpath(classpath)

    def build_signature(
        self,
        *,
        signatures: Sequence[Path],
        scan: ClasspathScan,
        exclude_classes: Sequence[str],
        output: Path,
        include_classes: Sequence[str] = (),
    ) -> None:
        self.builds.append(tuple(path.name for path in signatures))
        super().build_signature(
            signatures=signatures,
            scan=scan,
            exclude_classes=exclude_classes,
            output=output,
            include_classes=include_classes,
        )


def _signatures(
    tmp_path: Path, write_signature: WriteSignature
) -> tuple[Path, Path]:
    s1 = write_signature(
        tmp_path / "sigs" / "java16.sig.jsonl",
        [
            {"symbol": "java.lang.Boolean", "kind": "class"},
            {"symbol": "java.lang.Boolean#compare(ZZ)I", "kind": "member"},
        ],
    )
    s2 = write_signature(
        tmp_path / "sigs" / "java15.sig.jsonl",
        [{"symbol": "java.lang.Boolean", "kind": "class"}],
    )
    return s1, s2


def test_build_cache_is_byte_for_byte_deterministic(
    tmp_path: Path, write_signature: WriteSignature, make_jar: MakeJar
) -> None:
    s1, s2 = _signatures(tmp_path, write_signature)
    lib1 = make_jar(tmp_path / "libs" / "lib1.jar", ["org.lib.Util", "org.lib.Api"])
    builder_a = SignatureCacheBuilder(SymbolIndexEngine(), tmp_path / "cache-a")
    builder_b = SignatureCacheBuilder(SymbolIndexEngine(), tmp_path / "cache-b")

    first = builder_a.build_cache("main", [s1, s2], [lib1])
    second = builder_b.build_cache("main", [s1, s2], [lib1])

    assert first is not None and second is not None
    assert first.paths == (tmp_path / "cache-a" / "main.sig.jsonl",)
    assert first.paths[0].read_bytes() == second.paths[0].read_bytes()


def test_build_cache_changes_when_jar_excluded(
    tmp_path: Path, write_signature: WriteSignature, make_jar: MakeJar
) -> None:
    s1, _ = _signatures(tmp_path, write_signature)
    lib1 = make_jar(tmp_path / "libs" / "lib1.jar", ["org.lib.Util"])
    lib2 = make_jar(tmp_path / "libs" / "lib2.jar", ["org.other.Thing"])
    builder = SignatureCacheBuilder(SymbolIndexEngine(), tmp_path / "cache")

    full = builder.build_cache("full", [s1], [lib1, lib2])
    filtered = builder.build_cache("filtered", [s1], [lib1])

    assert full is not None and filtered is not None
    assert full.paths[0].read_bytes() != filtered.paths[0].read_bytes()
    _, records = read_signature(filtered.paths[0])
    assert "org.other.Thing" not in {r.symbol for r in records}


def test_build_cache_without_signatures_builds_nothing(
    tmp_path: Path, make_jar: MakeJar
) -> None:
    engine = _CountingEngine()
    builder = SignatureCacheBuilder(engine, tmp_path / "cache")

    assert builder.build_cache("main", [], [make_jar(tmp_path / "a.jar", ["a.A"])]) is None
    assert engine.scans == 0
    assert not (tmp_path / "cache").exists()


def test_build_cache_unreadable_signature_keeps_previous_cache(
    tmp_path: Path, write_signature: WriteSignature, make_jar: MakeJar
) -> None:
    s1, _ = _signatures(tmp_path, write_signature)
    lib1 = make_jar(tmp_path / "libs" / "lib1.jar", ["org.lib.Util"])
    builder = SignatureCacheBuilder(SymbolIndexEngine(), tmp_path / "cache")
    artifact = builder.build_cache("main", [s1], [lib1])
    assert artifact is not None
    previous = artifact.paths[0].read_bytes()

    with pytest.raises(ResolutionError, match="Signature not found"):
        builder.build_cache("main", [s1, tmp_path / "sigs" / "missing.sig.jsonl"], [lib1])

    assert artifact.paths[0].read_bytes() == previous
    assert sorted(p.name for p in (tmp_path / "cache").iterdir()) == ["main.sig.jsonl"]


def test_build_cache_malformed_signature_leaves_no_partial_files(
    tmp_path: Path, write_signature: WriteSignature
) -> None:
    s1, _ = _signatures(tmp_path, write_signature)
    broken = tmp_path / "sigs" / "broken.sig.jsonl"
    broken.write_text("{oops\n", encoding="utf-8")
    builder = SignatureCacheBuilder(SymbolIndexEngine(), tmp_path / "cache")

    with pytest.raises(ResolutionError):
        builder.build_cache("main", [s1, broken], [], merge_signatures=False)

    assert list((tmp_path / "cache").iterdir()) == []


def test_build_cache_unmerged_reuses_single_classpath_scan(
    tmp_path: Path, write_signature: WriteSignature, make_jar: MakeJar
) -> None:
    s1, s2 = _signatures(tmp_path, write_signature)
    lib1 = make_jar(tmp_path / "libs" / "lib1.jar", ["org.lib.Util"])
    engine = _CountingEngine()
    builder = SignatureCacheBuilder(engine, tmp_path / "cache")

    artifact = builder.build_cache("main", [s1, s2], [lib1], merge_signatures=False)

    assert artifact is not None
    assert artifact.merged is False
    assert [p.name for p in artifact.paths] == ["main.1.sig.jsonl", "main.2.sig.jsonl"]
    assert engine.scans == 1
    assert engine.builds == [("java16.sig.jsonl",), ("java15.sig.jsonl",)]
    for path in artifact.paths:
        _, records = read_signature(path)
        assert "org.lib.Util" in {r.symbol for r in records}


def test_build_cache_replaces_artifacts_of_previous_layout(
    tmp_path: Path, write_signature: WriteSignature
) -> None:
    s1, s2 = _signatures(tmp_path, write_signature)
    cache_dir = tmp_path / "cache"
    builder = SignatureCacheBuilder(SymbolIndexEngine(), cache_dir)
    (cache_dir).mkdir()
    (cache_dir / "other.sig.jsonl").write_text("", encoding="utf-8")

    builder.build_cache("main", [s1, s2], [], merge_signatures=False)
    builder.build_cache("main", [s1, s2], [])

    assert sorted(p.name for p in cache_dir.iterdir()) == [
        "main.sig.jsonl",
        "other.sig.jsonl",
    ]


def test_build_cache_exclude_classes_removes_symbols(
    tmp_path: Path, write_signature: WriteSignature, make_jar: MakeJar
) -> None:
    s1, _ = _signatures(tmp_path, write_signature)
    lib1 = make_jar(tmp_path / "libs" / "lib1.jar", ["org.lib.Util", "org.lib.internal.Impl"])
    builder = SignatureCacheBuilder(SymbolIndexEngine(), tmp_path / "cache")

    artifact = builder.build_cache("main", [s1], [lib1], ["org.lib.internal.*"])

    assert artifact is not None
    _, records = read_signature(artifact.paths[0])
    symbols = {r.symbol for r in records}
    assert "org.lib.Util" in symbols
    assert "org.lib.internal.Impl" not in symbols
    assert "java.lang.Boolean#compare(ZZ)I" in symbols


def test_build_signature_file_applies_include_patterns(
    tmp_path: Path, write_signature: WriteSignature, make_jar: MakeJar
) -> None:
    s1, _ = _signatures(tmp_path, write_signature)
    lib = make_jar(tmp_path / "libs" / "lib.jar", ["org.lib.Util", "org.other.Thing"])
    output = tmp_path / "out" / "project.sig.jsonl"

    build_signature_file(
        SymbolIndexEngine(),
        files=[lib],
        signatures=[s1],
        output=output,
        include_classes=["org.lib.*"],
    )

    header, records = read_signature(output)
    assert header is not None
    assert header.sources == ["java16.sig.jsonl", "lib.jar"]
    assert [r.symbol for r in records] == ["org.lib.Util"]
