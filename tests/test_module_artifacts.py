from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from classpath.artifacts import (
    ArtifactSet,
    LazyArtifactSet,
    ModuleInfo,
    collect_module_artifacts,
)


def test_collect_module_artifacts_unions_modules_and_skips_unconfigured(
    tmp_path: Path,
) -> None:
    modules = [
        ModuleInfo("root"),
        ModuleInfo("modA", (tmp_path / "modA.jar",)),
        ModuleInfo("modB", (tmp_path / "modB.jar", tmp_path / "modB-extra.jar")),
        ModuleInfo("docs", ()),
    ]

    artifacts = collect_module_artifacts(modules)

    assert list(artifacts) == [
        tmp_path / "modA.jar",
        tmp_path / "modB.jar",
        tmp_path / "modB-extra.jar",
    ]
    assert tmp_path / "modB.jar" in artifacts
    assert tmp_path / "lib.jar" not in artifacts


def test_artifact_set_deduplicates_equivalent_paths(tmp_path: Path) -> None:
    artifacts = ArtifactSet([tmp_path / "a.jar", tmp_path / "x" / ".." / "a.jar"])

    assert len(artifacts) == 1
    assert str(tmp_path / "a.jar") in artifacts
    assert 42 not in artifacts


def test_lazy_artifact_set_computes_once_under_concurrent_first_access(
    tmp_path: Path,
) -> None:
    calls = 0
    calls_lock = threading.Lock()

    def modules() -> list[ModuleInfo]:
        nonlocal calls
        with calls_lock:
            calls += 1
        time.sleep(0.05)
        return [ModuleInfo("modA", (tmp_path / "modA.jar",))]

    lazy = LazyArtifactSet(modules)
    barrier = threading.Barrier(8)
    results: list[ArtifactSet] = []

    def worker() -> None:
        barrier.wait()
        results.append(lazy.get())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert calls == 1
    assert len(results) == 8
    assert all(result is results[0] for result in results)
    assert lazy.computed


def test_lazy_artifact_set_does_not_memoize_failures(tmp_path: Path) -> None:
    attempts = 0

    def modules() -> list[ModuleInfo]:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            msg = "metadata unavailable"
            raise RuntimeError(msg)
        return [ModuleInfo("modA", (tmp_path / "modA.jar",))]

    lazy = LazyArtifactSet(modules)

    with pytest.raises(RuntimeError, match="metadata unavailable"):
        lazy.get()
    assert not lazy.computed

    assert tmp_path / "modA.jar" in lazy.get()
    assert attempts == 2
