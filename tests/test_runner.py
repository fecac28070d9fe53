from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

from check import run_units
from check.engine import SymbolIndexEngine
from check.models import CacheConfig, CheckConfig, UnitState
from check.orchestrator import CheckOrchestrator
from check.runner import build_caches
from classpath.artifacts import LazyArtifactSet, ModuleInfo

if TYPE_CHECKING:
    from conftest import MakeClasses, WriteSignature


def _unit(tmp_path: Path, name: str, signature: Path, classes: Path) -> CheckConfig:
    return CheckConfig(
        unit_name=name,
        classes_dirs=(classes,),
        classpath=(),
        signatures=(signature,),
        cache=CacheConfig(cache_dir=tmp_path / "cache"),
    )


def test_failing_unit_does_not_abort_siblings(
    tmp_path: Path, write_signature: WriteSignature, make_classes: MakeClasses
) -> None:
    signature = write_signature(
        tmp_path / "s.sig.jsonl", [{"symbol": "java.lang.String", "kind": "class"}]
    )
    good = make_classes(
        tmp_path / "good",
        ["app.Good"],
        refs=[{"class_name": "app.Good", "line": 1, "owner": "java.lang.String"}],
    )
    bad = make_classes(tmp_path / "bad", ["app.Bad"])
    (bad / "classes.refs.jsonl").write_text("not json\n", encoding="utf-8")
    orchestrator = CheckOrchestrator(SymbolIndexEngine(), LazyArtifactSet(list))

    results = run_units(
        orchestrator,
        [
            _unit(tmp_path, "first", signature, good),
            _unit(tmp_path, "broken", signature, bad),
            _unit(tmp_path, "last", signature, good),
        ],
    )

    assert [r.unit_name for r in results] == ["first", "broken", "last"]
    assert [r.state for r in results] == [
        UnitState.DONE,
        UnitState.FAILED,
        UnitState.DONE,
    ]
    assert results[1].error is not None
    assert "classes.refs.jsonl:1" in results[1].error
    assert not results[1].ok


def test_parallel_units_share_one_artifact_computation_and_keep_order(
    tmp_path: Path, write_signature: WriteSignature, make_classes: MakeClasses
) -> None:
    signature = write_signature(tmp_path / "s.sig.jsonl", [])
    calls = 0
    lock = threading.Lock()

    def modules() -> list[ModuleInfo]:
        nonlocal calls
        with lock:
            calls += 1
        return [ModuleInfo("modA", (tmp_path / "modA.jar",))]

    configs = []
    for index in range(6):
        classes = make_classes(
            tmp_path / f"classes{index}",
            [f"app.C{index}"],
            refs=[{"class_name": f"app.C{index}", "line": index, "owner": "x.Missing"}],
        )
        configs.append(_unit(tmp_path, f"unit{index}", signature, classes))
    orchestrator = CheckOrchestrator(SymbolIndexEngine(), LazyArtifactSet(modules))

    results = run_units(orchestrator, configs, max_workers=4)

    assert calls == 1
    assert [r.unit_name for r in results] == [f"unit{i}" for i in range(6)]
    assert [r.violations[0].line for r in results] == list(range(6))
    assert all(r.state is UnitState.FAILED for r in results)


def test_build_caches_skips_units_without_cache(
    tmp_path: Path, write_signature: WriteSignature, make_classes: MakeClasses
) -> None:
    signature = write_signature(tmp_path / "s.sig.jsonl", [])
    classes = make_classes(tmp_path / "classes", ["app.Main"])
    enabled = _unit(tmp_path, "main", signature, classes)
    disabled = CheckConfig(
        unit_name="test",
        classes_dirs=(classes,),
        classpath=(),
        signatures=(signature,),
        cache=CacheConfig(enabled=False, cache_dir=tmp_path / "cache"),
    )
    missing = CheckConfig(
        unit_name="other",
        classes_dirs=(classes,),
        classpath=(),
        signatures=(tmp_path / "missing.sig.jsonl",),
        cache=CacheConfig(cache_dir=tmp_path / "cache"),
    )

    results = build_caches(
        CheckOrchestrator(SymbolIndexEngine(), LazyArtifactSet(list)),
        [enabled, disabled, missing],
    )

    assert [r.state for r in results] == [
        UnitState.DONE,
        UnitState.SKIPPED,
        UnitState.FAILED,
    ]
    assert results[0].cache is not None
    assert results[0].cache.paths == (tmp_path / "cache" / "main.sig.jsonl",)
    assert results[2].error is not None
    assert "Signature not found" in results[2].error


def test_unusable_unit_name_fails_only_that_unit(
    tmp_path: Path, write_signature: WriteSignature, make_classes: MakeClasses
) -> None:
    signature = write_signature(
        tmp_path / "s.sig.jsonl", [{"symbol": "java.lang.String", "kind": "class"}]
    )
    classes = make_classes(
        tmp_path / "classes",
        ["app.Main"],
        refs=[{"class_name": "app.Main", "line": 1, "owner": "java.lang.String"}],
    )
    orchestrator = CheckOrchestrator(SymbolIndexEngine(), LazyArtifactSet(list))

    results = run_units(
        orchestrator,
        [
            _unit(tmp_path, "...", signature, classes),
            _unit(tmp_path, "main", signature, classes),
        ],
        max_workers=2,
    )

    assert [r.state for r in results] == [UnitState.FAILED, UnitState.DONE]
    assert results[0].error is not None
    assert "Invalid compilation unit name" in results[0].error
    assert results[1].cache is not None
    assert results[1].cache.paths == (tmp_path / "cache" / "main.sig.jsonl",)
