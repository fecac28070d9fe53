"""Determinism verification for cache artifacts."""

from __future__ import annotations

import filecmp
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from contract.artifacts import SIGNATURE_SUFFIX

if TYPE_CHECKING:
    from collections.abc import Sequence

    from check.models import CheckConfig
    from check.orchestrator import CheckOrchestrator


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)


def _list_relative_files(root: Path) -> set[Path]:
    return {
        path.relative_to(root)
        for path in root.glob(f"*{SIGNATURE_SUFFIX}")
        if path.is_file()
    }


def verify_cache_determinism(
    *,
    orchestrator: CheckOrchestrator,
    configs: Sequence[CheckConfig],
    cache_dir: Path,
) -> DeterminismResult:
    """Verify that cache artifacts are reproducible from their inputs.

    Rebuilds every cache-enabled unit's artifact into a temporary directory
    and compares it byte-for-byte against ``cache_dir``. File set
    comparisons are performed on relative paths to avoid root-dependent
    mismatches.

    Args:
        orchestrator: Orchestrator providing the engine and module artifacts.
        configs: Units whose caches should be verified.
        cache_dir: Directory containing existing cache artifacts.

    Returns:
        DeterminismResult with ok status and lists of missing, extra, and
        mismatched relative paths.

    Raises:
        FileNotFoundError: If cache_dir does not exist.
        NotADirectoryError: If cache_dir is not a directory.
    """
    if not cache_dir.exists():
        msg = f"Cache directory does not exist: {cache_dir}"
        raise FileNotFoundError(msg)
    if not cache_dir.is_dir():
        msg = f"Cache path is not a directory: {cache_dir}"
        raise NotADirectoryError(msg)
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        for config in configs:
            if config.cache.enabled:
                orchestrator.build_cache(config, cache_dir=temp_path)

        original_files = _list_relative_files(cache_dir)
        regenerated_files = _list_relative_files(temp_path)

        missing = sorted(str(path) for path in original_files - regenerated_files)
        extra = sorted(str(path) for path in regenerated_files - original_files)

        mismatches: list[str] = []
        for path in sorted(original_files & regenerated_files):
            regenerated_path = temp_path / path
            original_path = cache_dir / path
            if not filecmp.cmp(original_path, regenerated_path, shallow=False):
                mismatches.append(str(path))

    ok = not missing and not extra and not mismatches
    return DeterminismResult(
        ok=ok,
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
    )


__all__ = ["DeterminismResult", "verify_cache_determinism"]
