"""Check orchestration entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from check.models import CheckConfig, UnitResult
    from check.orchestrator import CheckOrchestrator


def run_units(
    orchestrator: CheckOrchestrator,
    configs: Sequence[CheckConfig],
    *,
    max_workers: int = 1,
) -> list[UnitResult]:
    """Run units via lazy import to avoid package import cycles."""
    from check.runner import run_units as _run_units

    return _run_units(orchestrator, configs, max_workers=max_workers)


__all__ = ["run_units"]
