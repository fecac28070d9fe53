"""Running several compilation units, optionally in parallel."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from check.models import UnitResult, UnitState
from errors import ApiSniffError
from logs import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from check.models import CheckConfig
    from check.orchestrator import CheckOrchestrator

logger = get_logger("runner")


def _guarded(
    action: Callable[[CheckConfig], UnitResult], config: CheckConfig
) -> UnitResult:
    try:
        return action(config)
    except ApiSniffError as exc:
        logger.error("%s failed: %s", config.unit_name, exc)
        return UnitResult(
            unit_name=config.unit_name,
            state=UnitState.FAILED,
            transitions=(UnitState.FAILED,),
            ignore_failures=config.ignore_failures,
            error=str(exc),
        )


def run_units(
    orchestrator: CheckOrchestrator,
    configs: Sequence[CheckConfig],
    *,
    max_workers: int = 1,
) -> list[UnitResult]:
    """Check every unit; one unit's failure never aborts its siblings.

    Results are returned in the order of ``configs`` regardless of
    completion order.
    """
    if max_workers <= 1 or len(configs) <= 1:
        return [_guarded(orchestrator.run, config) for config in configs]

    # Compute the shared artifact set before fanning out.
    orchestrator.module_artifacts()
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(_guarded, orchestrator.run, config) for config in configs
        ]
        return [future.result() for future in futures]


def _cache_only(orchestrator: CheckOrchestrator, config: CheckConfig) -> UnitResult:
    if not config.signatures or not config.cache.enabled:
        return UnitResult(
            unit_name=config.unit_name,
            state=UnitState.SKIPPED,
            transitions=(UnitState.SKIPPED,),
        )
    cache = orchestrator.build_cache(config)
    return UnitResult(
        unit_name=config.unit_name,
        state=UnitState.DONE,
        transitions=(UnitState.CACHE_BUILD, UnitState.DONE),
        cache=cache,
    )


def build_caches(
    orchestrator: CheckOrchestrator,
    configs: Sequence[CheckConfig],
) -> list[UnitResult]:
    """Build cache artifacts without checking, one result per unit."""
    return [
        _guarded(lambda config: _cache_only(orchestrator, config), config)
        for config in configs
    ]


__all__ = ["build_caches", "run_units"]
