"""Per-unit check orchestration: cache build, engine passes, suppression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from check.models import UnitResult, UnitState, Violation
from check.suppress import filter_violations
from classpath.artifacts import LazyArtifactSet
from classpath.partition import Partition, apply_excludes, partition
from errors import ConfigError, EngineError
from logs import get_logger
from scan.classes import has_sources
from signatures.builder import SignatureCacheBuilder

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from check.engine import CheckingEngine
    from check.models import CheckConfig
    from check.report import ReportSink
    from classpath.artifacts import ArtifactSet
    from signatures.models import CacheArtifact

logger = get_logger("check")


@dataclass(frozen=True)
class ResolvedInputs:
    """Classpath views derived from one CheckConfig."""

    classpath: tuple[Path, ...]
    split: Partition


def intersect_passes(passes: Sequence[Sequence[Violation]]) -> list[Violation]:
    """Keep violations flagged by every pass, in first-pass order.

    A reference satisfied by any signature is not a violation, which matches
    merged-signature semantics.
    """
    if not passes:
        return []
    first, *rest = passes
    remaining = [{violation.key for violation in later} for later in rest]
    return [
        violation
        for violation in first
        if all(violation.key in keys for keys in remaining)
    ]


class CheckOrchestrator:
    """Runs the check pipeline for compilation units.

    Safe to share across threads: per-unit state lives in local variables and
    the only shared input, the module artifact set, is computed at most once.
    """

    def __init__(
        self,
        engine: CheckingEngine,
        artifacts: ArtifactSet | LazyArtifactSet,
        *,
        report_sink: ReportSink | None = None,
    ) -> None:
        self.engine = engine
        self._artifacts = artifacts
        self.report_sink = report_sink

    def module_artifacts(self) -> ArtifactSet:
        if isinstance(self._artifacts, LazyArtifactSet):
            return self._artifacts.get()
        return self._artifacts

    def resolve_inputs(self, config: CheckConfig) -> ResolvedInputs:
        """Apply jar excludes, then split the result into module/external."""
        filtered = tuple(apply_excludes(config.classpath, config.exclude_jars))
        return ResolvedInputs(
            classpath=filtered,
            split=partition(filtered, self.module_artifacts()),
        )

    def build_cache(
        self, config: CheckConfig, *, cache_dir: Path | None = None
    ) -> CacheArtifact | None:
        """Build the unit's cache artifact from its external classpath.

        Returns None when the unit declares no signatures.
        """
        target_dir = cache_dir or config.cache.cache_dir
        if target_dir is None:
            msg = f"No cache directory configured for unit '{config.unit_name}'"
            raise ConfigError(msg)
        if not config.signatures:
            return None

        return self._build_cache(config, self.resolve_inputs(config), target_dir)

    def _build_cache(
        self, config: CheckConfig, inputs: ResolvedInputs, target_dir: Path
    ) -> CacheArtifact | None:
        builder = SignatureCacheBuilder(self.engine, target_dir)
        return builder.build_cache(
            config.unit_name,
            config.signatures,
            inputs.split.external,
            config.cache.exclude_classes,
            merge_signatures=config.cache.merge_signatures,
        )

    def _run_passes(
        self,
        config: CheckConfig,
        classpath: Sequence[Path],
        signatures: Sequence[Path],
    ) -> list[Violation]:
        passes: list[list[Violation]] = []
        for signature in signatures:
            logger.debug("Checking %s against %s", config.unit_name, signature.name)
            passes.append(
                self.engine.check(
                    classes_dirs=config.classes_dirs,
                    classpath=classpath,
                    signature=signature,
                )
            )
        return intersect_passes(passes)

    def run(self, config: CheckConfig) -> UnitResult:
        """Check one compilation unit.

        Raises:
            ConfigError, ResolutionError, EngineError: The unit's pipeline is
                aborted; callers running several units handle these per unit.
        """
        if not config.signatures or not has_sources(config.classes_dirs):
            logger.info("Skipping %s: no signatures or no classes", config.unit_name)
            return UnitResult(
                unit_name=config.unit_name,
                state=UnitState.SKIPPED,
                transitions=(UnitState.SKIPPED,),
                ignore_failures=config.ignore_failures,
            )

        transitions: list[UnitState] = []
        cache: CacheArtifact | None = None
        if config.cache.enabled:
            transitions.append(UnitState.CACHE_BUILD)
            inputs = self.resolve_inputs(config)
            if config.cache.cache_dir is None:
                msg = f"No cache directory configured for unit '{config.unit_name}'"
                raise ConfigError(msg)
            cache = self._build_cache(config, inputs, config.cache.cache_dir)
            if cache is None:
                msg = f"Cache build produced no artifact for '{config.unit_name}'"
                raise EngineError(msg)
            live_classpath: Sequence[Path] = inputs.split.modules
            signatures: Sequence[Path] = cache.paths
        else:
            live_classpath = apply_excludes(config.classpath, config.exclude_jars)
            signatures = config.signatures

        transitions.append(UnitState.CHECKING)
        found = self._run_passes(config, live_classpath, signatures)
        violations = filter_violations(
            found,
            ignore_classes=config.ignore_classes,
            annotation=config.annotation,
        )

        for violation in violations:
            logger.warning("%s", violation.format())

        report_path = None
        if self.report_sink is not None:
            report_path = self.report_sink.emit(config.unit_name, violations)

        failed = bool(violations) and not config.ignore_failures
        state = UnitState.FAILED if failed else UnitState.DONE
        transitions.append(state)
        if violations:
            logger.info(
                "%s: %d violation(s)%s",
                config.unit_name,
                len(violations),
                " (failures ignored)" if config.ignore_failures else "",
            )

        return UnitResult(
            unit_name=config.unit_name,
            state=state,
            violations=tuple(violations),
            transitions=tuple(transitions),
            ignore_failures=config.ignore_failures,
            cache=cache,
            report_path=report_path,
        )

    def check(self, config: CheckConfig) -> list[Violation]:
        """Return the unit's violations in scan order."""
        return list(self.run(config).violations)


__all__ = ["CheckOrchestrator", "ResolvedInputs", "intersect_passes"]
