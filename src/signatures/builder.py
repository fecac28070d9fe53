"""Consolidated signature (cache artifact) construction."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from contract.artifacts import SIGNATURE_SUFFIX, cache_filename, safe_unit_name
from errors import ConfigError, ResolutionError
from logs import get_logger
from signatures.models import CacheArtifact
from signatures.store import atomic_output, temp_path_for

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from check.engine import CheckingEngine

logger = get_logger("cache")


def _require_readable(signatures: Sequence[Path]) -> None:
    """Fail before any work if a declared signature cannot be read."""
    for path in signatures:
        if not path.is_file():
            msg = f"Signature not found: {path}"
            raise ResolutionError(msg)
        if not os.access(path, os.R_OK):
            msg = f"Signature is not readable: {path}"
            raise ResolutionError(msg)


class SignatureCacheBuilder:
    """Builds the per-unit cache artifact from signatures and external classpath.

    Outputs are written to temporary siblings first and moved into place only
    once every output is complete; a failed build leaves existing artifacts
    untouched. Artifacts are replaced wholesale, never edited.
    """

    def __init__(self, engine: CheckingEngine, cache_dir: Path) -> None:
        self.engine = engine
        self.cache_dir = cache_dir

    def build_cache(
        self,
        unit_name: str,
        signatures: Sequence[Path],
        external_classpath: Sequence[Path],
        exclude_classes: Sequence[str] = (),
        *,
        merge_signatures: bool = True,
    ) -> CacheArtifact | None:
        """Build the cache artifact for one compilation unit.

        Args:
            unit_name: Compilation unit the artifact is keyed by
            signatures: Declared signatures, in declaration order
            external_classpath: Third-party classpath entries to fold in
            exclude_classes: Class patterns removed from the artifact
            merge_signatures: Merge all signatures into a single file

        Returns:
            The artifact, or None when no signatures are declared.

        Raises:
            ResolutionError: If a signature or classpath archive cannot be read.
        """
        if not signatures:
            logger.debug("No signatures declared for %s; cache build skipped", unit_name)
            return None

        _require_readable(signatures)

        scan = self.engine.scan_classpath(external_classpath)

        if merge_signatures:
            groups: list[tuple[Path, ...]] = [tuple(signatures)]
            targets = [self.cache_dir / cache_filename(unit_name)]
        else:
            groups = [(signature,) for signature in signatures]
            targets = [
                self.cache_dir / cache_filename(unit_name, index)
                for index in range(1, len(signatures) + 1)
            ]

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        pending: list[tuple[Path, Path]] = []
        try:
            for group, target in zip(groups, targets, strict=True):
                tmp = temp_path_for(target)
                pending.append((tmp, target))
                self.engine.build_signature(
                    signatures=group,
                    scan=scan,
                    exclude_classes=exclude_classes,
                    output=tmp,
                )
            for tmp, target in pending:
                os.replace(tmp, target)
        finally:
            for tmp, _ in pending:
                tmp.unlink(missing_ok=True)

        self._remove_stale(unit_name, keep=targets)
        logger.info(
            "Built %d cache artifact(s) for %s from %d signature(s) and %d jar(s)",
            len(targets),
            unit_name,
            len(signatures),
            len(external_classpath),
        )
        return CacheArtifact(
            unit_name=unit_name, paths=tuple(targets), merged=merge_signatures
        )

    def _remove_stale(self, unit_name: str, *, keep: Sequence[Path]) -> None:
        """Drop artifacts of this unit left over from a different layout."""
        stem = safe_unit_name(unit_name)
        keep_names = {path.name for path in keep}
        candidates = [
            *self.cache_dir.glob(f"{stem}{SIGNATURE_SUFFIX}"),
            *self.cache_dir.glob(f"{stem}.*{SIGNATURE_SUFFIX}"),
        ]
        for path in candidates:
            suffix_index = path.name[len(stem) : -len(SIGNATURE_SUFFIX)]
            is_own = suffix_index == "" or suffix_index[1:].isdigit()
            if is_own and path.name not in keep_names:
                path.unlink(missing_ok=True)


def build_signature_file(
    engine: CheckingEngine,
    *,
    files: Sequence[Path],
    signatures: Sequence[Path],
    output: Path,
    include_classes: Sequence[str] = (),
    exclude_classes: Sequence[str] = (),
) -> Path:
    """Build a standalone signature from classpath files and base signatures."""
    if not files and not signatures:
        msg = "Signature build needs at least one file or base signature"
        raise ConfigError(msg)

    _require_readable(signatures)
    scan = engine.scan_classpath(files)

    with atomic_output(output) as tmp:
        engine.build_signature(
            signatures=signatures,
            scan=scan,
            exclude_classes=exclude_classes,
            include_classes=include_classes,
            output=tmp,
        )

    logger.info("Built signature %s", output)
    return output


__all__ = ["SignatureCacheBuilder", "build_signature_file"]
