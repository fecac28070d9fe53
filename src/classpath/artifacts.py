"""Local build products of a multi-module build."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from os import PathLike
from typing import TYPE_CHECKING

from logs import get_logger
from utils import canonical_path

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from pathlib import Path

logger = get_logger("classpath")


@dataclass(frozen=True)
class ModuleInfo:
    """Build metadata for one module.

    ``artifacts`` is None when the module has no default output
    configuration; such modules contribute nothing to the artifact set.
    """

    name: str
    artifacts: tuple[Path, ...] | None = None


class ArtifactSet:
    """Immutable set of module-produced artifacts, keyed by canonical path."""

    __slots__ = ("_keys", "_paths")

    def __init__(self, paths: Iterable[Path] = ()) -> None:
        keyed: dict[str, Path] = {}
        for path in paths:
            keyed.setdefault(canonical_path(path), path)
        self._keys = frozenset(keyed)
        self._paths = tuple(keyed.values())

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, PathLike)):
            return False
        return canonical_path(path) in self._keys

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __bool__(self) -> bool:
        return bool(self._paths)

    def __repr__(self) -> str:
        return f"ArtifactSet({list(self._paths)!r})"


def collect_module_artifacts(modules: Iterable[ModuleInfo]) -> ArtifactSet:
    """Union of default-configuration artifacts across all modules."""
    paths: list[Path] = []
    for module in modules:
        if module.artifacts is None:
            continue
        paths.extend(module.artifacts)
    return ArtifactSet(paths)


class LazyArtifactSet:
    """Computes the artifact set at most once, even under concurrent first access.

    Callers arriving while the computation runs block until it finishes and
    then share its result. A failed computation is not memoized.
    """

    def __init__(self, modules: Callable[[], Iterable[ModuleInfo]]) -> None:
        self._modules = modules
        self._lock = threading.Lock()
        self._value: ArtifactSet | None = None

    def get(self) -> ArtifactSet:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = collect_module_artifacts(self._modules())
                logger.debug("Collected %d module artifacts", len(self._value))
            return self._value

    @property
    def computed(self) -> bool:
        return self._value is not None


__all__ = ["ArtifactSet", "LazyArtifactSet", "ModuleInfo", "collect_module_artifacts"]
