"""Resolved inputs and results for a single compilation unit check."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from errors import ConfigError
from rules.patterns import validate_pattern

if TYPE_CHECKING:
    from pathlib import Path

    from signatures.models import CacheArtifact


class UnitState(str, Enum):
    """Lifecycle of one compilation unit check."""

    SKIPPED = "skipped"
    CACHE_BUILD = "cache_build"
    CHECKING = "checking"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool = True
    exclude_classes: tuple[str, ...] = ()
    merge_signatures: bool = True
    cache_dir: Path | None = None


@dataclass(frozen=True)
class CheckConfig:
    """Immutable parameters for checking one compilation unit.

    Assembled once after all user configuration is final; patterns are
    validated on construction so malformed input fails before any scanning.
    """

    unit_name: str
    classes_dirs: tuple[Path, ...]
    classpath: tuple[Path, ...]
    signatures: tuple[Path, ...]
    exclude_jars: tuple[str, ...] = ()
    ignore_classes: tuple[str, ...] = ()
    annotation: str | None = None
    ignore_failures: bool = False
    cache: CacheConfig = field(default_factory=CacheConfig)

    def __post_init__(self) -> None:
        for label, patterns in (
            ("exclude_jars", self.exclude_jars),
            ("ignore", self.ignore_classes),
            ("cache.exclude", self.cache.exclude_classes),
        ):
            for pattern in patterns:
                try:
                    validate_pattern(pattern)
                except ValueError as exc:
                    msg = f"Invalid {label} pattern for unit '{self.unit_name}': {exc}"
                    raise ConfigError(msg) from exc


@dataclass(frozen=True)
class Violation:
    """A reference from project bytecode to a symbol absent from the signatures."""

    class_name: str
    line: int | None
    owner: str
    member: str | None
    description: str
    annotations: tuple[str, ...] = ()

    @property
    def key(self) -> tuple[str, int | None, str, str | None]:
        return (self.class_name, self.line, self.owner, self.member)

    def format(self) -> str:
        location = self.class_name if self.line is None else f"{self.class_name}:{self.line}"
        return f"{location}  Undefined reference: {self.description}"


@dataclass(frozen=True)
class UnitResult:
    unit_name: str
    state: UnitState
    violations: tuple[Violation, ...] = ()
    transitions: tuple[UnitState, ...] = ()
    ignore_failures: bool = False
    cache: CacheArtifact | None = None
    report_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        if self.error is not None:
            return False
        return self.ignore_failures or not self.violations


__all__ = ["CacheConfig", "CheckConfig", "UnitResult", "UnitState", "Violation"]
