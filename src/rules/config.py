from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from check.models import CacheConfig, CheckConfig
from classpath.artifacts import ModuleInfo
from contract.artifacts import (
    CACHE_DIRNAME,
    REPORT_FORMAT_TEXT,
    REPORTS_DIRNAME,
    SIGNATURE_DIRNAME,
    SUPPORTED_REPORT_FORMATS,
    safe_unit_name,
)
from errors import ConfigError
from rules.patterns import validate_patterns

if TYPE_CHECKING:
    from collections.abc import Sequence

CONFIG_FILENAME = "apisniff.toml"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CacheSettings(_StrictModel):
    """Project-specific signature cache settings."""

    enabled: bool = Field(
        default=True,
        description="Build a consolidated signature per unit and check against it",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Class patterns removed from the cached signature",
    )
    merge_signatures: bool = Field(
        default=True,
        description="Merge all declared signatures into a single cache artifact",
    )

    @field_validator("exclude")
    @classmethod
    def validate_exclude(cls, v: list[str]) -> list[str]:
        return validate_patterns(v)


class ModuleDef(_StrictModel):
    """A module of the multi-module build and the artifacts it publishes."""

    name: str = Field(min_length=1)
    artifacts: list[str] | None = Field(
        default=None,
        description="Default-configuration artifacts (omit when the module has none)",
    )


class UnitDef(_StrictModel):
    """A compilation unit (source set) to check."""

    name: str = Field(min_length=1)
    classes: list[str] = Field(
        default_factory=list,
        description="Compiled class directories of the unit",
    )
    classpath: list[str] = Field(
        default_factory=list,
        description="Ordered compile classpath of the unit",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        try:
            safe_unit_name(v)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc
        return v


class SignatureBuildDef(_StrictModel):
    """Standalone signature build from classpath files and base signatures."""

    files: list[str] = Field(default_factory=list)
    signatures: list[str] = Field(default_factory=list)
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    output_name: str | None = None

    @field_validator("include", "exclude")
    @classmethod
    def validate_class_patterns(cls, v: list[str]) -> list[str]:
        return validate_patterns(v)

    @field_validator("output_name")
    @classmethod
    def validate_output_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            usable = safe_unit_name(v) == v
        except ConfigError:
            usable = False
        if not usable:
            msg = f"output_name '{v}' must only contain letters, digits, '_' or '-'"
            raise ValueError(msg)
        return v


class ApiSniffConfig(_StrictModel):
    """Configuration loaded from apisniff.toml."""

    output_dir: str = Field(
        default="build/apisniff",
        description="Directory holding cache artifacts and reports",
    )
    signatures: list[str] = Field(
        default_factory=list,
        description="Ordered signature files; no signatures means no check",
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Classes allowed even if absent from signatures (com.pkg.*)",
    )
    annotation: str | None = Field(
        default=None,
        description="Annotation class name suppressing checks on annotated code",
    )
    ignore_failures: bool = False
    exclude_jars: list[str] = Field(
        default_factory=list,
        description="Classpath file patterns excluded from checking",
    )
    report_format: str = Field(default=REPORT_FORMAT_TEXT)
    debug: bool = False
    max_workers: int = Field(default=1, ge=1)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    modules: list[ModuleDef] = Field(default_factory=list)
    units: list[UnitDef] = Field(default_factory=list)
    signature: SignatureBuildDef | None = None

    @field_validator("ignore", "exclude_jars")
    @classmethod
    def validate_pattern_lists(cls, v: list[str]) -> list[str]:
        return validate_patterns(v)

    @field_validator("report_format")
    @classmethod
    def validate_report_format(cls, v: str) -> str:
        if v not in SUPPORTED_REPORT_FORMATS:
            msg = (
                f"Unsupported report format '{v}'. "
                f"Supported: {', '.join(sorted(SUPPORTED_REPORT_FORMATS))}"
            )
            raise ValueError(msg)
        return v

    @field_validator("units")
    @classmethod
    def validate_unique_units(cls, v: list[UnitDef]) -> list[UnitDef]:
        # Units own their cache and report files by filename stem.
        seen: dict[str, str] = {}
        for unit in v:
            if unit.name in seen.values():
                msg = f"Duplicate compilation unit name '{unit.name}'"
                raise ValueError(msg)
            stem = safe_unit_name(unit.name)
            if stem in seen:
                msg = (
                    f"Compilation units '{seen[stem]}' and '{unit.name}' "
                    f"map to the same output name '{stem}'"
                )
                raise ValueError(msg)
            seen[stem] = unit.name
        return v


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the project root.

    The config output_dir must be a non-empty relative path that remains
    within the project root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the project root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved_output


def _resolve_paths(root: Path, values: Sequence[str]) -> tuple[Path, ...]:
    """Resolve config paths against the root, keeping declaration order."""
    resolved_root = root.resolve()
    return tuple(
        (resolved_root / Path(value).expanduser()).resolve() for value in values
    )


def load_config(root: Path) -> ApiSniffConfig:
    """Load configuration from apisniff.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return ApiSniffConfig()

    try:
        with config_path.open("rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ApiSniffConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


def cache_dir(root: Path, config: ApiSniffConfig) -> Path:
    return resolve_output_dir(root, config.output_dir) / CACHE_DIRNAME


def reports_dir(root: Path, config: ApiSniffConfig) -> Path:
    return resolve_output_dir(root, config.output_dir) / REPORTS_DIRNAME


def signature_dir(root: Path, config: ApiSniffConfig) -> Path:
    return resolve_output_dir(root, config.output_dir) / SIGNATURE_DIRNAME


def module_infos(root: Path, config: ApiSniffConfig) -> list[ModuleInfo]:
    """Translate [[modules]] entries into module metadata."""
    return [
        ModuleInfo(
            name=module.name,
            artifacts=(
                None
                if module.artifacts is None
                else _resolve_paths(root, module.artifacts)
            ),
        )
        for module in config.modules
    ]


def unit_check_configs(
    root: Path,
    config: ApiSniffConfig,
    *,
    units: Sequence[str] | None = None,
) -> list[CheckConfig]:
    """Assemble one immutable CheckConfig per selected compilation unit.

    Args:
        root: Project root used to resolve relative paths
        config: Loaded configuration
        units: Optional unit names to select (default: all, in config order)

    Raises:
        ConfigError: If a requested unit is not configured.
    """
    known = {unit.name for unit in config.units}
    if units:
        unknown = [name for name in units if name not in known]
        if unknown:
            msg = f"Unknown compilation unit(s): {', '.join(unknown)}"
            raise ConfigError(msg)

    resolved_cache_dir = cache_dir(root, config)
    signatures = _resolve_paths(root, config.signatures)
    cache = CacheConfig(
        enabled=config.cache.enabled,
        exclude_classes=tuple(config.cache.exclude),
        merge_signatures=config.cache.merge_signatures,
        cache_dir=resolved_cache_dir,
    )

    return [
        CheckConfig(
            unit_name=unit.name,
            classes_dirs=_resolve_paths(root, unit.classes),
            classpath=_resolve_paths(root, unit.classpath),
            signatures=signatures,
            exclude_jars=tuple(config.exclude_jars),
            ignore_classes=tuple(config.ignore),
            annotation=config.annotation,
            ignore_failures=config.ignore_failures,
            cache=cache,
        )
        for unit in config.units
        if not units or unit.name in units
    ]


def signature_build_inputs(
    root: Path, config: ApiSniffConfig
) -> tuple[tuple[Path, ...], tuple[Path, ...]]:
    """Resolve [signature] files and base signatures."""
    if config.signature is None:
        return (), ()
    return (
        _resolve_paths(root, config.signature.files),
        _resolve_paths(root, config.signature.signatures),
    )


__all__ = [
    "CONFIG_FILENAME",
    "ApiSniffConfig",
    "CacheSettings",
    "ConfigError",
    "ModuleDef",
    "SignatureBuildDef",
    "UnitDef",
    "cache_dir",
    "load_config",
    "module_infos",
    "reports_dir",
    "resolve_output_dir",
    "signature_build_inputs",
    "signature_dir",
    "unit_check_configs",
]
