"""Validation helpers for signature and reference index files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel, ValidationError

from contract.artifacts import (
    ARTIFACT_SPECS,
    REFERENCES_SUFFIX,
    SIGNATURE_SCHEMA_VERSION,
    SIGNATURE_SUFFIX,
)
from scan.references import ReferenceRecord
from signatures.models import SignatureHeader, SignatureRecord

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


@dataclass(frozen=True)
class ValidationMessage:
    artifact: str
    path: Path
    message: str
    line: int | None = None

    def location(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        return {
            "artifact": self.artifact,
            "path": str(self.path),
            "line": self.line,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def artifact_kind(path: Path) -> str | None:
    """Infer the artifact kind from a filename suffix."""
    name = path.name
    for kind, spec in ARTIFACT_SPECS.items():
        if name.endswith(spec.suffix):
            return kind
    return None


def validate_artifacts(
    paths: Iterable[Path], *, strict_schema_version: bool = False
) -> ValidationResult:
    result = ValidationResult()

    for path in paths:
        kind = artifact_kind(path)
        if kind is None:
            result.errors.append(
                ValidationMessage(
                    artifact="unknown",
                    path=path,
                    message=(
                        "Unrecognized artifact; expected a "
                        f"{SIGNATURE_SUFFIX} or {REFERENCES_SUFFIX} file."
                    ),
                )
            )
            continue

        if not path.is_file():
            result.errors.append(
                ValidationMessage(
                    artifact=kind,
                    path=path,
                    message="Artifact file is missing.",
                )
            )
            continue

        if kind == "signature":
            _validate_signature(
                path, result, strict_schema_version=strict_schema_version
            )
        else:
            _validate_jsonl(kind, path, ReferenceRecord, result)

    return result


def _read_lines(
    artifact_name: str, path: Path, result: ValidationResult
) -> list[tuple[int, Any]] | None:
    try:
        handle = path.open("rb")
    except OSError as exc:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Failed to read file: {exc}.",
            )
        )
        return None

    parsed: list[tuple[int, Any]] = []
    with handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                parsed.append((line_number, orjson.loads(line)))
            except orjson.JSONDecodeError as exc:
                result.errors.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        line=line_number,
                        message=f"Invalid JSON: {exc}.",
                    )
                )
    return parsed


def _validate_jsonl(
    artifact_name: str,
    path: Path,
    model: type[BaseModel],
    result: ValidationResult,
) -> None:
    lines = _read_lines(artifact_name, path, result)
    if lines is None:
        return
    for line_number, data in lines:
        try:
            model.model_validate(data)
        except ValidationError as exc:
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    line=line_number,
                    message=f"Schema validation failed: {exc}.",
                )
            )


def _validate_signature(
    path: Path,
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> None:
    artifact_name = "signature"
    lines = _read_lines(artifact_name, path, result)
    if lines is None:
        return

    header_seen = False
    mismatch_schema_emitted = False
    seen_symbols: set[str] = set()
    for position, (line_number, data) in enumerate(lines):
        is_header = isinstance(data, dict) and data.get("kind") == "header"
        if is_header and position != 0:
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    line=line_number,
                    message="Header record must be the first record.",
                )
            )
            continue

        model: type[SignatureHeader] | type[SignatureRecord] = (
            SignatureHeader if is_header else SignatureRecord
        )
        try:
            record = model.model_validate(data)
        except ValidationError as exc:
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    line=line_number,
                    message=f"Schema validation failed: {exc}.",
                )
            )
            continue

        if is_header:
            header_seen = True
        elif isinstance(record, SignatureRecord):
            if record.symbol in seen_symbols:
                result.errors.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        line=line_number,
                        message=f"Duplicate symbol '{record.symbol}'.",
                    )
                )
            seen_symbols.add(record.symbol)

        if (
            record.schema_version != SIGNATURE_SCHEMA_VERSION
            and not mismatch_schema_emitted
        ):
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    line=line_number,
                    message=(
                        "Schema version mismatch: "
                        f"expected {SIGNATURE_SCHEMA_VERSION}, "
                        f"got {record.schema_version}."
                    ),
                )
            )
            mismatch_schema_emitted = True

    if not header_seen:
        message = "Missing header record; fingerprint unavailable."
        target = result.errors if strict_schema_version else result.warnings
        target.append(
            ValidationMessage(artifact=artifact_name, path=path, message=message)
        )


__all__ = [
    "ValidationMessage",
    "ValidationResult",
    "artifact_kind",
    "validate_artifacts",
]
