"""On-disk artifact contract definitions.

This module defines the stable filenames and formats shared by the cache
builder, the check orchestrator and the validation tooling.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from errors import ConfigError

# Schema version for signature / cache JSONL records.
SIGNATURE_SCHEMA_VERSION = 1

# Filename suffixes (stable contract identifiers).
SIGNATURE_SUFFIX = ".sig.jsonl"
REFERENCES_SUFFIX = ".refs.jsonl"

# Subdirectories of the configured output dir.
CACHE_DIRNAME = "cache"
REPORTS_DIRNAME = "reports"
SIGNATURE_DIRNAME = "signature"

REPORT_FORMAT_TEXT = "text"
SUPPORTED_REPORT_FORMATS = frozenset({REPORT_FORMAT_TEXT})


@dataclass(frozen=True)
class ArtifactSpec:
    """Specification for an on-disk artifact kind."""

    suffix: str
    format: str
    required_fields_note: str


ARTIFACT_SPECS: dict[str, ArtifactSpec] = {
    "signature": ArtifactSpec(
        suffix=SIGNATURE_SUFFIX,
        format="jsonl",
        required_fields_note="Header record followed by SignatureRecord lines.",
    ),
    "references": ArtifactSpec(
        suffix=REFERENCES_SUFFIX,
        format="jsonl",
        required_fields_note="ReferenceRecord lines in class-file order.",
    ),
}


# ---------------------------------------------------------------------------
# Cache artifact naming
# ---------------------------------------------------------------------------
# {unit}.sig.jsonl when signatures are merged, {unit}.{n}.sig.jsonl (n is the
# 1-based declaration index) when each signature gets its own artifact.

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def safe_unit_name(unit_name: str) -> str:
    """Normalize a compilation unit name for use as a filename stem.

    Raises:
        ConfigError: If nothing usable remains of the name.
    """
    cleaned = _UNSAFE_NAME_CHARS.sub("_", unit_name.strip())
    if not cleaned.strip("_"):
        msg = f"Invalid compilation unit name: {unit_name!r}"
        raise ConfigError(msg)
    return cleaned


def cache_filename(unit_name: str, index: int | None = None) -> str:
    """Build the cache artifact filename for a compilation unit."""
    stem = safe_unit_name(unit_name)
    if index is None:
        return f"{stem}{SIGNATURE_SUFFIX}"
    return f"{stem}.{index}{SIGNATURE_SUFFIX}"


def report_filename(unit_name: str, report_format: str = REPORT_FORMAT_TEXT) -> str:
    """Build the report filename (``{unit}.{format}``) for a compilation unit."""
    return f"{safe_unit_name(unit_name)}.{report_format}"


__all__ = [
    "ARTIFACT_SPECS",
    "CACHE_DIRNAME",
    "REFERENCES_SUFFIX",
    "REPORTS_DIRNAME",
    "REPORT_FORMAT_TEXT",
    "SIGNATURE_DIRNAME",
    "SIGNATURE_SCHEMA_VERSION",
    "SIGNATURE_SUFFIX",
    "SUPPORTED_REPORT_FORMATS",
    "ArtifactSpec",
    "cache_filename",
    "report_filename",
    "safe_unit_name",
]
