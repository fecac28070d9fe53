"""Stable on-disk contract surface for apisniff artifacts."""

from contract.artifacts import (
    ARTIFACT_SPECS,
    REFERENCES_SUFFIX,
    SIGNATURE_SCHEMA_VERSION,
    SIGNATURE_SUFFIX,
    ArtifactSpec,
    cache_filename,
    report_filename,
)


def __getattr__(name: str) -> object:
    if name in {"ValidationMessage", "ValidationResult", "validate_artifacts"}:
        from contract.validation import (
            ValidationMessage,
            ValidationResult,
            validate_artifacts,
        )

        return {
            "ValidationMessage": ValidationMessage,
            "ValidationResult": ValidationResult,
            "validate_artifacts": validate_artifacts,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ARTIFACT_SPECS",
    "REFERENCES_SUFFIX",
    "SIGNATURE_SCHEMA_VERSION",
    "SIGNATURE_SUFFIX",
    "ArtifactSpec",
    "ValidationMessage",
    "ValidationResult",
    "cache_filename",
    "report_filename",
    "validate_artifacts",
]
