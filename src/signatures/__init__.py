"""Signature files: models, persistence and cache artifact construction."""

from signatures.models import (
    CacheArtifact,
    SignatureHeader,
    SignatureRecord,
    member_symbol,
)
from signatures.store import merge_records, read_signature, write_signature

__all__ = [
    "CacheArtifact",
    "SignatureHeader",
    "SignatureRecord",
    "member_symbol",
    "merge_records",
    "read_signature",
    "write_signature",
]
