"""Signature record models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

from contract.artifacts import SIGNATURE_SCHEMA_VERSION

if TYPE_CHECKING:
    from pathlib import Path

SymbolKind = Literal["class", "member"]

MEMBER_SEPARATOR = "#"


def member_symbol(owner: str, member: str) -> str:
    return f"{owner}{MEMBER_SEPARATOR}{member}"


class SignatureHeader(BaseModel):
    """First line of every signature file."""

    model_config = ConfigDict(extra="forbid")

    schema_version: int = Field(default=SIGNATURE_SCHEMA_VERSION)
    kind: Literal["header"] = "header"
    fingerprint: str
    sources: list[str] = Field(default_factory=list)


class SignatureRecord(BaseModel):
    """One available API symbol.

    ``symbol`` is a binary class name (``java.lang.Boolean``) for classes or
    ``owner#member`` (``java.lang.Boolean#compare(ZZ)I``) for members. An
    ``open`` class record makes every member of the class available; records
    derived from classpath scans are open.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int = Field(default=SIGNATURE_SCHEMA_VERSION)
    symbol: str = Field(min_length=1)
    kind: SymbolKind
    open: bool = False
    origin: str = ""

    @property
    def owner(self) -> str:
        return self.symbol.split(MEMBER_SEPARATOR, 1)[0]


@dataclass(frozen=True)
class CacheArtifact:
    """Consolidated signature file(s) built for one compilation unit.

    Holds a single path when signatures are merged, one path per declared
    signature (in declaration order) otherwise.
    """

    unit_name: str
    paths: tuple[Path, ...]
    merged: bool = True


__all__ = [
    "MEMBER_SEPARATOR",
    "CacheArtifact",
    "SignatureHeader",
    "SignatureRecord",
    "SymbolKind",
    "member_symbol",
]
