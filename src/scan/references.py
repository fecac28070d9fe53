"""Reference index reading.

Compiled class directories carry ``*.refs.jsonl`` indexes written by the
bytecode reader: one record per external reference, in the order the reader
encountered them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from contract.artifacts import REFERENCES_SUFFIX
from errors import EngineError
from scan.classes import find_files

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path


class ReferenceRecord(BaseModel):
    """Schema for *.refs.jsonl records."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    class_name: str = Field(min_length=1)
    line: int | None = None
    owner: str = Field(min_length=1)
    member: str | None = None
    display: str | None = None
    annotations: tuple[str, ...] = ()

    def description(self) -> str:
        if self.display:
            return self.display
        if self.member:
            return f"{self.owner}.{self.member}"
        return self.owner


def read_references(path: Path) -> Iterator[ReferenceRecord]:
    """Yield reference records from a single index, in file order.

    Raises:
        EngineError: If the index cannot be read or a line is malformed.
    """
    try:
        handle = path.open("rb")
    except OSError as exc:
        msg = f"Failed to read reference index {path}: {exc}"
        raise EngineError(msg) from exc

    with handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                yield ReferenceRecord.model_validate(orjson.loads(line))
            except (orjson.JSONDecodeError, ValidationError) as exc:
                msg = f"Unparseable reference record at {path}:{line_number}: {exc}"
                raise EngineError(msg) from exc


def iter_references(classes_dirs: Iterable[Path]) -> Iterator[ReferenceRecord]:
    """Yield references of all class directories (dir order, then path order)."""
    for directory in classes_dirs:
        for index in find_files(directory, REFERENCES_SUFFIX):
            yield from read_references(index)


__all__ = ["ReferenceRecord", "iter_references", "read_references"]
