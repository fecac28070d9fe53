"""Reading, merging and atomically writing signature files."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from errors import ResolutionError
from signatures.models import SignatureHeader, SignatureRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence


def read_signature(path: Path) -> tuple[SignatureHeader | None, list[SignatureRecord]]:
    """Load a signature file.

    The header line is optional for hand-written signatures.

    Raises:
        ResolutionError: If the file is missing, unreadable or malformed.
    """
    try:
        handle = path.open("rb")
    except OSError as exc:
        msg = f"Cannot read signature {path}: {exc}"
        raise ResolutionError(msg) from exc

    header: SignatureHeader | None = None
    records: list[SignatureRecord] = []
    with handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
                if isinstance(data, dict) and data.get("kind") == "header":
                    if records or header is not None:
                        msg = "header must be the first record"
                        raise ValueError(msg)
                    header = SignatureHeader.model_validate(data)
                else:
                    records.append(SignatureRecord.model_validate(data))
            except (ValueError, ValidationError) as exc:
                msg = f"Malformed signature record at {path}:{line_number}: {exc}"
                raise ResolutionError(msg) from exc

    return header, records


def merge_records(*sources: Iterable[SignatureRecord]) -> list[SignatureRecord]:
    """Merge record streams; the first record seen for a symbol wins."""
    merged: dict[str, SignatureRecord] = {}
    for records in sources:
        for record in records:
            existing = merged.get(record.symbol)
            if existing is None:
                merged[record.symbol] = record
            elif record.kind == "class" and record.open and not existing.open:
                # An open class subsumes a closed one regardless of order.
                merged[record.symbol] = existing.model_copy(update={"open": True})
    return list(merged.values())


def _sorted_records(records: Iterable[SignatureRecord]) -> list[SignatureRecord]:
    return sorted(records, key=lambda record: record.symbol)


def write_signature(
    path: Path, header: SignatureHeader, records: Sequence[SignatureRecord]
) -> None:
    """Write header and records (sorted by symbol) as JSONL."""
    with path.open("wb") as f:
        f.write(orjson.dumps(header.model_dump(), option=orjson.OPT_SORT_KEYS))
        f.write(b"\n")
        for rec in _sorted_records(records):
            f.write(orjson.dumps(rec.model_dump(), option=orjson.OPT_SORT_KEYS))
            f.write(b"\n")


def temp_path_for(path: Path) -> Path:
    """Reserve a temporary sibling path for an atomic replace of ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    os.close(fd)
    return Path(name)


@contextlib.contextmanager
def atomic_output(path: Path) -> Iterator[Path]:
    """Yield a temporary path that replaces ``path`` only on clean exit."""
    tmp = temp_path_for(path)
    try:
        yield tmp
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)


__all__ = [
    "atomic_output",
    "merge_records",
    "read_signature",
    "temp_path_for",
    "write_signature",
]
