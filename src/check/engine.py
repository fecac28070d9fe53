"""Checking engine boundary and the default symbol-index engine."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from check.models import Violation
from errors import EngineError, ResolutionError
from logs import get_logger
from rules.patterns import matches_class
from scan.classes import list_classes
from scan.references import iter_references
from signatures.models import (
    MEMBER_SEPARATOR,
    SignatureHeader,
    SignatureRecord,
    member_symbol,
)
from signatures.store import merge_records, read_signature, write_signature

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

logger = get_logger("engine")


@dataclass(frozen=True)
class ClasspathScan:
    """Classes provided by a set of classpath entries, in classpath order."""

    entries: tuple[str, ...]
    records: tuple[SignatureRecord, ...]


class CheckingEngine(Protocol):
    """Operations the core needs from a signature checking engine."""

    def scan_classpath(self, classpath: Sequence[Path]) -> ClasspathScan: ...

    def build_signature(
        self,
        *,
        signatures: Sequence[Path],
        scan: ClasspathScan,
        exclude_classes: Sequence[str],
        output: Path,
        include_classes: Sequence[str] = (),
    ) -> None: ...

    def check(
        self,
        *,
        classes_dirs: Sequence[Path],
        classpath: Sequence[Path],
        signature: Path,
    ) -> list[Violation]: ...


@dataclass
class SymbolIndex:
    """Lookup structure for a loaded signature plus live classpath classes."""

    classes: set[str] = field(default_factory=set)
    open_classes: set[str] = field(default_factory=set)
    members: set[str] = field(default_factory=set)

    def add(self, record: SignatureRecord) -> None:
        if record.kind == "class":
            self.classes.add(record.symbol)
            if record.open:
                self.open_classes.add(record.symbol)
        else:
            self.members.add(record.symbol)
            self.classes.add(record.owner)

    def add_open_classes(self, class_names: Iterable[str]) -> None:
        for class_name in class_names:
            self.classes.add(class_name)
            self.open_classes.add(class_name)

    def allows(self, owner: str, member: str | None) -> bool:
        if owner in self.open_classes:
            return True
        if member is None:
            return owner in self.classes
        return member_symbol(owner, member) in self.members


def _class_filter(
    records: Iterable[SignatureRecord],
    *,
    include_classes: Sequence[str],
    exclude_classes: Sequence[str],
) -> list[SignatureRecord]:
    kept: list[SignatureRecord] = []
    for record in records:
        owner = record.owner
        if include_classes and not matches_class(owner, include_classes):
            continue
        if exclude_classes and matches_class(owner, exclude_classes):
            continue
        kept.append(record)
    return kept


def _fingerprint(
    signature_digests: Sequence[str],
    scan: ClasspathScan,
    include_classes: Sequence[str],
    exclude_classes: Sequence[str],
) -> str:
    digest = hashlib.sha256()
    for part in (
        *signature_digests,
        "|scan|",
        *(record.symbol for record in scan.records),
        "|include|",
        *include_classes,
        "|exclude|",
        *exclude_classes,
    ):
        digest.update(part.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()


def _file_digest(path: Path) -> str:
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError as exc:
        msg = f"Cannot read signature {path}: {exc}"
        raise ResolutionError(msg) from exc


class SymbolIndexEngine:
    """Engine working on JSONL symbol signatures and reference indexes."""

    def scan_classpath(self, classpath: Sequence[Path]) -> ClasspathScan:
        records: list[SignatureRecord] = []
        for entry in classpath:
            for class_name in list_classes(entry):
                records.append(
                    SignatureRecord(
                        symbol=class_name, kind="class", open=True, origin=entry.name
                    )
                )
        logger.debug(
            "Scanned %d classpath entries: %d classes", len(classpath), len(records)
        )
        return ClasspathScan(
            entries=tuple(entry.name for entry in classpath),
            records=tuple(merge_records(records)),
        )

    def build_signature(
        self,
        *,
        signatures: Sequence[Path],
        scan: ClasspathScan,
        exclude_classes: Sequence[str],
        output: Path,
        include_classes: Sequence[str] = (),
    ) -> None:
        loaded: list[list[SignatureRecord]] = []
        digests: list[str] = []
        for path in signatures:
            _, records = read_signature(path)
            loaded.append(records)
            digests.append(_file_digest(path))

        merged = merge_records(*loaded, scan.records)
        filtered = _class_filter(
            merged, include_classes=include_classes, exclude_classes=exclude_classes
        )
        header = SignatureHeader(
            fingerprint=_fingerprint(digests, scan, include_classes, exclude_classes),
            sources=[path.name for path in signatures] + list(scan.entries),
        )
        write_signature(output, header, filtered)
        logger.debug("Wrote %d symbols to %s", len(filtered), output)

    def check(
        self,
        *,
        classes_dirs: Sequence[Path],
        classpath: Sequence[Path],
        signature: Path,
    ) -> list[Violation]:
        index = SymbolIndex()
        _, records = read_signature(signature)
        for record in records:
            index.add(record)

        for entry in (*classes_dirs, *classpath):
            index.add_open_classes(list_classes(entry))

        violations: list[Violation] = []
        for ref in iter_references(classes_dirs):
            if MEMBER_SEPARATOR in ref.owner:
                msg = f"Reference owner must be a class name, got {ref.owner!r}"
                raise EngineError(msg)
            if index.allows(ref.owner, ref.member):
                continue
            violations.append(
                Violation(
                    class_name=ref.class_name,
                    line=ref.line,
                    owner=ref.owner,
                    member=ref.member,
                    description=ref.description(),
                    annotations=ref.annotations,
                )
            )
        return violations


__all__ = ["CheckingEngine", "ClasspathScan", "SymbolIndex", "SymbolIndexEngine"]
