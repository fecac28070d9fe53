"""Signature content summaries."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from signatures.store import read_signature
from utils import package_of

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class SignatureSummary:
    path: Path
    classes: int
    open_classes: int
    members: int
    sources: tuple[str, ...] = ()
    fingerprint: str | None = None
    packages: tuple[tuple[str, int], ...] = field(default_factory=tuple)

    def lines(self) -> list[str]:
        out = [
            f"Signature: {self.path}",
            f"  classes: {self.classes} ({self.open_classes} open)",
            f"  members: {self.members}",
        ]
        if self.fingerprint:
            out.append(f"  fingerprint: {self.fingerprint}")
        if self.sources:
            out.append(f"  sources: {', '.join(self.sources)}")
        for package, count in self.packages:
            out.append(f"  {package or '<default>'}: {count}")
        return out


def summarize_signature(path: Path, *, top: int = 20) -> SignatureSummary:
    """Count classes and members of a signature, grouped by package.

    Args:
        path: Signature file to inspect
        top: Number of packages to list, largest first (ties by name)
    """
    header, records = read_signature(path)

    classes = {record.symbol for record in records if record.kind == "class"}
    open_classes = {
        record.symbol for record in records if record.kind == "class" and record.open
    }
    members = [record for record in records if record.kind == "member"]
    classes.update(record.owner for record in members)

    per_package = Counter(package_of(class_name) for class_name in classes)
    ranked = sorted(per_package.items(), key=lambda item: (-item[1], item[0]))

    return SignatureSummary(
        path=path,
        classes=len(classes),
        open_classes=len(open_classes),
        members=len(members),
        sources=tuple(header.sources) if header else (),
        fingerprint=header.fingerprint if header else None,
        packages=tuple(ranked[:top]),
    )


__all__ = ["SignatureSummary", "summarize_signature"]
