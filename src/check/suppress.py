"""Suppression of violations by ignore patterns and annotation marker."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rules.patterns import matches_class

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from check.models import Violation


def _annotation_matches(annotation: str, marker: str) -> bool:
    if annotation == marker:
        return True
    # A bare marker name matches any package.
    if "." not in marker:
        return annotation.rsplit(".", 1)[-1] == marker
    return False


def is_suppressed(
    violation: Violation,
    *,
    ignore_classes: Sequence[str],
    annotation: str | None,
) -> bool:
    """Return True when a violation is allowed by configuration.

    ``ignore_classes`` patterns apply to the referenced class; the annotation
    marker applies to the referencing class or member.
    """
    if ignore_classes and matches_class(violation.owner, ignore_classes):
        return True
    if annotation:
        return any(_annotation_matches(ann, annotation) for ann in violation.annotations)
    return False


def filter_violations(
    violations: Iterable[Violation],
    *,
    ignore_classes: Sequence[str],
    annotation: str | None,
) -> list[Violation]:
    """Drop suppressed violations, keeping the order of the rest."""
    return [
        violation
        for violation in violations
        if not is_suppressed(
            violation, ignore_classes=ignore_classes, annotation=annotation
        )
    ]


__all__ = ["filter_violations", "is_suppressed"]
