"""Violation report sinks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from contract.artifacts import REPORT_FORMAT_TEXT, report_filename
from signatures.store import atomic_output

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from check.models import Violation


class ReportSink(Protocol):
    def emit(self, unit_name: str, violations: Sequence[Violation]) -> Path | None: ...


def render_text(violations: Sequence[Violation]) -> str:
    return "".join(f"{violation.format()}\n" for violation in violations)


class TextReportSink:
    """Writes ``{reports_root}/{unit}.text`` with one line per violation.

    Units without violations get no report; a report left by an earlier run
    is removed.
    """

    def __init__(self, reports_root: Path, report_format: str = REPORT_FORMAT_TEXT) -> None:
        self.reports_root = reports_root
        self.report_format = report_format

    def path_for(self, unit_name: str) -> Path:
        return self.reports_root / report_filename(unit_name, self.report_format)

    def emit(self, unit_name: str, violations: Sequence[Violation]) -> Path | None:
        path = self.path_for(unit_name)
        if not violations:
            path.unlink(missing_ok=True)
            return None

        with atomic_output(path) as tmp:
            tmp.write_text(render_text(violations), encoding="utf-8")
        return path


__all__ = ["ReportSink", "TextReportSink", "render_text"]
