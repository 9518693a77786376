from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol


@dataclass(frozen=True)
class SheetRow:
    roll_no: str
    name: str
    present: int
    absent: int
    percentage: float


@dataclass(frozen=True)
class AttendanceSheet:
    """Fully resolved per-section attendance summary, ready to be rendered."""

    paper_name: str
    department: str
    semester: str
    year: str
    section: str
    total_classes: int
    start_date: Optional[date]
    end_date: Optional[date]
    rows: tuple[SheetRow, ...] = ()


@dataclass(frozen=True)
class RenderedReport:
    content: bytes
    mimetype: str
    filename: str


class ReportRenderer(Protocol):
    def render(self, sheet: AttendanceSheet) -> RenderedReport:
        raise NotImplementedError


class CsvReportRenderer(ReportRenderer):
    fieldnames = ["roll_no", "name", "present", "absent", "percentage"]

    def render(self, sheet: AttendanceSheet) -> RenderedReport:
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=self.fieldnames)
        writer.writeheader()
        for row in sheet.rows:
            writer.writerow(
                {
                    "roll_no": row.roll_no,
                    "name": row.name,
                    "present": row.present,
                    "absent": row.absent,
                    "percentage": f"{row.percentage:.1f}",
                }
            )

        safe_paper = "_".join(sheet.paper_name.split()) or "paper"
        return RenderedReport(
            content=out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            filename=f"attendance_{safe_paper}_{sheet.section}.csv",
        )
