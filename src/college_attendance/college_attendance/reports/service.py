from __future__ import annotations

import copy
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from ..app_logger import get_logger
from ..attendance.model import AttendanceEntryRow
from ..attendance.repository import AttendanceRepository
from ..cache.ttl_cache import TTLCache
from ..catalog.model import Paper, paper_to_dict
from ..catalog.repository import PaperRepository, StudentRepository
from ..common.datetime_utils import utc_now_iso
from ..core.constants import DEPARTMENT_REPORT_CACHE_PREFIX, DEPARTMENT_REPORT_TTL_SECONDS, MAX_PAPERS_PER_REPORT
from ..core.exceptions import NotFoundError, ValidationError
from .renderer import AttendanceSheet, SheetRow

logger = get_logger("reports")


def department_cache_key(department: str) -> str:
    return f"{DEPARTMENT_REPORT_CACHE_PREFIX}{department}"


def attendance_percentage(present: int, total: int) -> float:
    """present/total as a percentage rounded to 2 decimals; 0 when there are no classes."""
    if total == 0:
        return 0.0
    return round(present / total * 100, 2)


@dataclass
class _Tally:
    total: int = 0
    present: int = 0

    def add(self, row: AttendanceEntryRow) -> None:
        self.total += 1
        if row.is_present:
            self.present += 1

    def stats(self, percent_key: str) -> dict:
        return {
            "totalClasses": self.total,
            "presentClasses": self.present,
            "absentClasses": self.total - self.present,
            percent_key: attendance_percentage(self.present, self.total),
        }


@dataclass
class _StudentTally(_Tally):
    student_id: int = 0
    name: str = ""
    roll_no: str = ""
    section: str = ""
    year: str = ""

    def to_row(self) -> dict:
        return {
            "studentId": self.student_id,
            "studentName": self.name,
            "rollNo": self.roll_no,
            "section": self.section,
            "year": self.year,
            **self.stats("attendancePercentage"),
        }


@dataclass(frozen=True)
class ReportFilters:
    """Optional filters for paper reports.

    `start_date`/`end_date` narrow the records before aggregation; the rest
    apply to the aggregated per-student rows.
    """

    section: Optional[str] = None
    name: Optional[str] = None
    min_percent: Optional[float] = None
    max_percent: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def matches(self, row: dict) -> bool:
        if self.section and row["section"] != self.section:
            return False
        if self.name and self.name.lower() not in (row["studentName"] or "").lower():
            return False
        pct = row["attendancePercentage"]
        if self.min_percent is not None and pct < self.min_percent:
            return False
        if self.max_percent is not None and pct > self.max_percent:
            return False
        return True


def _per_student(rows: Iterable[AttendanceEntryRow]) -> list[dict]:
    tallies: dict[int, _StudentTally] = {}
    for r in rows:
        t = tallies.get(r.student_id)
        if t is None:
            t = _StudentTally(
                student_id=r.student_id,
                name=r.student_name,
                roll_no=r.roll_no,
                section=r.student_section,
                year=r.student_year,
            )
            tallies[r.student_id] = t
        t.add(r)

    out = [t.to_row() for t in tallies.values()]
    out.sort(key=lambda x: (x["section"] or "", x["rollNo"] or ""))
    return out


class ReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        papers: PaperRepository,
        students: StudentRepository,
        *,
        cache: TTLCache,
        department_ttl_seconds: float = DEPARTMENT_REPORT_TTL_SECONDS,
        timer: Callable[[], float] = time.perf_counter,
    ):
        self._attendance = attendance
        self._papers = papers
        self._students = students
        self._cache = cache
        self._department_ttl = department_ttl_seconds
        self._timer = timer

    def department_report(self, department: str) -> dict:
        key = department_cache_key(department)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("serving cached attendance report for department %s", department)
            return {**copy.deepcopy(cached), "fromCache": True, "cachedAt": utc_now_iso()}

        started = self._timer()
        rows = list(self._attendance.list_entry_rows(department=department))

        overall = _Tally()
        by_section: dict[str, _Tally] = {}
        for r in rows:
            overall.add(r)
            by_section.setdefault(r.student_section, _Tally()).add(r)

        section_stats = [
            {"section": section, **by_section[section].stats("averageAttendance")} for section in sorted(by_section)
        ]
        elapsed_ms = round((self._timer() - started) * 1000, 2)

        payload = {
            "attendanceReport": _per_student(rows),
            "departmentStats": overall.stats("averageAttendance"),
            "sectionStats": section_stats,
            "department": department,
            "generatedAt": utc_now_iso(),
            "queryTime": f"{elapsed_ms}ms",
            "fromCache": False,
        }
        self._cache.set(key, payload, ttl_seconds=self._department_ttl)
        logger.info("department report for %s built in %sms (%d rows)", department, elapsed_ms, len(rows))
        return copy.deepcopy(payload)

    def paper_report(self, paper_id: int, filters: Optional[ReportFilters] = None) -> dict:
        filters = filters or ReportFilters()
        paper = self._get_paper(paper_id)

        roster = self._students.list_in_scope(department=paper.department, year=paper.year, sections=paper.sections)
        enrolled = {s.student_id for s in roster}
        rows = [
            r
            for r in self._attendance.list_entry_rows(
                paper_id=paper.paper_id, start=filters.start_date, end=filters.end_date
            )
            if r.student_id in enrolled
        ]

        return {
            "paper": paper_to_dict(paper),
            "attendanceReport": [row for row in _per_student(rows) if filters.matches(row)],
            "totalStudents": len(roster),
        }

    def multi_paper_report(self, paper_ids: Sequence[int], filters: Optional[ReportFilters] = None) -> dict:
        if not paper_ids:
            raise ValidationError("At least one paper id is required", code="missing_fields")
        if len(paper_ids) > MAX_PAPERS_PER_REPORT:
            raise ValidationError(
                f"Too many papers selected. Please select maximum {MAX_PAPERS_PER_REPORT} papers at a time.",
                code="too_many_papers",
            )

        combined: list[dict] = []
        outcomes: list[dict] = []
        for paper_id in paper_ids:
            try:
                report = self.paper_report(paper_id, filters)
            except Exception as e:
                logger.warning("paper %s skipped in multi-paper report: %s", paper_id, e)
                outcomes.append({"paperId": paper_id, "ok": False, "error": str(e)})
                continue

            name = report["paper"]["paper"]
            rows = [{**row, "paper": name} for row in report["attendanceReport"]]
            combined.extend(rows)
            outcomes.append({"paperId": paper_id, "ok": True, "count": len(rows)})

        return {"attendanceReport": combined, "papers": outcomes}

    def student_summary(self, student_id: int) -> list[dict]:
        by_paper: dict[int, tuple[str, _Tally]] = {}
        for r in self._attendance.list_entry_rows(student_id=int(student_id)):
            if r.paper_id not in by_paper:
                by_paper[r.paper_id] = (r.paper_name, _Tally())
            by_paper[r.paper_id][1].add(r)

        out = [
            {"paperId": paper_id, "paper": name, **tally.stats("percentage")}
            for paper_id, (name, tally) in by_paper.items()
        ]
        out.sort(key=lambda x: x["paper"] or "")
        return out

    def student_percentage(self, student_id: int) -> dict:
        tally = _Tally()
        for r in self._attendance.list_entry_rows(student_id=int(student_id)):
            tally.add(r)
        stats = tally.stats("percentage")
        return {
            "totalClasses": stats["totalClasses"],
            "presentCount": stats["presentClasses"],
            "absentCount": stats["absentClasses"],
            "percentage": stats["percentage"],
        }

    def attendance_sheet(
        self,
        *,
        paper_id: int,
        section: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> AttendanceSheet:
        paper = self._get_paper(paper_id)
        if not paper.has_section(section):
            raise ValidationError(
                f"Invalid section. Valid sections are: {', '.join(paper.sections)}", code="invalid_section"
            )

        total = len(self._attendance.list_dates(paper_id=paper.paper_id, section=section, start=start, end=end))
        present: dict[int, int] = {}
        for r in self._attendance.list_entry_rows(paper_id=paper.paper_id, section=section, start=start, end=end):
            if r.is_present:
                present[r.student_id] = present.get(r.student_id, 0) + 1

        rows = []
        for student in self._students.list_in_scope(department=paper.department, year=paper.year, sections=[section]):
            count = present.get(student.student_id, 0)
            # One decimal on the printed sheet.
            pct = round(count / total * 100, 1) if total else 0.0
            rows.append(
                SheetRow(roll_no=student.roll_no, name=student.name, present=count, absent=total - count, percentage=pct)
            )

        return AttendanceSheet(
            paper_name=paper.name,
            department=paper.department,
            semester=paper.semester,
            year=paper.year,
            section=section,
            total_classes=total,
            start_date=start,
            end_date=end,
            rows=tuple(rows),
        )

    def _get_paper(self, paper_id: int) -> Paper:
        paper = self._papers.get_by_id(int(paper_id))
        if paper is None:
            raise NotFoundError("Paper not found")
        return paper

