from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..academic_calendar.service import CalendarService, holiday_to_dict
from ..app_logger import get_logger
from ..cache.ttl_cache import TTLCache
from ..catalog.model import Paper, Student
from ..catalog.repository import PaperRepository, StudentRepository
from ..common.datetime_utils import format_date
from ..common.validators import optional_int, require_choice
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    HolidayError,
    NotFoundError,
    ValidationError,
)
from ..leaves.service import LeaveOverlay
from ..reports.service import department_cache_key
from ..semesters.service import SemesterService
from .model import AttendanceRecord, StudentEntry
from .repository import DUPLICATE_MESSAGE, AttendanceRepository

logger = get_logger("attendance")


@dataclass(frozen=True)
class AttendanceResult:
    record: AttendanceRecord
    on_leave_count: int
    message: str


def entry_to_dict(entry: StudentEntry) -> dict:
    return {
        "student": entry.student_id,
        "rollNo": entry.roll_no,
        "name": entry.name,
        "status": entry.status.value,
        "leaveType": entry.leave_type,
        "leaveReason": entry.leave_reason,
    }


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "id": record.record_id,
        "paper": record.paper_id,
        "date": format_date(record.attendance_date),
        "section": record.section,
        "teacher": record.teacher_id,
        "students": [entry_to_dict(e) for e in record.students],
        "createdAt": record.created_at.isoformat() if record.created_at else None,
    }


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        papers: PaperRepository,
        students: StudentRepository,
        leaves: LeaveOverlay,
        semesters: SemesterService,
        calendar: CalendarService,
        *,
        cache: Optional[TTLCache] = None,
    ):
        self._attendance = attendance
        self._papers = papers
        self._students = students
        self._leaves = leaves
        self._semesters = semesters
        self._calendar = calendar
        self._cache = cache

    def record_attendance(
        self,
        *,
        paper_id: Optional[int],
        attendance_date: Optional[date],
        section: Optional[str],
        students: Optional[Sequence[Mapping[str, Any]]],
        teacher_id: Optional[int],
    ) -> AttendanceResult:
        if not paper_id or attendance_date is None or not section or not students or not teacher_id:
            raise ValidationError("Missing required fields", code="missing_fields")
        if not isinstance(students, (list, tuple)) or not all(isinstance(item, Mapping) for item in students):
            raise ValidationError("students must be a list of objects", code="invalid_students")

        self._ensure_classes_held(attendance_date)

        paper = self._get_paper(paper_id)
        if not paper.is_taught_by(teacher_id):
            raise AuthorizationError("You are not assigned to this paper", code="forbidden_paper")
        self._ensure_section(paper, section)

        self._semesters.validate_date(department=paper.department, academic_year=paper.year, on_date=attendance_date)

        if self._attendance.exists(paper_id=paper.paper_id, attendance_date=attendance_date, section=section):
            raise ConflictError(DUPLICATE_MESSAGE)

        entries = self._valid_entries(paper, section, students)
        if not entries:
            raise ValidationError("No valid students for this paper and section", code="no_valid_students")

        entries = self._leaves.apply(entries, department=paper.department, section=section, on_date=attendance_date)
        on_leave = sum(1 for e in entries if e.status == AttendanceStatus.ON_LEAVE)

        record = self._attendance.create(
            paper_id=paper.paper_id,
            attendance_date=attendance_date,
            section=section,
            teacher_id=int(teacher_id),
            students=entries,
        )

        if self._cache is not None:
            self._cache.delete(department_cache_key(paper.department))
        logger.info(
            "attendance recorded paper=%s section=%s date=%s students=%d on_leave=%d",
            paper.paper_id,
            section,
            format_date(attendance_date),
            len(entries),
            on_leave,
        )

        message = "Attendance recorded successfully"
        if on_leave:
            message += f" ({on_leave} student(s) automatically marked on leave)"
        return AttendanceResult(record=record, on_leave_count=on_leave, message=message)

    def check_exists(self, *, paper_id: int, section: str, attendance_date: date) -> bool:
        return self._attendance.exists(paper_id=int(paper_id), attendance_date=attendance_date, section=section)

    def student_detail(
        self,
        *,
        student_id: int,
        paper_id: int,
        section: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict]:
        """Per-session status for one student, oldest first.

        Sessions recorded without the student's entry count as absent.
        """
        student = self._students.get_by_id(int(student_id))
        if student is None:
            raise NotFoundError("Student not found")
        section = section or student.section

        statuses = {
            r.attendance_date: r.status
            for r in self._attendance.list_entry_rows(
                paper_id=int(paper_id), student_id=student.student_id, section=section, start=start, end=end
            )
        }
        dates = self._attendance.list_dates(paper_id=int(paper_id), section=section, start=start, end=end)

        return [
            {
                "date": format_date(d),
                "status": statuses.get(d, AttendanceStatus.ABSENT).value,
                "rollNo": student.roll_no,
                "name": student.name,
            }
            for d in sorted(dates)
        ]

    def roster(self, paper_id: int, section: str) -> list[Student]:
        paper = self._get_paper(paper_id)
        self._ensure_section(paper, section)
        return list(self._students.list_in_scope(department=paper.department, year=paper.year, sections=[section]))

    def teacher_papers(self, teacher_id: int) -> list[Paper]:
        papers = list(self._papers.list_for_teacher(int(teacher_id)))
        if not papers:
            raise NotFoundError("No papers assigned to this teacher")
        return papers

    def _ensure_classes_held(self, on_date: date) -> None:
        sunday = self._calendar.is_sunday(on_date)
        holiday = None if sunday else self._calendar.is_holiday(on_date)
        if not sunday and holiday is None:
            return

        message = (
            "Attendance cannot be marked today - Sunday (Weekly Holiday)" if sunday else f"Holiday: {holiday.title}"
        )
        raise HolidayError(
            message,
            details={"isHoliday": True, "isSunday": sunday, "holidayDetails": holiday_to_dict(holiday)},
        )

    def _get_paper(self, paper_id: int) -> Paper:
        paper = self._papers.get_by_id(int(paper_id))
        if paper is None:
            raise NotFoundError("Paper not found")
        return paper

    @staticmethod
    def _ensure_section(paper: Paper, section: str) -> None:
        if not paper.has_section(section):
            raise ValidationError(
                f"Invalid section. Valid sections are: {', '.join(paper.sections)}", code="invalid_section"
            )

    def _valid_entries(self, paper: Paper, section: str, raw: Sequence[Mapping[str, Any]]) -> list[StudentEntry]:
        """Keep registered students of (paper, section) and complete manual entries, in submission order."""
        ids = [sid for sid in (optional_int(item.get("student"), "student") for item in raw) if sid is not None]
        registered: dict[int, Student] = {}
        if ids:
            registered = {
                s.student_id: s
                for s in self._students.list_by_ids_in_scope(
                    student_ids=ids, department=paper.department, year=paper.year, section=section
                )
            }

        out: list[StudentEntry] = []
        for item in raw:
            roll_no = str(item.get("rollNo") or "").strip() or None
            name = str(item.get("name") or "").strip() or None
            student_id = optional_int(item.get("student"), "student")

            if student_id is not None:
                student = registered.get(student_id)
                if student is None:
                    continue
                roll_no = roll_no or student.roll_no
                name = name or student.name
            elif not (roll_no and name):
                continue

            # Only kept entries have their status checked.
            status = require_choice(item.get("status") or AttendanceStatus.PRESENT.value, AttendanceStatus, "status")
            out.append(StudentEntry(student_id=student_id, roll_no=roll_no, name=name, status=status))
        return out
