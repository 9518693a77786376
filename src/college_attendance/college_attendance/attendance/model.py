from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class StudentEntry:
    """One line of an attendance record.

    Registered students carry `student_id`; manual entries carry only roll
    number and name.
    """

    student_id: Optional[int] = None
    roll_no: Optional[str] = None
    name: Optional[str] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    leave_type: Optional[str] = None
    leave_reason: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    record_id: int
    paper_id: int
    attendance_date: date
    section: str
    teacher_id: int
    students: tuple[StudentEntry, ...] = ()
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceEntryRow:
    """Read-model: one (record, registered student) pair, used by reports."""

    record_id: int
    paper_id: int
    paper_name: str
    attendance_date: date
    record_section: str
    student_id: int
    student_name: str
    roll_no: str
    student_department: str
    student_year: str
    student_section: str
    status: AttendanceStatus

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT
