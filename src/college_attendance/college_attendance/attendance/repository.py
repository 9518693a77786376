from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceEntryRow, AttendanceRecord, StudentEntry

DUPLICATE_MESSAGE = "Attendance already exists for this paper, date, and section"


class AttendanceRepository(Protocol):
    def exists(self, *, paper_id: int, attendance_date: date, section: str) -> bool:
        raise NotImplementedError

    def create(
        self,
        *,
        paper_id: int,
        attendance_date: date,
        section: str,
        teacher_id: int,
        students: Sequence[StudentEntry],
    ) -> AttendanceRecord:
        """Persist header + lines atomically.

        Raises ConflictError when (paper, date, section) already exists; the
        UNIQUE index is the source of truth for that rule.
        """

        raise NotImplementedError

    def list_dates(
        self,
        *,
        paper_id: int,
        section: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[date]:
        """Dates that already have a record for (paper, section), optionally within [start, end]."""

        raise NotImplementedError

    def list_entry_rows(
        self,
        *,
        department: Optional[str] = None,
        paper_id: Optional[int] = None,
        student_id: Optional[int] = None,
        section: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceEntryRow]:
        """Flattened (record, registered student) rows.

        `department` filters on the student's department, `section` on the
        record's section. Manual entries are never included.
        """

        raise NotImplementedError
