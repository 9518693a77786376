from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class StudentLeave:
    leave_id: int
    roll_no: str
    department: str
    section: str
    leave_type: str
    reason: str
    start_date: date
    end_date: date
    status: LeaveStatus
    student_id: Optional[int] = None

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date
