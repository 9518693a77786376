from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class SemesterSetting:
    """Date window in which attendance may be recorded for a department/academic year/semester."""

    setting_id: int
    department: str
    academic_year: str
    semester: str
    start_date: date
    end_date: date
    is_active: bool = True
    description: str = ""

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date
