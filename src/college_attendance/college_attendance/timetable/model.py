from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_ROOM


@dataclass(frozen=True)
class TimeSchedule:
    """Weekly recurring slot: (day, hour) of a paper taught to one section."""

    schedule_id: int
    department: str
    semester: str
    year: str
    day: str
    hour: str
    paper_id: int
    teacher_id: int
    section: str
    room: str = DEFAULT_ROOM
    is_active: bool = True
    paper_name: Optional[str] = None

    @property
    def slot_key(self) -> tuple[str, str, str, str, str, str]:
        return (self.department, self.semester, self.year, self.day, self.hour, self.section)
