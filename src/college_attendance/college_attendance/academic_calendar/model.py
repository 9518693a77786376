from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import CalendarEventType


@dataclass(frozen=True)
class CalendarEvent:
    event_id: int
    title: str
    start_date: date
    end_date: date
    event_type: CalendarEventType = CalendarEventType.HOLIDAY
    description: Optional[str] = None
    is_active: bool = True

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date
