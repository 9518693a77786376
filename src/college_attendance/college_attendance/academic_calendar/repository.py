from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import CalendarEventType
from .model import CalendarEvent


class CalendarRepository(Protocol):
    def find_active_holiday(self, *, on_date: date) -> Optional[CalendarEvent]:
        """First active holiday event whose [start, end] contains on_date."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        start_date: date,
        end_date: date,
        event_type: CalendarEventType,
        description: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, event_id: int) -> Optional[CalendarEvent]:
        raise NotImplementedError

    def update(self, event: CalendarEvent) -> None:
        raise NotImplementedError

    def deactivate(self, *, event_id: int) -> None:
        raise NotImplementedError

    def list_active(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        event_type: Optional[CalendarEventType] = None,
    ) -> Sequence[CalendarEvent]:
        """Active events overlapping [start, end] (either bound optional), ordered by start date."""

        raise NotImplementedError

    def list_starting_between(self, *, start: date, end: date, limit: int) -> Sequence[CalendarEvent]:
        raise NotImplementedError
