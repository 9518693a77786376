from __future__ import annotations

import calendar
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from ..app_logger import get_logger
from ..common.datetime_utils import today_local
from ..common.validators import require_choice, require_non_empty
from ..core.constants import UPCOMING_EVENTS_DAYS, UPCOMING_EVENTS_LIMIT
from ..core.enums import CalendarEventType
from ..core.exceptions import NotFoundError, ValidationError
from .model import CalendarEvent
from .repository import CalendarRepository

logger = get_logger("calendar")


class CalendarService:
    """Answers whether classes are held on a given date and maintains the calendar events behind it."""

    def __init__(self, events: CalendarRepository):
        self._events = events

    @staticmethod
    def is_sunday(on_date: date) -> bool:
        return on_date.weekday() == 6

    def is_holiday(self, on_date: date) -> Optional[CalendarEvent]:
        return self._events.find_active_holiday(on_date=on_date)

    def should_hold_classes(self, on_date: date) -> bool:
        if self.is_sunday(on_date):
            return False
        return self.is_holiday(on_date) is None

    def describe(self, on_date: date) -> dict:
        holiday = self.is_holiday(on_date)
        sunday = self.is_sunday(on_date)
        return {
            "date": on_date.strftime("%Y-%m-%d"),
            "isSunday": sunday,
            "isHoliday": holiday is not None,
            "holidayDetails": holiday_to_dict(holiday),
            "shouldHoldClasses": not sunday and holiday is None,
        }

    def list_events(
        self,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        event_type: Optional[str] = None,
    ) -> list[CalendarEvent]:
        """Active events, narrowed to one month when both year and month are given."""
        start = end = None
        if year is not None and month is not None:
            if not 1 <= month <= 12:
                raise ValidationError("month must be between 1 and 12", code="invalid_month")
            start = date(year, month, 1)
            end = date(year, month, calendar.monthrange(year, month)[1])
        kind = require_choice(event_type, CalendarEventType, "type") if event_type else None
        return list(self._events.list_active(start=start, end=end, event_type=kind))

    def events_in_range(self, start: date, end: date) -> list[CalendarEvent]:
        return list(self._events.list_active(start=start, end=end))

    def upcoming_events(self, today: Optional[date] = None) -> list[CalendarEvent]:
        today = today or today_local()
        return list(
            self._events.list_starting_between(
                start=today, end=today + timedelta(days=UPCOMING_EVENTS_DAYS), limit=UPCOMING_EVENTS_LIMIT
            )
        )

    def create_event(
        self,
        *,
        title: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        event_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CalendarEvent:
        title, kind = _check_event(title, start_date, end_date, event_type)
        event_id = self._events.create(
            title=title,
            start_date=start_date,
            end_date=end_date,
            event_type=kind,
            description=(description or "").strip() or None,
        )
        logger.info("calendar event %s created: %s %s..%s", event_id, kind.value, start_date, end_date)
        return self.get_event(event_id)

    def update_event(
        self,
        event_id: int,
        *,
        title: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        event_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CalendarEvent:
        title, kind = _check_event(title, start_date, end_date, event_type)
        current = self.get_event(event_id)
        self._events.update(
            replace(
                current,
                title=title,
                start_date=start_date,
                end_date=end_date,
                event_type=kind,
                description=(description or "").strip() or None,
            )
        )
        return self.get_event(current.event_id)

    def delete_event(self, event_id: int) -> None:
        """Soft delete: the event stays stored but stops blocking classes."""
        event = self.get_event(event_id)
        self._events.deactivate(event_id=event.event_id)
        logger.info("calendar event %s deactivated", event.event_id)

    def get_event(self, event_id: int) -> CalendarEvent:
        event = self._events.get_by_id(int(event_id))
        if event is None:
            raise NotFoundError("Academic event not found")
        return event


def _check_event(
    title: Optional[str], start_date: Optional[date], end_date: Optional[date], event_type: Optional[str]
) -> tuple[str, CalendarEventType]:
    title = require_non_empty(title, "title")
    if start_date is None or end_date is None:
        raise ValidationError("startDate and endDate are required", code="missing_fields")
    if start_date > end_date:
        raise ValidationError("Start date cannot be after end date", code="invalid_range")
    kind = require_choice(event_type, CalendarEventType, "type") if event_type else CalendarEventType.HOLIDAY
    return title, kind


def event_to_dict(event: CalendarEvent) -> dict:
    return {
        "id": event.event_id,
        "title": event.title,
        "description": event.description or "",
        "startDate": event.start_date.strftime("%Y-%m-%d"),
        "endDate": event.end_date.strftime("%Y-%m-%d"),
        "type": event.event_type.value,
    }


def holiday_to_dict(event: Optional[CalendarEvent]) -> Optional[dict]:
    if event is None:
        return None
    return event_to_dict(event)
