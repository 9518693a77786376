from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import CalendarEventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CalendarEvent
from .repository import CalendarRepository

_SELECT = """
    SELECT event_id, title, description, start_date, end_date, event_type, is_active
    FROM academic_calendar
"""


def _to_event(r: dict) -> CalendarEvent:
    return CalendarEvent(
        event_id=int(r["event_id"]),
        title=r["title"],
        description=r.get("description"),
        start_date=r["start_date"],
        end_date=r["end_date"],
        event_type=CalendarEventType(r["event_type"]),
        is_active=bool(r["is_active"]),
    )


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_active_holiday(self, *, on_date: date) -> Optional[CalendarEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE is_active=1 AND event_type=%s AND start_date <= %s AND end_date >= %s
                ORDER BY start_date ASC
                LIMIT 1
                """,
                (CalendarEventType.HOLIDAY.value, on_date, on_date),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def create(
        self,
        *,
        title: str,
        start_date: date,
        end_date: date,
        event_type: CalendarEventType,
        description: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO academic_calendar(title, description, start_date, end_date, event_type)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (title, description, start_date, end_date, event_type.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, event_id: int) -> Optional[CalendarEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def update(self, event: CalendarEvent) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE academic_calendar
                SET title=%s, description=%s, start_date=%s, end_date=%s, event_type=%s
                WHERE event_id=%s
                """,
                (
                    event.title,
                    event.description,
                    event.start_date,
                    event.end_date,
                    event.event_type.value,
                    int(event.event_id),
                ),
            )

    def deactivate(self, *, event_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE academic_calendar SET is_active=0 WHERE event_id=%s", (int(event_id),))

    def list_active(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        event_type: Optional[CalendarEventType] = None,
    ) -> Sequence[CalendarEvent]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if end is not None:
            clauses.append("start_date <= %s")
            params.append(end)
        if start is not None:
            clauses.append("end_date >= %s")
            params.append(start)
        if event_type is not None:
            clauses.append("event_type=%s")
            params.append(event_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY start_date ASC", tuple(params))
            return [_to_event(r) for r in fetchall(cur)]

    def list_starting_between(self, *, start: date, end: date, limit: int) -> Sequence[CalendarEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE is_active=1 AND start_date >= %s AND start_date <= %s
                ORDER BY start_date ASC
                LIMIT %s
                """,
                (start, end, int(limit)),
            )
            return [_to_event(r) for r in fetchall(cur)]
