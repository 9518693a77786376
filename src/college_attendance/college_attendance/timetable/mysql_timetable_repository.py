from __future__ import annotations

from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.constants import WEEKDAY_NAMES
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import TimeSchedule
from .repository import TimetableRepository

_SELECT = """
    SELECT ts.schedule_id, ts.department, ts.semester, ts.year, ts.day, ts.hour,
           ts.paper_id, ts.teacher_id, ts.section, ts.room, ts.is_active, p.paper_name
    FROM time_schedules ts
    LEFT JOIN papers p ON p.paper_id = ts.paper_id
"""
_ORDER = f"ORDER BY FIELD(ts.day, {in_clause(WEEKDAY_NAMES)}), ts.hour ASC, ts.section ASC"

_SLOT_TAKEN = "Time slot conflict detected for this section"


def _to_slot(r: dict) -> TimeSchedule:
    return TimeSchedule(
        schedule_id=int(r["schedule_id"]),
        department=r["department"],
        semester=r["semester"],
        year=r["year"],
        day=r["day"],
        hour=str(r["hour"]),
        paper_id=int(r["paper_id"]),
        teacher_id=int(r["teacher_id"]),
        section=r["section"],
        room=r.get("room") or "",
        is_active=bool(r["is_active"]),
        paper_name=r.get("paper_name"),
    )


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        department: str,
        semester: str,
        year: str,
        day: str,
        hour: str,
        paper_id: int,
        teacher_id: int,
        section: str,
        room: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO time_schedules(department, semester, year, day, hour, paper_id, teacher_id, section, room)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (department, semester, year, day, hour, int(paper_id), int(teacher_id), section, room),
                )
            except IntegrityError as e:
                if is_duplicate_key(e):
                    raise ConflictError(_SLOT_TAKEN)
                raise
            return int(cur.lastrowid)

    def get_by_id(self, schedule_id: int) -> Optional[TimeSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE ts.schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def update(self, slot: TimeSchedule) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    UPDATE time_schedules
                    SET department=%s, semester=%s, year=%s, day=%s, hour=%s,
                        paper_id=%s, teacher_id=%s, section=%s, room=%s, is_active=%s
                    WHERE schedule_id=%s
                    """,
                    (
                        slot.department,
                        slot.semester,
                        slot.year,
                        slot.day,
                        slot.hour,
                        int(slot.paper_id),
                        int(slot.teacher_id),
                        slot.section,
                        slot.room,
                        1 if slot.is_active else 0,
                        int(slot.schedule_id),
                    ),
                )
            except IntegrityError as e:
                if is_duplicate_key(e):
                    raise ConflictError(_SLOT_TAKEN)
                raise

    def delete(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def delete_scope(self, *, department: str, semester: str, year: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM time_schedules WHERE department=%s AND semester=%s AND year=%s",
                (department, semester, year),
            )
            return int(cur.rowcount)

    def find_conflicts(
        self,
        *,
        department: str,
        semester: str,
        year: str,
        day: str,
        hour: str,
        section: str,
        exclude_id: Optional[int] = None,
    ) -> Sequence[TimeSchedule]:
        clauses = [
            "ts.department=%s",
            "ts.semester=%s",
            "ts.year=%s",
            "ts.day=%s",
            "ts.hour=%s",
            "ts.section=%s",
            "ts.is_active=1",
        ]
        params: list[object] = [department, semester, year, day, hour, section]
        if exclude_id is not None:
            clauses.append("ts.schedule_id<>%s")
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {' AND '.join(clauses)}", tuple(params))
            return [_to_slot(r) for r in fetchall(cur)]

    def list_active(
        self,
        *,
        paper_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        section: Optional[str] = None,
        department: Optional[str] = None,
        semester: Optional[str] = None,
        year: Optional[str] = None,
    ) -> Sequence[TimeSchedule]:
        clauses = ["ts.is_active=1"]
        params: list[object] = []
        for column, value in (
            ("ts.paper_id", paper_id),
            ("ts.teacher_id", teacher_id),
            ("ts.section", section),
            ("ts.department", department),
            ("ts.semester", semester),
            ("ts.year", year),
        ):
            if value is not None:
                clauses.append(f"{column}=%s")
                params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {' AND '.join(clauses)} {_ORDER}", (*params, *WEEKDAY_NAMES))
            return [_to_slot(r) for r in fetchall(cur)]
