from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import StudentLeave
from .repository import LeaveRepository


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_approved_on(self, *, department: str, section: str, on_date: date) -> Sequence[StudentLeave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_id, student_id, roll_no, department, section, leave_type, reason,
                       start_date, end_date, status
                FROM student_leaves
                WHERE status=%s AND department=%s AND section=%s AND start_date <= %s AND end_date >= %s
                ORDER BY leave_id ASC
                """,
                (LeaveStatus.APPROVED.value, department, section, on_date, on_date),
            )
            return [
                StudentLeave(
                    leave_id=int(r["leave_id"]),
                    student_id=int(r["student_id"]) if r.get("student_id") is not None else None,
                    roll_no=r["roll_no"],
                    department=r["department"],
                    section=r["section"],
                    leave_type=r["leave_type"],
                    reason=r["reason"],
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                    status=LeaveStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]
