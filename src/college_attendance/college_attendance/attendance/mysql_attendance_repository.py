from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceEntryRow, AttendanceRecord, StudentEntry
from .repository import DUPLICATE_MESSAGE, AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, *, paper_id: int, attendance_date: date, section: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id
                FROM attendance_records
                WHERE paper_id=%s AND attendance_date=%s AND section=%s
                LIMIT 1
                """,
                (int(paper_id), attendance_date, section),
            )
            return fetchone(cur) is not None

    def create(
        self,
        *,
        paper_id: int,
        attendance_date: date,
        section: str,
        teacher_id: int,
        students: Sequence[StudentEntry],
    ) -> AttendanceRecord:
        created_at = datetime.now().replace(microsecond=0)
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(paper_id, attendance_date, section, teacher_id, created_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(paper_id), attendance_date, section, int(teacher_id), created_at),
                )
            except IntegrityError as e:
                if is_duplicate_key(e):
                    raise ConflictError(DUPLICATE_MESSAGE)
                raise
            record_id = int(cur.lastrowid)

            cur.executemany(
                """
                INSERT INTO attendance_entries(
                    record_id, position, student_id, roll_no, student_name, status, leave_type, leave_reason
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        record_id,
                        position,
                        s.student_id,
                        s.roll_no,
                        s.name,
                        s.status.value,
                        s.leave_type,
                        s.leave_reason,
                    )
                    for position, s in enumerate(students)
                ],
            )

        return AttendanceRecord(
            record_id=record_id,
            paper_id=int(paper_id),
            attendance_date=attendance_date,
            section=section,
            teacher_id=int(teacher_id),
            students=tuple(students),
            created_at=created_at,
        )

    def list_dates(
        self,
        *,
        paper_id: int,
        section: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[date]:
        clauses = ["paper_id=%s", "section=%s"]
        params: list[object] = [int(paper_id), section]
        if start is not None:
            clauses.append("attendance_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("attendance_date <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT attendance_date
                FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY attendance_date ASC
                """,
                tuple(params),
            )
            return [r["attendance_date"] for r in fetchall(cur)]

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
        clauses = ["1=1"]
        params: list[object] = []
        if department is not None:
            clauses.append("s.department=%s")
            params.append(department)
        if paper_id is not None:
            clauses.append("r.paper_id=%s")
            params.append(int(paper_id))
        if student_id is not None:
            clauses.append("e.student_id=%s")
            params.append(int(student_id))
        if section is not None:
            clauses.append("r.section=%s")
            params.append(section)
        if start is not None:
            clauses.append("r.attendance_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("r.attendance_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    r.record_id,
                    r.paper_id,
                    p.paper_name,
                    r.attendance_date,
                    r.section AS record_section,
                    s.student_id,
                    s.full_name,
                    s.roll_no,
                    s.department,
                    s.year,
                    s.section AS student_section,
                    e.status
                FROM attendance_entries e
                JOIN attendance_records r ON r.record_id = e.record_id
                JOIN papers p ON p.paper_id = r.paper_id
                JOIN students s ON s.student_id = e.student_id
                WHERE {where}
                ORDER BY r.attendance_date ASC, r.record_id ASC, e.position ASC
                """,
                tuple(params),
            )
            return [
                AttendanceEntryRow(
                    record_id=int(r["record_id"]),
                    paper_id=int(r["paper_id"]),
                    paper_name=r["paper_name"],
                    attendance_date=r["attendance_date"],
                    record_section=r["record_section"],
                    student_id=int(r["student_id"]),
                    student_name=r["full_name"],
                    roll_no=r["roll_no"],
                    student_department=r["department"],
                    student_year=r["year"],
                    student_section=r["student_section"],
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]
