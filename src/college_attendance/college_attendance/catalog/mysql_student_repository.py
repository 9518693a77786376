from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, full_name, roll_no, department, year, section"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        name=r["full_name"],
        roll_no=r["roll_no"],
        department=r["department"],
        year=r["year"],
        section=r["section"],
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_in_scope(self, *, department: str, year: str, sections: Sequence[str]) -> Sequence[Student]:
        if not sections:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE department=%s AND year=%s AND section IN ({in_clause(sections)})
                ORDER BY roll_no ASC
                """,
                (department, year, *sections),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_ids_in_scope(
        self,
        *,
        student_ids: Sequence[int],
        department: str,
        year: str,
        section: str,
    ) -> Sequence[Student]:
        if not student_ids:
            return []
        ids = [int(i) for i in student_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE student_id IN ({in_clause(ids)}) AND department=%s AND year=%s AND section=%s
                """,
                (*ids, department, year, section),
            )
            return [_to_student(r) for r in fetchall(cur)]
