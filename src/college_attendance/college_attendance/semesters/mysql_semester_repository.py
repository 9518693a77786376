from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import SemesterSetting
from .repository import SemesterRepository

_COLUMNS = "setting_id, department, academic_year, semester, start_date, end_date, is_active, description"


def _to_setting(r: dict) -> SemesterSetting:
    return SemesterSetting(
        setting_id=int(r["setting_id"]),
        department=r["department"],
        academic_year=r["academic_year"],
        semester=r["semester"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        is_active=bool(r["is_active"]),
        description=r.get("description") or "",
    )


class MySQLSemesterRepository(SemesterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(
        self,
        *,
        department: str,
        academic_year: Optional[str] = None,
        semester: Optional[str] = None,
        active_only: bool = True,
    ) -> Sequence[SemesterSetting]:
        clauses = ["department=%s"]
        params: list[object] = [department]
        if academic_year:
            clauses.append("academic_year=%s")
            params.append(academic_year)
        if semester:
            clauses.append("semester=%s")
            params.append(semester)
        if active_only:
            clauses.append("is_active=1")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM semester_settings
                WHERE {" AND ".join(clauses)}
                ORDER BY semester ASC, start_date ASC
                """,
                tuple(params),
            )
            return [_to_setting(r) for r in fetchall(cur)]

    def get_by_id(self, setting_id: int) -> Optional[SemesterSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM semester_settings WHERE setting_id=%s", (int(setting_id),))
            r = fetchone(cur)
            return _to_setting(r) if r else None

    def get_by_key(self, *, department: str, academic_year: str, semester: str) -> Optional[SemesterSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM semester_settings
                WHERE department=%s AND academic_year=%s AND semester=%s
                """,
                (department, academic_year, semester),
            )
            r = fetchone(cur)
            return _to_setting(r) if r else None

    def create(
        self,
        *,
        department: str,
        academic_year: str,
        semester: str,
        start_date: date,
        end_date: date,
        description: str = "",
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO semester_settings(department, academic_year, semester, start_date, end_date, description)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (department, academic_year, semester, start_date, end_date, description or ""),
                )
            except IntegrityError as e:
                if is_duplicate_key(e):
                    raise ConflictError("Semester settings already exist for this department, year and semester")
                raise
            return int(cur.lastrowid)

    def update(self, *, setting_id: int, start_date: date, end_date: date, description: str = "") -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE semester_settings
                SET start_date=%s, end_date=%s, description=%s, is_active=1
                WHERE setting_id=%s
                """,
                (start_date, end_date, description or "", int(setting_id)),
            )

    def delete(self, *, setting_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM semester_settings WHERE setting_id=%s", (int(setting_id),))
            return cur.rowcount > 0
