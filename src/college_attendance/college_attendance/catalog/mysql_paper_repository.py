from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import Paper
from .repository import PaperRepository


class MySQLPaperRepository(PaperRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, paper_id: int) -> Optional[Paper]:
        papers = self._query("p.paper_id=%s", (int(paper_id),))
        return papers[0] if papers else None

    def list_for_teacher(self, teacher_id: int) -> Sequence[Paper]:
        return self._query("p.teacher_id=%s", (int(teacher_id),))

    def list_for_scope(self, *, department: str, semester: str, year: str) -> Sequence[Paper]:
        return self._query("p.department=%s AND p.semester=%s AND p.year=%s", (department, semester, year))

    def _query(self, where: str, params: tuple) -> list[Paper]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT p.paper_id, p.paper_name, p.department, p.semester, p.year, p.teacher_id
                FROM papers p
                WHERE {where}
                ORDER BY p.paper_name ASC
                """,
                params,
            )
            rows = fetchall(cur)
            if not rows:
                return []

            ids = [int(r["paper_id"]) for r in rows]
            cur.execute(
                f"""
                SELECT paper_id, section
                FROM paper_sections
                WHERE paper_id IN ({in_clause(ids)})
                ORDER BY section ASC
                """,
                tuple(ids),
            )
            sections: dict[int, list[str]] = {}
            for s in fetchall(cur):
                sections.setdefault(int(s["paper_id"]), []).append(s["section"])

            return [
                Paper(
                    paper_id=int(r["paper_id"]),
                    name=r["paper_name"],
                    department=r["department"],
                    semester=r["semester"],
                    year=r["year"],
                    sections=tuple(sections.get(int(r["paper_id"]), [])),
                    teacher_id=int(r["teacher_id"]) if r.get("teacher_id") is not None else None,
                )
                for r in rows
            ]
