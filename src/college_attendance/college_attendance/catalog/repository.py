from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Paper, Student


class PaperRepository(Protocol):
    def get_by_id(self, paper_id: int) -> Optional[Paper]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[Paper]:
        raise NotImplementedError

    def list_for_scope(self, *, department: str, semester: str, year: str) -> Sequence[Paper]:
        """Papers offered to a department in one semester of an academic year, by name."""

        raise NotImplementedError


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_in_scope(self, *, department: str, year: str, sections: Sequence[str]) -> Sequence[Student]:
        """Students of a department/year in any of the given sections, ordered by roll number."""

        raise NotImplementedError

    def list_by_ids_in_scope(
        self,
        *,
        student_ids: Sequence[int],
        department: str,
        year: str,
        section: str,
    ) -> Sequence[Student]:
        """Subset of `student_ids` registered in exactly this department/year/section."""

        raise NotImplementedError
