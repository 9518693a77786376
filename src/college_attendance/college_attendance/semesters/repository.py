from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import SemesterSetting


class SemesterRepository(Protocol):
    def list(
        self,
        *,
        department: str,
        academic_year: Optional[str] = None,
        semester: Optional[str] = None,
        active_only: bool = True,
    ) -> Sequence[SemesterSetting]:
        raise NotImplementedError

    def get_by_id(self, setting_id: int) -> Optional[SemesterSetting]:
        raise NotImplementedError

    def get_by_key(self, *, department: str, academic_year: str, semester: str) -> Optional[SemesterSetting]:
        raise NotImplementedError

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
        """Insert a window; raises ConflictError if the (department, year, semester) key exists."""

        raise NotImplementedError

    def update(self, *, setting_id: int, start_date: date, end_date: date, description: str = "") -> None:
        raise NotImplementedError

    def delete(self, *, setting_id: int) -> bool:
        raise NotImplementedError
