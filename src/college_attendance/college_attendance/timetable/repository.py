from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TimeSchedule


class TimetableRepository(Protocol):
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
        """Insert a slot and return schedule_id; raises ConflictError on a taken slot."""

        raise NotImplementedError

    def get_by_id(self, schedule_id: int) -> Optional[TimeSchedule]:
        raise NotImplementedError

    def update(self, slot: TimeSchedule) -> None:
        raise NotImplementedError

    def delete(self, *, schedule_id: int) -> bool:
        raise NotImplementedError

    def delete_scope(self, *, department: str, semester: str, year: str) -> int:
        """Remove every slot of a department's semester; returns the number removed."""

        raise NotImplementedError

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
        raise NotImplementedError

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
        """Active slots matching every given filter, ordered by day, hour, section."""

        raise NotImplementedError
