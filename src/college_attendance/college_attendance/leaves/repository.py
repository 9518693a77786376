from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import StudentLeave


class LeaveRepository(Protocol):
    def list_approved_on(self, *, department: str, section: str, on_date: date) -> Sequence[StudentLeave]:
        """Approved leaves of a department/section whose date range contains on_date."""

        raise NotImplementedError
