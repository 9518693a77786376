from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Sequence

from ..attendance.model import StudentEntry
from ..core.enums import AttendanceStatus
from .repository import LeaveRepository


class LeaveOverlay:
    """Forces approved-leave students to `on_leave` when attendance is created."""

    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def apply(self, entries: Sequence[StudentEntry], *, department: str, section: str, on_date: date) -> list[StudentEntry]:
        by_roll = {}
        for leave in self._leaves.list_approved_on(department=department, section=section, on_date=on_date):
            # Later approvals win when a student has overlapping leaves.
            by_roll[leave.roll_no] = leave

        out: list[StudentEntry] = []
        for entry in entries:
            leave = by_roll.get(entry.roll_no) if entry.roll_no else None
            if leave is None:
                out.append(entry)
                continue
            out.append(
                replace(
                    entry,
                    status=AttendanceStatus.ON_LEAVE,
                    leave_type=leave.leave_type,
                    leave_reason=leave.reason,
                )
            )
        return out
