from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Per-student status stored on an attendance line."""

    PRESENT = "present"
    ABSENT = "absent"
    ON_LEAVE = "on_leave"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Section(str, Enum):
    ALPHA = "ALPHA"
    BETA = "BETA"
    GAMMA = "GAMMA"
    DELTA = "DELTA"
    SIGMA = "SIGMA"
    OMEGA = "OMEGA"
    ZETA = "ZETA"
    EPSILON = "EPSILON"


class Semester(str, Enum):
    I = "I"
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"
    VI = "VI"
    VII = "VII"
    VIII = "VIII"


class CalendarEventType(str, Enum):
    """Kinds of academic calendar entries. Only HOLIDAY blocks attendance."""

    HOLIDAY = "holiday"
    EXAM = "exam"
    EVENT = "event"
    BREAK = "break"
