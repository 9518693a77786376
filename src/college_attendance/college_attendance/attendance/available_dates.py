from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from ..catalog.model import Paper
from ..catalog.repository import PaperRepository
from ..common.datetime_utils import add_months, format_date, today_local
from ..core.constants import (
    ACADEMIC_YEAR_END,
    ACADEMIC_YEAR_START,
    AVAILABLE_DATES_FUTURE_MONTHS,
    AVAILABLE_DATES_PAST_MONTHS,
    MAX_AVAILABLE_DATES,
    WEEKDAY_NAMES,
)
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..semesters.service import SemesterService
from ..timetable.model import TimeSchedule
from ..timetable.service import TimetableService, slot_to_dict
from .repository import AttendanceRepository

NO_TIMETABLE_MESSAGE = "No timetable found for this paper and section. Please contact admin to set up the timetable."


class AvailableDatesService:
    """Lists the class days a teacher can mark attendance for, derived from the weekly timetable.

    The walk is bounded twice: the range is clamped around today and at most
    `max_dates` dates are produced.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        papers: PaperRepository,
        timetable: TimetableService,
        semesters: SemesterService,
        *,
        max_dates: int = MAX_AVAILABLE_DATES,
    ):
        self._attendance = attendance
        self._papers = papers
        self._timetable = timetable
        self._semesters = semesters
        self._max_dates = int(max_dates)

    def available_dates(
        self,
        *,
        teacher_id: int,
        paper_id: int,
        section: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> dict:
        paper = self._check_paper(teacher_id=teacher_id, paper_id=paper_id, section=section)

        slots = self._timetable.active_slots(paper_id=paper.paper_id, teacher_id=int(teacher_id), section=section)
        if not slots:
            return {
                "availableDates": [],
                "totalDates": 0,
                "pendingDates": 0,
                "completedDates": 0,
                "message": NO_TIMETABLE_MESSAGE,
            }

        today = today or today_local()
        range_start, range_end, semester_info = self._date_range(slots[0], start=start, end=end, today=today)
        range_start = max(range_start, add_months(today, -AVAILABLE_DATES_PAST_MONTHS))
        range_end = min(range_end, add_months(today, AVAILABLE_DATES_FUTURE_MONTHS))

        slots_by_day: dict[str, list[TimeSchedule]] = {}
        for s in slots:
            slots_by_day.setdefault(s.day, []).append(s)

        candidates: list[date] = []
        current = range_start
        while current <= range_end and len(candidates) < self._max_dates:
            if WEEKDAY_NAMES[current.weekday()] in slots_by_day:
                candidates.append(current)
            current += timedelta(days=1)

        existing = set(
            self._attendance.list_dates(paper_id=paper.paper_id, section=section, start=range_start, end=range_end)
        )

        dates = []
        for d in candidates:
            day_name = WEEKDAY_NAMES[d.weekday()]
            day_slots = sorted(slots_by_day[day_name], key=lambda s: s.hour)
            dates.append(
                {
                    "date": format_date(d),
                    "dayName": day_name,
                    "hasAttendance": d in existing,
                    "schedules": [slot_to_dict(s) for s in day_slots],
                    "hours": [s.hour for s in day_slots],
                    "isPast": d < today,
                    "isToday": d == today,
                }
            )
        dates.sort(key=lambda x: x["date"], reverse=True)

        completed = sum(1 for d in dates if d["hasAttendance"])
        return {
            "availableDates": dates,
            "totalDates": len(dates),
            "pendingDates": len(dates) - completed,
            "completedDates": completed,
            "timetableInfo": {
                "scheduledDays": [day for day in WEEKDAY_NAMES if day in slots_by_day],
                "totalSchedules": len(slots),
                "schedules": [{"day": s.day, "hour": s.hour, "room": s.room} for s in slots],
            },
            "semesterInfo": semester_info,
            "dateRange": {"start": format_date(range_start), "end": format_date(range_end)},
        }

    def _check_paper(self, *, teacher_id: int, paper_id: int, section: str) -> Paper:
        paper = self._papers.get_by_id(int(paper_id))
        if paper is None:
            raise NotFoundError("Paper not found")
        if not paper.is_taught_by(teacher_id):
            raise AuthorizationError("You are not assigned to this paper", code="forbidden_paper")
        if not paper.has_section(section):
            raise ValidationError(
                f"Invalid section. Valid sections are: {', '.join(paper.sections)}", code="invalid_section"
            )
        return paper

    def _date_range(
        self, slot: TimeSchedule, *, start: Optional[date], end: Optional[date], today: date
    ) -> tuple[date, date, dict]:
        """Explicit bounds win, then the semester window, then the June..May academic year."""
        setting = self._semesters.find_active(department=slot.department, semester=slot.semester, academic_year=slot.year)
        if setting is not None:
            default_start, default_end, source = setting.start_date, setting.end_date, "semester"
        else:
            default_start = date(today.year, *ACADEMIC_YEAR_START)
            default_end = date(today.year + 1, *ACADEMIC_YEAR_END)
            source = "academic_year"

        if start is not None or end is not None:
            source = "custom"
        range_start = start or default_start
        range_end = end or default_end

        info = {
            "semester": slot.semester,
            "academicYear": slot.year,
            "startDate": format_date(range_start),
            "endDate": format_date(range_end),
            "source": source,
        }
        return range_start, range_end, info
