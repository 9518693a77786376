from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .academic_calendar.mysql_calendar_repository import MySQLCalendarRepository
from .academic_calendar.repository import CalendarRepository
from .academic_calendar.service import CalendarService
from .attendance.available_dates import AvailableDatesService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .cache.ttl_cache import TTLCache
from .catalog.mysql_paper_repository import MySQLPaperRepository
from .catalog.mysql_student_repository import MySQLStudentRepository
from .catalog.repository import PaperRepository, StudentRepository
from .core.constants import DEPARTMENT_REPORT_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveOverlay
from .reports.renderer import CsvReportRenderer, ReportRenderer
from .reports.service import ReportService
from .semesters.mysql_semester_repository import MySQLSemesterRepository
from .semesters.repository import SemesterRepository
from .semesters.service import SemesterService
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.repository import TimetableRepository
from .timetable.service import TimetableService


@dataclass(frozen=True)
class Container:
    cache: TTLCache

    papers_repo: PaperRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    semesters_repo: SemesterRepository
    leaves_repo: LeaveRepository
    calendar_repo: CalendarRepository
    timetable_repo: TimetableRepository

    calendar_service: CalendarService
    semester_service: SemesterService
    timetable_service: TimetableService
    attendance_service: AttendanceService
    available_dates_service: AvailableDatesService
    report_service: ReportService
    report_renderer: ReportRenderer


def wire_container(
    *,
    papers_repo: PaperRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    semesters_repo: SemesterRepository,
    leaves_repo: LeaveRepository,
    calendar_repo: CalendarRepository,
    timetable_repo: TimetableRepository,
    cache: Optional[TTLCache] = None,
    report_cache_ttl_seconds: float = DEPARTMENT_REPORT_TTL_SECONDS,
    report_renderer: Optional[ReportRenderer] = None,
) -> Container:
    """Build the services on top of already constructed repositories."""
    if cache is None:
        cache = TTLCache()

    calendar_service = CalendarService(calendar_repo)
    semester_service = SemesterService(semesters_repo)
    timetable_service = TimetableService(timetable_repo, papers_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        papers_repo,
        students_repo,
        LeaveOverlay(leaves_repo),
        semester_service,
        calendar_service,
        cache=cache,
    )
    available_dates_service = AvailableDatesService(attendance_repo, papers_repo, timetable_service, semester_service)
    report_service = ReportService(
        attendance_repo,
        papers_repo,
        students_repo,
        cache=cache,
        department_ttl_seconds=report_cache_ttl_seconds,
    )

    return Container(
        cache=cache,
        papers_repo=papers_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        semesters_repo=semesters_repo,
        leaves_repo=leaves_repo,
        calendar_repo=calendar_repo,
        timetable_repo=timetable_repo,
        calendar_service=calendar_service,
        semester_service=semester_service,
        timetable_service=timetable_service,
        attendance_service=attendance_service,
        available_dates_service=available_dates_service,
        report_service=report_service,
        report_renderer=report_renderer or CsvReportRenderer(),
    )


def build_container(
    *,
    db_config: dict,
    report_cache_ttl_seconds: float = DEPARTMENT_REPORT_TTL_SECONDS,
    cache: Optional[TTLCache] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        papers_repo=MySQLPaperRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        semesters_repo=MySQLSemesterRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        calendar_repo=MySQLCalendarRepository(conn),
        timetable_repo=MySQLTimetableRepository(conn),
        cache=cache,
        report_cache_ttl_seconds=report_cache_ttl_seconds,
    )
