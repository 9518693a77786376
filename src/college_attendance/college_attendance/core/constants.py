"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CACHE_TTL_SECONDS = 5 * 60
CACHE_SWEEP_INTERVAL_SECONDS = 5 * 60
DEPARTMENT_REPORT_TTL_SECONDS = 3 * 60
DEPARTMENT_REPORT_CACHE_PREFIX = "dept_attendance_"

MAX_PAPERS_PER_REPORT = 3

MAX_AVAILABLE_DATES = 100
AVAILABLE_DATES_FUTURE_MONTHS = 6
AVAILABLE_DATES_PAST_MONTHS = 3

# Fallback academic year when no semester window is configured: June 1 -> May 31.
ACADEMIC_YEAR_START = (6, 1)
ACADEMIC_YEAR_END = (5, 31)

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
TIMETABLE_DAYS = WEEKDAY_NAMES[:6]
TIMETABLE_HOURS = ("1", "2", "3", "4")
DEFAULT_ROOM = "Not Assigned"

# Generated timetables warn when a section has fewer papers than this.
TIMETABLE_MIN_PAPERS_PER_SECTION = 3

UPCOMING_EVENTS_DAYS = 30
UPCOMING_EVENTS_LIMIT = 10
