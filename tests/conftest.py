from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.college_attendance.college_attendance.academic_calendar.model import CalendarEvent
from src.college_attendance.college_attendance.attendance.model import (
    AttendanceEntryRow,
    AttendanceRecord,
    StudentEntry,
)
from src.college_attendance.college_attendance.attendance.repository import DUPLICATE_MESSAGE
from src.college_attendance.college_attendance.cache.ttl_cache import TTLCache
from src.college_attendance.college_attendance.catalog.model import Paper, Student
from src.college_attendance.college_attendance.container import wire_container
from src.college_attendance.college_attendance.core.enums import AttendanceStatus, LeaveStatus
from src.college_attendance.college_attendance.core.exceptions import ConflictError
from src.college_attendance.college_attendance.leaves.model import StudentLeave
from src.college_attendance.college_attendance.semesters.model import SemesterSetting
from src.college_attendance.college_attendance.timetable.model import TimeSchedule

ACADEMIC_YEAR = "2025-2026"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryPapers:
    def __init__(self, papers: list[Paper]):
        self.by_id = {p.paper_id: p for p in papers}

    def get_by_id(self, paper_id: int) -> Optional[Paper]:
        return self.by_id.get(int(paper_id))

    def list_for_teacher(self, teacher_id: int):
        return [p for p in self.by_id.values() if p.teacher_id == int(teacher_id)]

    def list_for_scope(self, *, department, semester, year):
        out = [p for p in self.by_id.values() if (p.department, p.semester, p.year) == (department, semester, year)]
        return sorted(out, key=lambda p: p.name)


class InMemoryStudents:
    def __init__(self, students: list[Student]):
        self.by_id = {s.student_id: s for s in students}

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.by_id.get(int(student_id))

    def list_in_scope(self, *, department, year, sections):
        out = [s for s in self.by_id.values() if s.department == department and s.year == year and s.section in sections]
        return sorted(out, key=lambda s: s.roll_no)

    def list_by_ids_in_scope(self, *, student_ids, department, year, section):
        wanted = {int(i) for i in student_ids}
        return [
            s
            for s in self.by_id.values()
            if s.student_id in wanted and s.department == department and s.year == year and s.section == section
        ]


class InMemoryAttendance:
    """Enforces the (paper, date, section) uniqueness like the real UNIQUE index."""

    def __init__(self, papers: InMemoryPapers, students: InMemoryStudents):
        self._papers = papers
        self._students = students
        self.records: dict[tuple[int, date, str], AttendanceRecord] = {}
        self.entry_row_queries = 0
        self.skip_exists_check = False

    def exists(self, *, paper_id, attendance_date, section) -> bool:
        if self.skip_exists_check:
            return False
        return (int(paper_id), attendance_date, section) in self.records

    def create(self, *, paper_id, attendance_date, section, teacher_id, students) -> AttendanceRecord:
        key = (int(paper_id), attendance_date, section)
        if key in self.records:
            raise ConflictError(DUPLICATE_MESSAGE)
        record = AttendanceRecord(
            record_id=len(self.records) + 1,
            paper_id=int(paper_id),
            attendance_date=attendance_date,
            section=section,
            teacher_id=int(teacher_id),
            students=tuple(students),
            created_at=datetime(2025, 3, 10, 9, 0, 0),
        )
        self.records[key] = record
        return record

    def list_dates(self, *, paper_id, section, start=None, end=None):
        return sorted(
            d
            for (pid, d, sec) in self.records
            if pid == int(paper_id) and sec == section and (start is None or d >= start) and (end is None or d <= end)
        )

    def list_entry_rows(self, *, department=None, paper_id=None, student_id=None, section=None, start=None, end=None):
        self.entry_row_queries += 1
        rows = []
        for record in sorted(self.records.values(), key=lambda r: r.attendance_date):
            if paper_id is not None and record.paper_id != int(paper_id):
                continue
            if section is not None and record.section != section:
                continue
            if start is not None and record.attendance_date < start:
                continue
            if end is not None and record.attendance_date > end:
                continue
            paper = self._papers.get_by_id(record.paper_id)
            for entry in record.students:
                if entry.student_id is None:
                    continue
                student = self._students.get_by_id(entry.student_id)
                if student is None:
                    continue
                if student_id is not None and student.student_id != int(student_id):
                    continue
                if department is not None and student.department != department:
                    continue
                rows.append(
                    AttendanceEntryRow(
                        record_id=record.record_id,
                        paper_id=record.paper_id,
                        paper_name=paper.name if paper else "",
                        attendance_date=record.attendance_date,
                        record_section=record.section,
                        student_id=student.student_id,
                        student_name=student.name,
                        roll_no=student.roll_no,
                        student_department=student.department,
                        student_year=student.year,
                        student_section=student.section,
                        status=entry.status,
                    )
                )
        return rows

    def seed(self, *, paper_id, attendance_date, section, entries, teacher_id=7) -> AttendanceRecord:
        return self.create(
            paper_id=paper_id, attendance_date=attendance_date, section=section, teacher_id=teacher_id, students=entries
        )


class InMemorySemesters:
    def __init__(self, settings: Optional[list[SemesterSetting]] = None):
        self.by_id = {s.setting_id: s for s in settings or []}

    def list(self, *, department, academic_year=None, semester=None, active_only=True):
        out = [
            s
            for s in self.by_id.values()
            if s.department == department
            and (academic_year is None or s.academic_year == academic_year)
            and (semester is None or s.semester == semester)
            and (s.is_active or not active_only)
        ]
        return sorted(out, key=lambda s: s.semester)

    def get_by_id(self, setting_id):
        return self.by_id.get(int(setting_id))

    def get_by_key(self, *, department, academic_year, semester):
        for s in self.by_id.values():
            if (s.department, s.academic_year, s.semester) == (department, academic_year, semester):
                return s
        return None

    def create(self, *, department, academic_year, semester, start_date, end_date, description=""):
        if self.get_by_key(department=department, academic_year=academic_year, semester=semester):
            raise ConflictError("Semester settings already exist")
        setting_id = max(self.by_id, default=0) + 1
        self.by_id[setting_id] = SemesterSetting(
            setting_id=setting_id,
            department=department,
            academic_year=academic_year,
            semester=semester,
            start_date=start_date,
            end_date=end_date,
            description=description,
        )
        return setting_id

    def update(self, *, setting_id, start_date, end_date, description=""):
        current = self.by_id[int(setting_id)]
        self.by_id[int(setting_id)] = replace(current, start_date=start_date, end_date=end_date, description=description)

    def delete(self, *, setting_id):
        return self.by_id.pop(int(setting_id), None) is not None


class InMemoryLeaves:
    def __init__(self, leaves: Optional[list[StudentLeave]] = None):
        self.leaves = list(leaves or [])

    def list_approved_on(self, *, department, section, on_date):
        return [
            lv
            for lv in self.leaves
            if lv.status == LeaveStatus.APPROVED
            and lv.department == department
            and lv.section == section
            and lv.covers(on_date)
        ]


class InMemoryCalendar:
    def __init__(self, events: Optional[list[CalendarEvent]] = None):
        self.events = list(events or [])

    def find_active_holiday(self, *, on_date):
        for event in self.events:
            if event.is_active and event.event_type.value == "holiday" and event.covers(on_date):
                return event
        return None

    def create(self, *, title, start_date, end_date, event_type, description=None):
        event_id = max((e.event_id for e in self.events), default=0) + 1
        self.events.append(CalendarEvent(event_id, title, start_date, end_date, event_type, description))
        return event_id

    def get_by_id(self, event_id):
        return next((e for e in self.events if e.event_id == int(event_id)), None)

    def update(self, event: CalendarEvent) -> None:
        self.events = [event if e.event_id == event.event_id else e for e in self.events]

    def deactivate(self, *, event_id):
        self.update(replace(self.get_by_id(event_id), is_active=False))

    def list_active(self, *, start=None, end=None, event_type=None):
        out = [
            e
            for e in self.events
            if e.is_active
            and (end is None or e.start_date <= end)
            and (start is None or e.end_date >= start)
            and (event_type is None or e.event_type == event_type)
        ]
        return sorted(out, key=lambda e: e.start_date)

    def list_starting_between(self, *, start, end, limit):
        out = sorted((e for e in self.events if e.is_active and start <= e.start_date <= end), key=lambda e: e.start_date)
        return out[:limit]


class InMemoryTimetable:
    def __init__(self, papers: InMemoryPapers):
        self._papers = papers
        self.by_id: dict[int, TimeSchedule] = {}

    def create(self, *, department, semester, year, day, hour, paper_id, teacher_id, section, room) -> int:
        key = (department, semester, year, day, hour, section)
        if any(s.slot_key == key for s in self.by_id.values()):
            raise ConflictError("Time slot already taken")
        schedule_id = max(self.by_id, default=0) + 1
        paper = self._papers.get_by_id(paper_id)
        self.by_id[schedule_id] = TimeSchedule(
            schedule_id=schedule_id,
            department=department,
            semester=semester,
            year=year,
            day=day,
            hour=hour,
            paper_id=paper_id,
            teacher_id=teacher_id,
            section=section,
            room=room,
            paper_name=paper.name if paper else None,
        )
        return schedule_id

    def get_by_id(self, schedule_id):
        return self.by_id.get(int(schedule_id))

    def update(self, slot: TimeSchedule) -> None:
        self.by_id[slot.schedule_id] = slot

    def delete(self, *, schedule_id):
        return self.by_id.pop(int(schedule_id), None) is not None

    def delete_scope(self, *, department, semester, year):
        doomed = [k for k, s in self.by_id.items() if (s.department, s.semester, s.year) == (department, semester, year)]
        for k in doomed:
            del self.by_id[k]
        return len(doomed)

    def find_conflicts(self, *, department, semester, year, day, hour, section, exclude_id=None):
        key = (department, semester, year, day, hour, section)
        return [s for s in self.by_id.values() if s.is_active and s.slot_key == key and s.schedule_id != exclude_id]

    def list_active(self, *, paper_id=None, teacher_id=None, section=None, department=None, semester=None, year=None):
        filters = {
            "paper_id": paper_id,
            "teacher_id": teacher_id,
            "section": section,
            "department": department,
            "semester": semester,
            "year": year,
        }
        return [
            s
            for s in sorted(self.by_id.values(), key=lambda s: (s.day, s.hour, s.section))
            if s.is_active and all(v is None or getattr(s, k) == v for k, v in filters.items())
        ]


class World:
    """All in-memory repositories plus the services wired on top of them."""

    def __init__(self):
        self.clock = FakeClock()
        self.papers = InMemoryPapers(
            [
                Paper(1, "Data Structures", "CS", "III", ACADEMIC_YEAR, ("ALPHA", "BETA"), teacher_id=7),
                Paper(2, "Operating Systems", "CS", "III", ACADEMIC_YEAR, ("ALPHA",), teacher_id=7),
                Paper(3, "Circuits", "EE", "III", ACADEMIC_YEAR, ("ALPHA",), teacher_id=9),
            ]
        )
        self.students = InMemoryStudents(
            [
                Student(1, "Asha Rao", "R001", "CS", ACADEMIC_YEAR, "ALPHA"),
                Student(2, "Ben Kurian", "R002", "CS", ACADEMIC_YEAR, "ALPHA"),
                Student(3, "Chen Li", "R003", "CS", ACADEMIC_YEAR, "BETA"),
                Student(4, "Dev Patel", "E001", "EE", ACADEMIC_YEAR, "ALPHA"),
            ]
        )
        self.attendance = InMemoryAttendance(self.papers, self.students)
        self.semesters = InMemorySemesters(
            [SemesterSetting(1, "CS", ACADEMIC_YEAR, "III", date(2025, 1, 1), date(2025, 5, 31))]
        )
        self.leaves = InMemoryLeaves()
        self.calendar = InMemoryCalendar()
        self.timetable = InMemoryTimetable(self.papers)
        self.cache = TTLCache(clock=self.clock)

        self.container = wire_container(
            papers_repo=self.papers,
            students_repo=self.students,
            attendance_repo=self.attendance,
            semesters_repo=self.semesters,
            leaves_repo=self.leaves,
            calendar_repo=self.calendar,
            timetable_repo=self.timetable,
            cache=self.cache,
        )


@pytest.fixture
def world() -> World:
    return World()


@pytest.fixture
def entry():
    def _make(student_id: int, roll_no: str, name: str, status: str = "present") -> StudentEntry:
        return StudentEntry(student_id=student_id, roll_no=roll_no, name=name, status=AttendanceStatus(status))

    return _make
