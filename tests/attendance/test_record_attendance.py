from __future__ import annotations

from datetime import date

import pytest

from src.college_attendance.college_attendance.academic_calendar.model import CalendarEvent
from src.college_attendance.college_attendance.core.enums import AttendanceStatus, LeaveStatus
from src.college_attendance.college_attendance.core.exceptions import (
    AuthorizationError,
    ConflictError,
    HolidayError,
    NotFoundError,
    SemesterRangeError,
    SemesterSetupRequiredError,
    ValidationError,
)
from src.college_attendance.college_attendance.leaves.model import StudentLeave

MONDAY = date(2025, 3, 10)


def _record(world, *, on_date=MONDAY, students=None, section="ALPHA", paper_id=1, teacher_id=7):
    return world.container.attendance_service.record_attendance(
        paper_id=paper_id,
        attendance_date=on_date,
        section=section,
        students=students if students is not None else [{"student": 1, "status": "present"}, {"student": 2, "status": "absent"}],
        teacher_id=teacher_id,
    )


def test_second_submission_for_same_session_conflicts(world):
    svc = world.container.attendance_service

    result = _record(world)
    assert len(result.record.students) == 2
    assert result.on_leave_count == 0

    with pytest.raises(ConflictError) as exc:
        _record(world)
    assert exc.value.status_code == 409

    assert svc.check_exists(paper_id=1, section="ALPHA", attendance_date=MONDAY) is True
    assert svc.check_exists(paper_id=1, section="BETA", attendance_date=MONDAY) is False


def test_sunday_is_rejected_as_weekly_holiday(world):
    with pytest.raises(HolidayError) as exc:
        _record(world, on_date=date(2025, 3, 9))

    assert exc.value.code == "holiday"
    assert exc.value.details["isSunday"] is True
    assert exc.value.details["isHoliday"] is True
    assert "Sunday" in exc.value.message
    assert world.attendance.records == {}


def test_active_holiday_blocks_attendance(world):
    world.calendar.events.append(CalendarEvent(1, "Holi", date(2025, 3, 10), date(2025, 3, 11)))

    with pytest.raises(HolidayError) as exc:
        _record(world)

    assert exc.value.details["isSunday"] is False
    assert exc.value.details["holidayDetails"]["title"] == "Holi"
    assert exc.value.message == "Holiday: Holi"


def test_manual_entry_is_stored_as_submitted(world):
    result = _record(world, students=[{"rollNo": "X9", "name": "Guest"}])

    (stored,) = result.record.students
    assert stored.student_id is None
    assert stored.roll_no == "X9"
    assert stored.name == "Guest"
    assert stored.status == AttendanceStatus.PRESENT


def test_unregistered_and_incomplete_entries_are_dropped(world):
    result = _record(
        world,
        students=[
            {"student": 1},
            {"student": 3},  # BETA student
            {"student": 4},  # other department
            {"rollNo": "X1"},  # manual entry without a name
        ],
    )

    assert [e.student_id for e in result.record.students] == [1]
    # Roll number and name come from the student profile when omitted.
    assert result.record.students[0].roll_no == "R001"


def test_no_valid_students_is_rejected(world):
    with pytest.raises(ValidationError) as exc:
        _record(world, students=[{"student": 4}, {"name": "Nobody"}])

    assert exc.value.code == "no_valid_students"


def test_invalid_status_is_rejected(world):
    with pytest.raises(ValidationError) as exc:
        _record(world, students=[{"student": 1, "status": "late"}])

    assert exc.value.code == "invalid_status"


def test_status_of_dropped_entries_is_not_checked(world):
    result = _record(
        world,
        students=[
            {"student": 1, "status": "present"},
            {"student": 4, "status": "late"},  # other department
            {"rollNo": "X1", "status": "late"},  # manual entry without a name
        ],
    )

    assert [(e.student_id, e.status) for e in result.record.students] == [(1, AttendanceStatus.PRESENT)]


@pytest.mark.parametrize("students", ["R001", ["R001", "R002"], [{"student": 1}, 2], {"student": 1}])
def test_students_must_be_a_list_of_objects(world, students):
    with pytest.raises(ValidationError) as exc:
        _record(world, students=students)

    assert exc.value.code == "invalid_students"
    assert world.attendance.records == {}


def test_missing_fields_short_circuit_before_holiday_check(world):
    with pytest.raises(ValidationError) as exc:
        _record(world, on_date=date(2025, 3, 9), students=[])

    assert exc.value.code == "missing_fields"


def test_approved_leave_forces_on_leave(world):
    world.leaves.leaves.append(
        StudentLeave(
            leave_id=1,
            roll_no="R002",
            department="CS",
            section="ALPHA",
            leave_type="Medical",
            reason="Fever",
            start_date=date(2025, 3, 9),
            end_date=date(2025, 3, 12),
            status=LeaveStatus.APPROVED,
        )
    )
    world.leaves.leaves.append(
        StudentLeave(
            leave_id=2,
            roll_no="R001",
            department="CS",
            section="ALPHA",
            leave_type="Personal",
            reason="Trip",
            start_date=date(2025, 3, 9),
            end_date=date(2025, 3, 12),
            status=LeaveStatus.PENDING,
        )
    )

    result = _record(world, students=[{"student": 1, "status": "present"}, {"student": 2, "status": "present"}])

    by_roll = {e.roll_no: e for e in result.record.students}
    assert by_roll["R002"].status == AttendanceStatus.ON_LEAVE
    assert by_roll["R002"].leave_type == "Medical"
    assert by_roll["R002"].leave_reason == "Fever"
    assert by_roll["R001"].status == AttendanceStatus.PRESENT
    assert result.on_leave_count == 1


def test_approved_leave_outside_the_section_is_ignored(world):
    for leave_id, department, section in ((1, "CS", "BETA"), (2, "EE", "ALPHA")):
        world.leaves.leaves.append(
            StudentLeave(
                leave_id=leave_id,
                roll_no="R001",
                department=department,
                section=section,
                leave_type="Medical",
                reason="Fever",
                start_date=date(2025, 3, 9),
                end_date=date(2025, 3, 12),
                status=LeaveStatus.APPROVED,
            )
        )

    result = _record(world, students=[{"student": 1, "status": "present"}])

    (stored,) = result.record.students
    assert stored.status == AttendanceStatus.PRESENT
    assert stored.leave_type is None
    assert result.on_leave_count == 0


def test_storage_conflict_surfaces_when_precheck_is_bypassed(world, entry):
    world.attendance.seed(paper_id=1, attendance_date=MONDAY, section="ALPHA", entries=[entry(1, "R001", "Asha Rao")])
    world.attendance.skip_exists_check = True

    with pytest.raises(ConflictError) as exc:
        _record(world)

    assert "already exists" in exc.value.message
    assert len(world.attendance.records) == 1


def test_paper_checks(world):
    with pytest.raises(NotFoundError):
        _record(world, paper_id=99)

    with pytest.raises(AuthorizationError) as exc:
        _record(world, teacher_id=8)
    assert exc.value.code == "forbidden_paper"
    assert exc.value.status_code == 403

    with pytest.raises(ValidationError) as exc:
        _record(world, section="GAMMA")
    assert exc.value.code == "invalid_section"
    assert "ALPHA, BETA" in exc.value.message


def test_semester_setup_required_when_no_window(world):
    world.semesters.by_id.clear()

    with pytest.raises(SemesterSetupRequiredError) as exc:
        _record(world)

    assert exc.value.details == {"requiresSetup": True}


def test_date_outside_semester_window(world):
    with pytest.raises(SemesterRangeError) as exc:
        _record(world, on_date=date(2025, 6, 10))

    assert exc.value.code == "semester_range"
    assert exc.value.details["semesterRanges"] == [
        {"semester": "III", "startDate": "2025-01-01", "endDate": "2025-05-31"}
    ]


def test_successful_write_invalidates_department_report_cache(world):
    world.cache.set("dept_attendance_CS", {"attendanceReport": []})
    world.cache.set("dept_attendance_EE", {"attendanceReport": []})

    _record(world)

    assert world.cache.get("dept_attendance_CS") is None
    assert world.cache.get("dept_attendance_EE") is not None


def test_student_detail_reports_absent_for_sessions_without_entry(world, entry):
    world.attendance.seed(paper_id=1, attendance_date=date(2025, 3, 11), section="ALPHA", entries=[entry(2, "R002", "Ben")])
    world.attendance.seed(
        paper_id=1, attendance_date=MONDAY, section="ALPHA", entries=[entry(1, "R001", "Asha Rao", "present")]
    )

    detail = world.container.attendance_service.student_detail(student_id=1, paper_id=1)

    assert detail == [
        {"date": "2025-03-10", "status": "present", "rollNo": "R001", "name": "Asha Rao"},
        {"date": "2025-03-11", "status": "absent", "rollNo": "R001", "name": "Asha Rao"},
    ]


def test_roster_and_teacher_papers(world):
    svc = world.container.attendance_service

    assert [s.roll_no for s in svc.roster(1, "ALPHA")] == ["R001", "R002"]
    assert [p.paper_id for p in svc.teacher_papers(7)] == [1, 2]
    with pytest.raises(NotFoundError):
        svc.teacher_papers(42)
