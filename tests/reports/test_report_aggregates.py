from __future__ import annotations

from datetime import date

import pytest

from src.college_attendance.college_attendance.core.exceptions import NotFoundError, ValidationError
from src.college_attendance.college_attendance.reports.renderer import CsvReportRenderer
from src.college_attendance.college_attendance.reports.service import ReportFilters, attendance_percentage


def _seed_cs(world, entry):
    # Paper 1, ALPHA: Asha present twice, Ben present once.
    world.attendance.seed(
        paper_id=1,
        attendance_date=date(2025, 3, 10),
        section="ALPHA",
        entries=[entry(1, "R001", "Asha Rao"), entry(2, "R002", "Ben Kurian", "absent")],
    )
    world.attendance.seed(
        paper_id=1,
        attendance_date=date(2025, 3, 12),
        section="ALPHA",
        entries=[entry(1, "R001", "Asha Rao"), entry(2, "R002", "Ben Kurian")],
    )
    # Paper 1, BETA: Chen absent.
    world.attendance.seed(
        paper_id=1, attendance_date=date(2025, 3, 11), section="BETA", entries=[entry(3, "R003", "Chen Li", "absent")]
    )
    # Paper 2, ALPHA: Asha on leave, Ben present.
    world.attendance.seed(
        paper_id=2,
        attendance_date=date(2025, 3, 10),
        section="ALPHA",
        entries=[entry(1, "R001", "Asha Rao", "on_leave"), entry(2, "R002", "Ben Kurian")],
    )


def test_percentage_is_zero_when_no_classes():
    assert attendance_percentage(0, 0) == 0.0
    assert attendance_percentage(1, 3) == 33.33


def test_department_report_aggregates(world, entry):
    _seed_cs(world, entry)

    report = world.container.report_service.department_report("CS")

    rows = {r["rollNo"]: r for r in report["attendanceReport"]}
    assert rows["R001"]["totalClasses"] == 3
    assert rows["R001"]["presentClasses"] == 2
    assert rows["R001"]["absentClasses"] == 1
    assert rows["R001"]["attendancePercentage"] == 66.67
    assert rows["R003"]["attendancePercentage"] == 0.0
    assert [r["rollNo"] for r in report["attendanceReport"]] == ["R001", "R002", "R003"]

    assert report["departmentStats"] == {
        "totalClasses": 7,
        "presentClasses": 4,
        "absentClasses": 3,
        "averageAttendance": 57.14,
    }
    assert [s["section"] for s in report["sectionStats"]] == ["ALPHA", "BETA"]
    assert report["sectionStats"][1]["averageAttendance"] == 0.0
    assert report["fromCache"] is False
    assert report["queryTime"].endswith("ms")


def test_department_report_is_served_from_cache_until_ttl(world, entry):
    _seed_cs(world, entry)
    reports = world.container.report_service

    first = reports.department_report("CS")
    second = reports.department_report("CS")

    assert second["fromCache"] is True
    assert "cachedAt" in second
    assert second["attendanceReport"] == first["attendanceReport"]
    assert second["departmentStats"] == first["departmentStats"]
    assert world.attendance.entry_row_queries == 1

    world.clock.advance(181)
    third = reports.department_report("CS")

    assert third["fromCache"] is False
    assert world.attendance.entry_row_queries == 2


def test_callers_cannot_mutate_the_cached_department_report(world, entry):
    _seed_cs(world, entry)
    reports = world.container.report_service

    first = reports.department_report("CS")
    first["attendanceReport"].clear()
    first["sectionStats"][0]["section"] = "MUTATED"

    second = reports.department_report("CS")
    second["departmentStats"]["totalClasses"] = -1

    third = reports.department_report("CS")
    assert third["fromCache"] is True
    assert len(third["attendanceReport"]) == 3
    assert third["sectionStats"][0]["section"] == "ALPHA"
    assert third["departmentStats"]["totalClasses"] != -1


def test_empty_department_report(world):
    report = world.container.report_service.department_report("ME")

    assert report["attendanceReport"] == []
    assert report["departmentStats"]["averageAttendance"] == 0.0
    assert report["sectionStats"] == []


def test_paper_report_with_filters(world, entry):
    _seed_cs(world, entry)
    reports = world.container.report_service

    full = reports.paper_report(1)
    assert full["totalStudents"] == 3
    assert full["paper"]["paper"] == "Data Structures"
    assert [r["rollNo"] for r in full["attendanceReport"]] == ["R001", "R002", "R003"]

    by_name = reports.paper_report(1, ReportFilters(name="ben"))
    assert [r["rollNo"] for r in by_name["attendanceReport"]] == ["R002"]

    by_pct = reports.paper_report(1, ReportFilters(min_percent=50, max_percent=60))
    assert [r["rollNo"] for r in by_pct["attendanceReport"]] == ["R002"]

    by_date = reports.paper_report(1, ReportFilters(start_date=date(2025, 3, 11), section="ALPHA"))
    assert [(r["rollNo"], r["totalClasses"]) for r in by_date["attendanceReport"]] == [("R001", 1), ("R002", 1)]


def test_paper_report_unknown_paper(world):
    with pytest.raises(NotFoundError):
        world.container.report_service.paper_report(99)


def test_multi_paper_rejects_more_than_three_before_querying(world):
    with pytest.raises(ValidationError) as exc:
        world.container.report_service.multi_paper_report([1, 2, 3, 4])

    assert exc.value.code == "too_many_papers"
    assert world.attendance.entry_row_queries == 0

    with pytest.raises(ValidationError):
        world.container.report_service.multi_paper_report([])


def test_multi_paper_report_is_union_of_paper_reports(world, entry):
    _seed_cs(world, entry)
    reports = world.container.report_service
    filters = ReportFilters(section="ALPHA")

    combined = reports.multi_paper_report([1, 2], filters)

    expected = []
    for paper_id in (1, 2):
        single = reports.paper_report(paper_id, filters)
        expected.extend({**row, "paper": single["paper"]["paper"]} for row in single["attendanceReport"])
    assert combined["attendanceReport"] == expected
    assert combined["papers"] == [
        {"paperId": 1, "ok": True, "count": 2},
        {"paperId": 2, "ok": True, "count": 2},
    ]


def test_multi_paper_report_records_failed_papers(world, entry):
    _seed_cs(world, entry)

    result = world.container.report_service.multi_paper_report([2, 99])

    assert result["papers"][0] == {"paperId": 2, "ok": True, "count": 2}
    assert result["papers"][1]["ok"] is False
    assert result["papers"][1]["error"] == "Paper not found"
    assert {r["paper"] for r in result["attendanceReport"]} == {"Operating Systems"}


def test_student_summary_and_percentage(world, entry):
    _seed_cs(world, entry)
    reports = world.container.report_service

    summary = reports.student_summary(1)
    assert [(s["paper"], s["percentage"]) for s in summary] == [("Data Structures", 100.0), ("Operating Systems", 0.0)]

    overall = reports.student_percentage(1)
    assert overall == {"totalClasses": 3, "presentCount": 2, "absentCount": 1, "percentage": 66.67}

    assert reports.student_percentage(42)["percentage"] == 0.0


def test_attendance_sheet_renders_csv(world, entry):
    _seed_cs(world, entry)

    sheet = world.container.report_service.attendance_sheet(paper_id=1, section="ALPHA")
    assert sheet.total_classes == 2
    assert [(r.roll_no, r.present, r.absent, r.percentage) for r in sheet.rows] == [
        ("R001", 2, 0, 100.0),
        ("R002", 1, 1, 50.0),
    ]

    rendered = CsvReportRenderer().render(sheet)
    assert rendered.mimetype == "text/csv"
    assert rendered.filename == "attendance_Data_Structures_ALPHA.csv"
    text = rendered.content.decode("utf-8-sig")
    assert text.splitlines()[0] == "roll_no,name,present,absent,percentage"
    assert "R002,Ben Kurian,1,1,50.0" in text
