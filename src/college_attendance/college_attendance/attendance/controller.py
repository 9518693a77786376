from __future__ import annotations

from flask import Flask, jsonify, request

from ..catalog.model import paper_to_dict, student_to_dict
from ..common.datetime_utils import parse_optional_date
from ..common.responses import error_response, unexpected_error
from ..common.validators import optional_int
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .service import record_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/attendance", methods=["POST"], endpoint="attendance_create")
    def create_attendance():
        payload = request.get_json(silent=True) or {}
        try:
            result = service.record_attendance(
                paper_id=optional_int(payload.get("paper"), "paper"),
                attendance_date=parse_optional_date(payload.get("date"), "date"),
                section=payload.get("section"),
                students=payload.get("students"),
                teacher_id=optional_int(payload.get("teacherId"), "teacherId"),
            )
            return (
                jsonify(
                    {
                        "message": result.message,
                        "recordedCount": len(result.record.students),
                        "studentsOnLeaveCount": result.on_leave_count,
                        "attendance": record_to_dict(result.record),
                    }
                ),
                201,
            )
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error recording attendance", e)

    @app.route("/attendance", methods=["GET"], endpoint="attendance_exists")
    def check_attendance_exists():
        try:
            paper_id = optional_int(request.args.get("paper"), "paper")
            section = request.args.get("section") or ""
            on_date = parse_optional_date(request.args.get("date"), "date")
            if paper_id is None or not section or on_date is None:
                raise ValidationError("Paper, section and date are required", code="missing_fields")
            return jsonify({"exists": service.check_exists(paper_id=paper_id, section=section, attendance_date=on_date)})
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error checking attendance", e)

    @app.route("/attendance/students/<int:paper_id>/<section>", methods=["GET"], endpoint="attendance_roster")
    def students_for_paper_section(paper_id: int, section: str):
        try:
            return jsonify([student_to_dict(s) for s in service.roster(paper_id, section)])
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching students", e)

    @app.route("/attendance/teacher-papers/<int:teacher_id>", methods=["GET"], endpoint="attendance_teacher_papers")
    def teacher_papers(teacher_id: int):
        try:
            return jsonify([paper_to_dict(p) for p in service.teacher_papers(teacher_id)])
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching teacher papers", e)

    @app.route("/attendance/student-detail", methods=["GET"], endpoint="attendance_student_detail")
    def student_attendance_detail():
        try:
            student_id = optional_int(request.args.get("studentId"), "studentId")
            paper_id = optional_int(request.args.get("paperId"), "paperId")
            if student_id is None or paper_id is None:
                raise ValidationError("studentId and paperId are required", code="missing_fields")
            return jsonify(
                service.student_detail(
                    student_id=student_id,
                    paper_id=paper_id,
                    section=request.args.get("section") or None,
                    start=parse_optional_date(request.args.get("startDate"), "startDate"),
                    end=parse_optional_date(request.args.get("endDate"), "endDate"),
                )
            )
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching attendance detail", e)

    @app.route(
        "/attendance/available-dates/<int:teacher_id>/<int:paper_id>/<section>",
        methods=["GET"],
        endpoint="attendance_available_dates",
    )
    def available_dates(teacher_id: int, paper_id: int, section: str):
        try:
            return jsonify(
                container.available_dates_service.available_dates(
                    teacher_id=teacher_id,
                    paper_id=paper_id,
                    section=section,
                    start=parse_optional_date(request.args.get("startDate"), "startDate"),
                    end=parse_optional_date(request.args.get("endDate"), "endDate"),
                )
            )
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching available dates", e)
