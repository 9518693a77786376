from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.responses import error_response, unexpected_error
from ..common.validators import optional_float, optional_int
from ..core.exceptions import DomainError
from ..container import Container
from .service import ReportFilters


def _filters_from_args() -> ReportFilters:
    return ReportFilters(
        section=request.args.get("section") or None,
        name=request.args.get("name") or None,
        min_percent=optional_float(request.args.get("minPercent"), "minPercent"),
        max_percent=optional_float(request.args.get("maxPercent"), "maxPercent"),
        start_date=parse_optional_date(request.args.get("startDate"), "startDate"),
        end_date=parse_optional_date(request.args.get("endDate"), "endDate"),
    )


def _paper_ids_from_args() -> list[int]:
    raw = request.args.get("paperIds") or ""
    ids = [optional_int(part, "paperIds") for part in raw.split(",")]
    return [i for i in ids if i is not None]


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/attendance/percentage/<int:student_id>", methods=["GET"], endpoint="report_student_percentage")
    def student_percentage(student_id: int):
        try:
            return jsonify(reports.student_percentage(student_id))
        except Exception as e:
            return unexpected_error("Error calculating attendance percentage", e)

    @app.route("/attendance/department-report/<department>", methods=["GET"], endpoint="report_department")
    def department_report(department: str):
        try:
            return jsonify(reports.department_report(department))
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error generating department report", e)

    @app.route("/attendance/paper-report/<int:paper_id>", methods=["GET"], endpoint="report_paper")
    def paper_report(paper_id: int):
        try:
            return jsonify(reports.paper_report(paper_id, _filters_from_args()))
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error generating paper report", e)

    @app.route("/attendance/paper-report", methods=["GET"], endpoint="report_multi_paper")
    def multi_paper_report():
        try:
            return jsonify(reports.multi_paper_report(_paper_ids_from_args(), _filters_from_args()))
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error generating multi-paper report", e)

    @app.route("/attendance/student-summary/<int:student_id>", methods=["GET"], endpoint="report_student_summary")
    def student_summary(student_id: int):
        try:
            return jsonify(reports.student_summary(student_id))
        except Exception as e:
            return unexpected_error("Error fetching student summary", e)

    @app.route(
        "/attendance/paper/<int:paper_id>/section/<section>/export",
        methods=["GET"],
        endpoint="report_attendance_sheet_export",
    )
    def export_attendance_sheet(paper_id: int, section: str):
        try:
            sheet = reports.attendance_sheet(
                paper_id=paper_id,
                section=section,
                start=parse_optional_date(request.args.get("startDate"), "startDate"),
                end=parse_optional_date(request.args.get("endDate"), "endDate"),
            )
            rendered = container.report_renderer.render(sheet)
            return app.response_class(
                rendered.content,
                mimetype=rendered.mimetype,
                headers={"Content-Disposition": f"attachment; filename={rendered.filename}"},
            )
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error exporting attendance sheet", e)
