from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date, today_local
from ..common.responses import error_response, unexpected_error
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .service import setting_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/semester/settings/<department>", methods=["GET"], endpoint="semester_settings_list")
    def list_settings(department: str):
        try:
            settings = container.semester_service.list_settings(
                department=department,
                academic_year=request.args.get("academicYear") or None,
            )
            return jsonify({"settings": [setting_to_dict(s) for s in settings], "count": len(settings)})
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching semester settings", e)

    @app.route("/semester/settings", methods=["POST"], endpoint="semester_settings_save")
    def save_settings():
        payload = request.get_json(silent=True) or {}
        try:
            setting, created = container.semester_service.save_settings(
                department=payload.get("department") or "",
                academic_year=payload.get("academicYear") or "",
                semester=payload.get("semester") or "",
                start_date=parse_optional_date(payload.get("startDate"), "startDate"),
                end_date=parse_optional_date(payload.get("endDate"), "endDate"),
                description=payload.get("description") or "",
            )
            message = "Semester settings created successfully" if created else "Semester settings updated successfully"
            return jsonify({"message": message, "settings": setting_to_dict(setting)}), 201 if created else 200
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error saving semester settings", e)

    @app.route("/semester/settings/<int:setting_id>", methods=["DELETE"], endpoint="semester_settings_delete")
    def delete_settings(setting_id: int):
        try:
            container.semester_service.delete_settings(setting_id=setting_id)
            return jsonify({"message": "Semester settings deleted successfully"})
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error deleting semester settings", e)

    @app.route("/semester/validate-date/<department>/<semester>", methods=["GET"], endpoint="semester_validate_date")
    def validate_date(department: str, semester: str):
        try:
            on_date = parse_optional_date(request.args.get("date"), "date")
            academic_year = request.args.get("academicYear") or ""
            if on_date is None or not academic_year:
                raise ValidationError("Date and academicYear are required", code="missing_fields")
            return jsonify(
                container.semester_service.check_date(
                    department=department, semester=semester, academic_year=academic_year, on_date=on_date
                )
            )
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error validating date", e)

    @app.route("/semester/current/<department>", methods=["GET"], endpoint="semester_current")
    def current_semester(department: str):
        try:
            academic_year = request.args.get("academicYear") or ""
            if not academic_year:
                raise ValidationError("academicYear is required", code="missing_fields")
            today = parse_optional_date(request.args.get("date"), "date") or today_local()
            active = container.semester_service.current_semester(
                department=department, academic_year=academic_year, today=today
            )
            if active is None:
                return jsonify({"activeSemester": None, "message": "No active semester found for current date"})
            return jsonify({"activeSemester": setting_to_dict(active), "message": "Active semester found"})
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error finding active semester", e)
