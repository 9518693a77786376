from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.responses import error_response, unexpected_error
from ..common.validators import optional_int
from ..core.exceptions import DomainError
from ..container import Container
from .service import slot_to_dict


def _slot_changes(payload: dict) -> dict:
    """Map the wire field names onto TimeSchedule attributes."""
    return {
        "department": payload.get("department"),
        "semester": payload.get("semester"),
        "year": payload.get("year"),
        "day": payload.get("day"),
        "hour": payload.get("hour"),
        "paper_id": payload.get("paper"),
        "teacher_id": payload.get("teacher"),
        "section": payload.get("section"),
        "room": payload.get("room"),
        "is_active": payload.get("isActive"),
    }


def register(app: Flask, container: Container) -> None:
    service = container.timetable_service

    @app.route("/time-schedule", methods=["POST"], endpoint="time_schedule_add")
    def add_time_schedule():
        payload = request.get_json(silent=True) or {}
        try:
            slot = service.add_slot(
                department=payload.get("department") or "",
                semester=payload.get("semester") or "",
                year=payload.get("year") or "",
                day=payload.get("day") or "",
                hour=str(payload.get("hour") or ""),
                paper_id=optional_int(payload.get("paper"), "paper"),
                teacher_id=optional_int(payload.get("teacher"), "teacher"),
                section=payload.get("section") or "",
                room=payload.get("room"),
            )
            return (
                jsonify(
                    {
                        "message": f"Time schedule added for {slot.day} Hour {slot.hour} Section {slot.section}",
                        "timeSchedule": slot_to_dict(slot),
                    }
                ),
                201,
            )
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error adding time schedule", e)

    @app.route(
        "/time-schedule/generate/<department>/<semester>/<year>",
        methods=["POST"],
        endpoint="time_schedule_generate",
    )
    def generate_timetable(department: str, semester: str, year: str):
        try:
            return jsonify(service.generate(department=department, semester=semester, year=year)), 201
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error generating timetable", e)

    @app.route("/time-schedule/<int:schedule_id>", methods=["GET"], endpoint="time_schedule_get")
    def get_time_schedule(schedule_id: int):
        try:
            return jsonify(slot_to_dict(service.get_slot(schedule_id)))
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching time schedule", e)

    @app.route("/time-schedule/<int:schedule_id>", methods=["PATCH"], endpoint="time_schedule_update")
    def update_time_schedule(schedule_id: int):
        payload = request.get_json(silent=True) or {}
        try:
            slot = service.update_slot(schedule_id, _slot_changes(payload))
            return jsonify({"message": "Time schedule updated successfully", "timeSchedule": slot_to_dict(slot)})
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error updating time schedule", e)

    @app.route("/time-schedule/<int:schedule_id>", methods=["DELETE"], endpoint="time_schedule_delete")
    def delete_time_schedule(schedule_id: int):
        try:
            service.delete_slot(schedule_id)
            return jsonify({"message": "Time schedule deleted successfully"})
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error deleting time schedule", e)

    @app.route("/time-schedule/teacher/<int:teacher_id>", methods=["GET"], endpoint="time_schedule_by_teacher")
    def time_schedules_by_teacher(teacher_id: int):
        try:
            return jsonify([slot_to_dict(s) for s in service.list_for_teacher(teacher_id)])
        except Exception as e:
            return unexpected_error("Error fetching timetable", e)

    @app.route("/time-schedule/department/<department>", methods=["GET"], endpoint="time_schedule_by_department")
    def time_schedules_by_department(department: str):
        try:
            return jsonify([slot_to_dict(s) for s in service.list_for_department(department)])
        except Exception as e:
            return unexpected_error("Error fetching timetable", e)

    @app.route(
        "/time-schedule/section/<department>/<semester>/<year>/<section>",
        methods=["GET"],
        endpoint="time_schedule_by_section",
    )
    def timetable_by_section(department: str, semester: str, year: str, section: str):
        try:
            return jsonify(
                service.section_timetable(department=department, semester=semester, year=year, section=section)
            )
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching section timetable", e)

    @app.route("/attendance/timetable-papers/<int:teacher_id>", methods=["GET"], endpoint="timetable_papers")
    def timetable_papers(teacher_id: int):
        try:
            papers = service.timetable_papers(teacher_id)
            if not papers:
                return jsonify(
                    {
                        "papers": [],
                        "message": "No timetable found. Please contact admin to generate your timetable first.",
                    }
                )
            return jsonify({"papers": papers, "totalPapers": len(papers), "message": "Papers loaded from timetable"})
        except Exception as e:
            return unexpected_error("Error fetching timetable-based papers", e)
