from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.responses import error_response, unexpected_error
from ..common.validators import optional_int
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .service import event_to_dict


def _event_fields(payload: dict) -> dict:
    return {
        "title": payload.get("title"),
        "start_date": parse_optional_date(payload.get("startDate"), "startDate"),
        "end_date": parse_optional_date(payload.get("endDate"), "endDate"),
        "event_type": payload.get("type"),
        "description": payload.get("description"),
    }


def register(app: Flask, container: Container) -> None:
    service = container.calendar_service

    @app.route("/academic-calendar", methods=["GET"], endpoint="calendar_list")
    def list_events():
        try:
            events = service.list_events(
                year=optional_int(request.args.get("year"), "year"),
                month=optional_int(request.args.get("month"), "month"),
                event_type=request.args.get("type") or None,
            )
            return jsonify([event_to_dict(e) for e in events])
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching academic calendar", e)

    @app.route("/academic-calendar", methods=["POST"], endpoint="calendar_create")
    def create_event():
        payload = request.get_json(silent=True) or {}
        try:
            event = service.create_event(**_event_fields(payload))
            return jsonify(event_to_dict(event)), 201
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error creating academic event", e)

    @app.route("/academic-calendar/<int:event_id>", methods=["PUT"], endpoint="calendar_update")
    def update_event(event_id: int):
        payload = request.get_json(silent=True) or {}
        try:
            event = service.update_event(event_id, **_event_fields(payload))
            return jsonify(event_to_dict(event))
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error updating academic event", e)

    @app.route("/academic-calendar/<int:event_id>", methods=["DELETE"], endpoint="calendar_delete")
    def delete_event(event_id: int):
        try:
            service.delete_event(event_id)
            return jsonify({"message": "Academic event deleted successfully"})
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error deleting academic event", e)

    @app.route("/academic-calendar/range/<start>/<end>", methods=["GET"], endpoint="calendar_range")
    def events_in_range(start: str, end: str):
        try:
            start_date = parse_optional_date(start, "startDate")
            end_date = parse_optional_date(end, "endDate")
            return jsonify([event_to_dict(e) for e in service.events_in_range(start_date, end_date)])
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error fetching events in range", e)

    @app.route("/academic-calendar/upcoming", methods=["GET"], endpoint="calendar_upcoming")
    def upcoming_events():
        try:
            return jsonify([event_to_dict(e) for e in service.upcoming_events()])
        except Exception as e:
            return unexpected_error("Error fetching upcoming events", e)

    @app.route("/academic-calendar/check-holiday", methods=["GET"], endpoint="calendar_check_holiday")
    def check_holiday():
        try:
            on_date = parse_optional_date(request.args.get("date"), "date")
            if on_date is None:
                raise ValidationError("Date is required", code="missing_fields")
            return jsonify(service.describe(on_date))
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            return unexpected_error("Error checking holiday", e)
