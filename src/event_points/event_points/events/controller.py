from __future__ import annotations

from flask import Flask

from ..common.decorators import admin_required, current_user_id, login_required
from ..common.http import json_body, optional_field, send_response
from ..container import Container
from ..core.constants import API_PREFIX

# Request body keys (camelCase, snake_case accepted) per Event field.
_EVENT_FIELDS = {
    "title": ("title",),
    "description": ("description",),
    "point_value": ("pointValue", "point_value"),
    "event_date": ("date", "event_date"),
    "event_time": ("time", "event_time"),
    "max_student": ("maxStudent", "max_student"),
    "event_type": ("eventType", "event_type"),
}


def _event_changes(payload: dict) -> dict:
    changes = {}
    for field, aliases in _EVENT_FIELDS.items():
        for alias in aliases:
            if alias in payload:
                changes[field] = payload[alias]
                break
    return changes


def register(app: Flask, container: Container) -> None:
    prefix = f"{API_PREFIX}/event"

    @app.route(f"{prefix}/create-event", methods=["POST"], endpoint="event_create")
    @admin_required
    def event_create():
        fields = _event_changes(json_body())
        event = container.event_service.create_event(
            title=fields.get("title"),
            description=fields.get("description"),
            point_value=fields.get("point_value"),
            event_date=fields.get("event_date"),
            event_time=fields.get("event_time"),
            max_student=fields.get("max_student"),
            event_type=fields.get("event_type"),
        )
        return send_response(201, "Event created successfully", event.to_dict())

    @app.route(f"{prefix}/update-event/<int:event_id>", methods=["PUT"], endpoint="event_update")
    @admin_required
    def event_update(event_id: int):
        event = container.event_service.update_event(event_id, _event_changes(json_body()))
        return send_response(200, "Event updated successfully", event.to_dict())

    @app.route(f"{prefix}/<int:event_id>", methods=["DELETE"], endpoint="event_delete")
    @admin_required
    def event_delete(event_id: int):
        container.event_service.delete_event(event_id)
        return send_response(200, "Event deleted successfully", None)

    @app.route(prefix, methods=["GET"], endpoint="event_list")
    @login_required
    def event_list():
        events = [e.to_dict() for e in container.event_service.list_events()]
        return send_response(200, "Events retrieved successfully", events)

    @app.route(f"{prefix}/<int:event_id>", methods=["GET"], endpoint="event_detail")
    @login_required
    def event_detail(event_id: int):
        return send_response(200, "Event retrieved successfully", container.event_service.get_event(event_id))

    @app.route(f"{prefix}/upcoming", methods=["GET"], endpoint="event_upcoming")
    @login_required
    def event_upcoming():
        rows = container.event_service.list_upcoming(current_user_id())
        return send_response(200, "Upcoming events retrieved successfully", rows)

    @app.route(f"{prefix}/attended-by-user", methods=["GET"], endpoint="event_attended_by_user")
    @login_required
    def event_attended_by_user():
        data = container.event_service.attended_with_stats(current_user_id())
        return send_response(200, "Attended events retrieved successfully", data)

    @app.route(f"{prefix}/joined-by-user", methods=["GET"], endpoint="event_joined_by_user")
    @login_required
    def event_joined_by_user():
        data = container.event_service.joined_with_stats(current_user_id())
        return send_response(200, "Joined events retrieved successfully", data)

    @app.route(f"{prefix}/create-outside-event", methods=["POST"], endpoint="outside_event_create")
    @login_required
    def outside_event_create():
        fields = _event_changes(json_body())
        event = container.outside_event_service.create_outside_event(
            user_id=current_user_id(),
            title=fields.get("title"),
            description=fields.get("description"),
            point_value=fields.get("point_value"),
            event_date=fields.get("event_date"),
        )
        return send_response(201, "Outside event created successfully", event.to_dict())

    @app.route(f"{prefix}/unapproved-outside-event", methods=["GET"], endpoint="outside_event_unapproved")
    @admin_required
    def outside_event_unapproved():
        rows = container.outside_event_service.list_unapproved()
        return send_response(200, "Unapproved outside events retrieved successfully", rows)

    @app.route(f"{prefix}/approve-or-reject-outside-event", methods=["PATCH"], endpoint="outside_event_decide")
    @admin_required
    def outside_event_decide():
        payload = json_body()
        result = container.outside_event_service.decide(
            outside_event_id=optional_field(payload, "eventId", "outside_event_id"),
            decision=optional_field(payload, "isActiveOrReject", "decision"),
        )
        if result.get("deleted"):
            return send_response(200, "Event rejected and deleted", result)
        return send_response(200, "Event approved and points awarded", result)

    @app.route(f"{prefix}/outside-approved-by-user", methods=["GET"], endpoint="outside_event_approved_by_user")
    @login_required
    def outside_event_approved_by_user():
        data = container.outside_event_service.approved_summary(current_user_id())
        return send_response(200, "Approved outside events retrieved successfully", data)

    @app.route(f"{prefix}/delete-outside-event/<int:outside_event_id>", methods=["DELETE"], endpoint="outside_event_delete")
    @admin_required
    def outside_event_delete(outside_event_id: int):
        container.outside_event_service.delete_unapproved(outside_event_id)
        return send_response(200, "Unapproved outside event deleted successfully", None)
