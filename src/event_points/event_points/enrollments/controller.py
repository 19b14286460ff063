from __future__ import annotations

from flask import Flask

from ..common.decorators import admin_required, current_user_id, login_required
from ..common.http import json_body, optional_field, send_response
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    prefix = f"{API_PREFIX}/enrollments"

    @app.route(f"{prefix}/createEnroll/<int:event_id>", methods=["POST"], endpoint="enrollment_create")
    @login_required
    def enrollment_create(event_id: int):
        enrollment = container.enrollment_service.create_enrollment(user_id=current_user_id(), event_id=event_id)
        return send_response(201, "Enrollment created successfully", enrollment.to_dict())

    @app.route(f"{prefix}/approvePoint/<int:enrollment_id>", methods=["PUT"], endpoint="enrollment_update_status")
    @admin_required
    def enrollment_update_status(enrollment_id: int):
        payload = json_body()
        enrollment = container.enrollment_service.update_status(
            enrollment_id=enrollment_id, status=payload.get("status")
        )
        return send_response(200, "Enrollment status updated", enrollment.to_dict())

    @app.route(f"{prefix}/claim-points", methods=["PATCH"], endpoint="enrollment_claim_points")
    @login_required
    def enrollment_claim_points():
        payload = json_body()
        result = container.enrollment_service.claim_points(
            user_id=current_user_id(),
            enrollment_ids=optional_field(payload, "enrolledIds", "enrollment_ids"),
        )
        if result.auto_approved:
            message = f"Points successfully claimed! You've earned {result.points_awarded} points"
        else:
            message = "Points claimed successfully, waiting for admin approval"
        return send_response(200, message, result.to_dict())

    @app.route(f"{prefix}/AllClaimed-point", methods=["GET"], endpoint="enrollment_claimed_join")
    @admin_required
    def enrollment_claimed_join():
        rows = [d.to_dict() for d in container.enrollment_service.list_claimed_join()]
        return send_response(200, "Claimed JOIN enrollments retrieved successfully", rows)

    @app.route(f"{prefix}/me/join", methods=["GET"], endpoint="enrollment_my_joined")
    @login_required
    def enrollment_my_joined():
        rows = [d.to_dict() for d in container.enrollment_service.list_user_joined(current_user_id())]
        return send_response(200, "User join enrollments retrieved", rows)
