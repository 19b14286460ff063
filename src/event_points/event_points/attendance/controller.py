from __future__ import annotations

from flask import Flask, request

from ..common.decorators import admin_required, current_user_id, login_required
from ..common.http import send_response
from ..common.validators import require_date
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    prefix = f"{API_PREFIX}/auth"

    @app.route(f"{prefix}/record-attendance", methods=["POST"], endpoint="record_attendance")
    @login_required
    def record_attendance():
        record = container.attendance_service.record_attendance(current_user_id())
        return send_response(201, "Attendance recorded successfully", record.to_dict())

    @app.route(f"{prefix}/attendance-by-date", methods=["GET"], endpoint="attendance_by_date")
    @admin_required
    def attendance_by_date():
        day = require_date(request.args.get("date"), "date")
        rows = container.attendance_service.list_by_date(day)
        return send_response(200, "Attendance retrieved successfully", rows)
