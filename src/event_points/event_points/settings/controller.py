from __future__ import annotations

from flask import Flask

from ..common.decorators import admin_required
from ..common.http import json_body, optional_field, send_response
from ..common.validators import require_bool
from ..container import Container
from ..core.constants import API_PREFIX
from .model import SETTINGS_FIELDS


def register(app: Flask, container: Container) -> None:
    prefix = f"{API_PREFIX}/event"

    @app.route(f"{prefix}/admin-settings", methods=["GET"], endpoint="get_admin_settings")
    @admin_required
    def get_admin_settings():
        settings = container.settings_service.get_settings()
        return send_response(200, "Admin settings retrieved successfully", settings.to_dict())

    @app.route(f"{prefix}/admin-settings", methods=["PUT"], endpoint="update_admin_settings")
    @admin_required
    def update_admin_settings():
        payload = json_body()
        changes = {}
        for field, aliases in SETTINGS_FIELDS.items():
            value = optional_field(payload, *aliases)
            if value is not None:
                changes[field] = require_bool(value, aliases[0])

        settings = container.settings_service.update_settings(**changes)
        return send_response(200, "Admin settings updated successfully", settings.to_dict())
