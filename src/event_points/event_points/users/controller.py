from __future__ import annotations

from flask import Flask, request, session

from ..common.decorators import admin_required, current_user_id, login_required
from ..common.http import json_body, optional_field, send_response
from ..common.validators import require_bool
from ..container import Container
from ..core.constants import API_PREFIX, DEFAULT_TOP_USERS
from ..core.exceptions import ValidationError


def _users_view(users) -> list[dict]:
    return [u.to_public_dict() for u in users]


def register(app: Flask, container: Container) -> None:
    prefix = f"{API_PREFIX}/auth"

    @app.route(f"{prefix}/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        payload = json_body()
        user = container.auth_service.register(
            username=payload.get("username", ""),
            password=payload.get("password", ""),
            first_name=optional_field(payload, "firstName", "first_name") or "",
            last_name=optional_field(payload, "lastName", "last_name") or "",
            push_token=optional_field(payload, "fcmToken", "push_token"),
        )
        return send_response(201, "User registered successfully, waiting for admin activation", user.to_public_dict())

    @app.route(f"{prefix}/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        payload = json_body()
        s_user = container.auth_service.authenticate(payload.get("username", ""), payload.get("password", ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["role"] = s_user.role.value
        session["name"] = s_user.full_name

        data = {"id": s_user.user_id, "username": s_user.username, "name": s_user.full_name, "role": s_user.role.value}
        return send_response(200, "Logged in successfully", data)

    @app.route(f"{prefix}/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return send_response(200, "Logged out", None)

    @app.route(f"{prefix}/change-password", methods=["PATCH"], endpoint="auth_change_password")
    @login_required
    def auth_change_password():
        payload = json_body()
        container.auth_service.change_password(
            user_id=current_user_id(),
            old_password=optional_field(payload, "oldPassword", "old_password") or "",
            new_password=optional_field(payload, "newPassword", "new_password") or "",
        )
        return send_response(200, "Password changed successfully", None)

    @app.route(f"{prefix}/activate-account/<int:user_id>", methods=["PUT"], endpoint="auth_activate_account")
    @admin_required
    def auth_activate_account(user_id: int):
        user = container.user_service.activate_account(user_id=user_id)
        return send_response(200, "Account activated successfully", user.to_public_dict())

    @app.route(f"{prefix}/update-profile", methods=["PATCH"], endpoint="auth_update_profile")
    @login_required
    def auth_update_profile():
        payload = json_body()
        user = container.user_service.update_profile(
            user_id=current_user_id(),
            first_name=optional_field(payload, "firstname", "firstName", "first_name"),
            last_name=optional_field(payload, "lastname", "lastName", "last_name"),
            push_token=optional_field(payload, "fcmToken", "push_token"),
        )
        return send_response(200, "Profile updated successfully", user.to_public_dict())

    @app.route(f"{prefix}/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        user = container.user_service.get_profile(current_user_id())
        return send_response(200, "User retrieved successfully", user.to_public_dict())

    @app.route(f"{prefix}/all-users", methods=["GET"], endpoint="auth_all_users")
    @admin_required
    def auth_all_users():
        return send_response(200, "Users retrieved successfully", _users_view(container.user_service.list_users()))

    @app.route(f"{prefix}/top-users", methods=["GET"], endpoint="auth_top_users")
    @admin_required
    def auth_top_users():
        limit = request.args.get("limit", DEFAULT_TOP_USERS)
        users = container.user_service.top_users_by_points(limit)
        return send_response(200, "Top users retrieved successfully", _users_view(users))

    @app.route(f"{prefix}/not-activated-users", methods=["GET"], endpoint="auth_not_activated_users")
    @admin_required
    def auth_not_activated_users():
        users = container.user_service.list_inactive_users()
        return send_response(200, "Not activated users retrieved successfully", _users_view(users))

    @app.route(f"{prefix}/users/<int:user_id>", methods=["DELETE"], endpoint="auth_delete_user")
    @admin_required
    def auth_delete_user(user_id: int):
        container.user_service.soft_delete_user(user_id=user_id)
        return send_response(200, "User deleted successfully", None)

    @app.route(f"{API_PREFIX}/event/update-notification-settings", methods=["PUT"], endpoint="user_notification_update")
    @login_required
    def user_notification_update():
        payload = json_body()
        toggles = {}
        for field, aliases in (
            ("approve_notify", ("isEventApproveNotify", "approve_notify")),
            ("new_event_notify", ("isNewEventNotify", "new_event_notify")),
            ("reminder_notify", ("isEventReminder", "reminder_notify")),
        ):
            value = optional_field(payload, *aliases)
            if value is not None:
                toggles[field] = require_bool(value, aliases[0])
        if not toggles:
            raise ValidationError("No valid fields to update")

        settings = container.user_service.update_notification_settings(user_id=current_user_id(), **toggles)
        return send_response(200, "Notification toggle updated", settings.to_dict())

    @app.route(f"{API_PREFIX}/event/user-settings", methods=["GET"], endpoint="user_notification_settings")
    @login_required
    def user_notification_settings():
        settings = container.user_service.get_notification_settings(current_user_id())
        return send_response(200, "User notification settings retrieved successfully", settings.to_dict())
