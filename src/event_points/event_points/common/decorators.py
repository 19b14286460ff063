from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable

from flask import current_app, g, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError

CONTAINER_KEY = "event_points.container"


def login_required(view: Callable) -> Callable:
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Please log in to continue")
        # Deleted or deactivated accounts lose access even with a live session.
        container = current_app.extensions[CONTAINER_KEY]
        g.current_user = container.auth_service.session_user(session["user_id"])
        return view(*args, **kwargs)

    return wrapper


def require_role(allowed_roles: Iterable[Role]) -> Callable:
    allowed = {Role(r) for r in allowed_roles}

    def decorator(view: Callable) -> Callable:
        @login_required
        @wraps(view)
        def wrapper(*args, **kwargs):
            if g.current_user.role not in allowed:
                raise AuthorizationError("You do not have permission to perform this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = require_role([Role.ADMIN])


def current_user_id() -> int:
    return int(session["user_id"])
