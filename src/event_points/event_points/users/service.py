from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_int, require_min_length, require_non_empty, require_pattern
from ..core.constants import DEFAULT_TOP_USERS, MIN_PASSWORD_LENGTH, USERNAME_PATTERN
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..database.transaction import UnitOfWork
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.outbox import NotificationOutbox
from .model import NotificationSettings, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    username: str
    full_name: str
    role: Role


class AuthService:
    """Use cases: register, log in, change password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def register(
        self,
        *,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        push_token: Optional[str] = None,
    ) -> User:
        username = require_pattern(
            username,
            "Username",
            USERNAME_PATTERN,
            "Username must be 3-20 characters long and contain only letters, numbers, or underscores",
        )
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_username(username):
            raise ValidationError("Username is already registered")

        user_id = self._users.create_user(
            username=username,
            first_name=first_name,
            last_name=last_name,
            password_hash=generate_password_hash(password),
            role=Role.USER,
            is_active=False,
            push_token=optional_text(push_token),
        )
        logger.info("Registered user %s (id=%s), pending activation", username, user_id)
        return self._users.get_by_id(user_id)

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or user.is_deleted or not password:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthorizationError("Your account is not active yet")

        return SessionUser(user_id=user.user_id, username=user.username, full_name=user.full_name, role=user.role)

    def session_user(self, user_id: int) -> User:
        """Re-check a logged-in user on each request."""
        user = self._users.get_by_id(int(user_id))
        if not user or user.is_deleted:
            raise AuthorizationError("Your account is no longer available")
        if not user.is_active:
            raise AuthorizationError("Your account is not active")
        return user

    def change_password(self, *, user_id: int, old_password: str, new_password: str) -> None:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.is_deleted:
            raise ValidationError("The account is deleted")
        if not check_password_hash(user.password_hash, old_password or ""):
            raise ValidationError("Old password is incorrect")

        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        self._users.update_password(user_id, password_hash=generate_password_hash(new_password))


class UserService:
    """Use cases: profile, notification toggles and admin account management."""

    def __init__(self, users: UserRepository, uow: UnitOfWork, dispatcher: NotificationDispatcher):
        self._users = users
        self._uow = uow
        self._dispatcher = dispatcher

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user or user.is_deleted:
            raise NotFoundError("User not found")
        return user

    def get_profile(self, user_id: int) -> User:
        return self._require_user(user_id)

    def update_profile(
        self,
        *,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        push_token: Optional[str] = None,
    ) -> User:
        self._require_user(user_id)
        first_name = optional_text(first_name)
        last_name = optional_text(last_name)
        push_token = optional_text(push_token)
        if first_name is None and last_name is None and push_token is None:
            raise ValidationError("No valid fields to update")

        self._users.update_profile(user_id, first_name=first_name, last_name=last_name, push_token=push_token)
        return self._require_user(user_id)

    def get_notification_settings(self, user_id: int) -> NotificationSettings:
        user = self._require_user(user_id)
        return NotificationSettings(
            approve_notify=user.approve_notify,
            new_event_notify=user.new_event_notify,
            reminder_notify=user.reminder_notify,
        )

    def update_notification_settings(
        self,
        *,
        user_id: int,
        approve_notify: Optional[bool] = None,
        new_event_notify: Optional[bool] = None,
        reminder_notify: Optional[bool] = None,
    ) -> NotificationSettings:
        self._require_user(user_id)
        if approve_notify is None and new_event_notify is None and reminder_notify is None:
            raise ValidationError("No valid fields to update")

        self._users.update_notification_settings(
            user_id,
            approve_notify=approve_notify,
            new_event_notify=new_event_notify,
            reminder_notify=reminder_notify,
        )
        return self.get_notification_settings(user_id)

    def activate_account(self, *, user_id: int) -> User:
        outbox = NotificationOutbox()
        with self._uow.begin() as tx:
            user = tx.users.get_by_id(int(user_id), for_update=True)
            if not user:
                raise NotFoundError("User not found")
            if user.is_deleted:
                raise ValidationError("User is deleted")
            if user.is_active:
                raise ValidationError("Account is already active")

            tx.users.set_active(user.user_id, is_active=True)
            outbox.add(
                user.push_token,
                "Registration Approved!",
                "Your account has been approved. You can now log in.",
                {"status": "approved"},
            )

        outbox.flush(self._dispatcher)
        return self._require_user(user_id)

    def soft_delete_user(self, *, user_id: int) -> None:
        user = self._require_user(user_id)
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")
        if not self._users.soft_delete(user.user_id):
            raise ValidationError("Deleting the user failed")

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def list_inactive_users(self) -> Sequence[User]:
        return self._users.list_inactive()

    def top_users_by_points(self, limit: int = DEFAULT_TOP_USERS) -> Sequence[User]:
        return self._users.top_by_points(require_int(limit, "limit", min_value=1))
