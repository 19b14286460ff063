from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int, *, for_update: bool = False) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        username: str,
        first_name: str,
        last_name: str,
        password_hash: str,
        role: Role,
        is_active: bool,
        push_token: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def soft_delete(self, user_id: int) -> bool:
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def update_profile(
        self,
        user_id: int,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        push_token: Optional[str] = None,
    ) -> bool:
        """None means "leave unchanged"."""

        raise NotImplementedError

    def update_notification_settings(
        self,
        user_id: int,
        *,
        approve_notify: Optional[bool] = None,
        new_event_notify: Optional[bool] = None,
        reminder_notify: Optional[bool] = None,
    ) -> bool:
        raise NotImplementedError

    def add_points(self, user_id: int, delta: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_inactive(self) -> Sequence[User]:
        raise NotImplementedError

    def top_by_points(self, limit: int) -> Sequence[User]:
        raise NotImplementedError

    def list_new_event_push_tokens(self) -> Sequence[str]:
        """Tokens of active users who opted in to new-event notifications."""

        raise NotImplementedError

    def clear_push_tokens(self, tokens: Iterable[str]) -> int:
        raise NotImplementedError
