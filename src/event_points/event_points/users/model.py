from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object (no DB access code). `points` is the running balance,
    mutated only by the approval workflows.
    """

    user_id: int
    username: str
    first_name: str
    last_name: str
    password_hash: str
    role: Role
    is_active: bool = False
    is_deleted: bool = False
    points: int = 0
    push_token: Optional[str] = None
    approve_notify: bool = True
    new_event_notify: bool = True
    reminder_notify: bool = True
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def can_receive(self, *, opted_in: bool) -> bool:
        return bool(opted_in and self.push_token and self.is_active and not self.is_deleted)

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "isActive": self.is_active,
            "isDeleted": self.is_deleted,
            "point": self.points,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class NotificationSettings:
    approve_notify: bool
    new_event_notify: bool
    reminder_notify: bool

    def to_dict(self) -> dict:
        return {
            "isEventApproveNotify": self.approve_notify,
            "isNewEventNotify": self.new_event_notify,
            "isEventReminder": self.reminder_notify,
        }
