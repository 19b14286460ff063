from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EnrollmentStatus
from ..events.model import Event


@dataclass(frozen=True)
class Enrollment:
    """Domain entity: a user's seat in an event plus its workflow state.

    `claim_point` only ever goes False -> True.
    """

    enrollment_id: int
    user_id: int
    event_id: int
    status: EnrollmentStatus = EnrollmentStatus.JOIN
    claim_point: bool = False
    reminder_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.enrollment_id,
            "userId": self.user_id,
            "eventId": self.event_id,
            "status": self.status.value,
            "claimPoint": self.claim_point,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class EnrollmentDetail:
    """Read model for listings: enrollment with its event (and owner summary)."""

    enrollment: Enrollment
    event: Event
    user: Optional[dict] = None

    def to_dict(self) -> dict:
        row = self.enrollment.to_dict()
        row["event"] = self.event.to_dict()
        if self.user is not None:
            row["user"] = self.user
        return row


@dataclass(frozen=True)
class ReminderCandidate:
    enrollment_id: int
    user_id: int
    push_token: str
    event: Event
