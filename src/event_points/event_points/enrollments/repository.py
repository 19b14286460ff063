from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import EnrollmentStatus
from .model import Enrollment, EnrollmentDetail, ReminderCandidate


class EnrollmentRepository(Protocol):
    def get_by_id(self, enrollment_id: int, *, for_update: bool = False) -> Optional[Enrollment]:
        raise NotImplementedError

    def get_many(self, enrollment_ids: Sequence[int], *, for_update: bool = False) -> Sequence[Enrollment]:
        raise NotImplementedError

    def exists(self, *, user_id: int, event_id: int) -> bool:
        raise NotImplementedError

    def create(self, *, user_id: int, event_id: int, created_at: datetime) -> int:
        """Insert a JOIN enrollment; returns 0 when (user, event) already exists."""

        raise NotImplementedError

    def set_status(self, enrollment_id: int, status: EnrollmentStatus, *, expected: EnrollmentStatus) -> bool:
        """Compare-and-set on status; False if the row moved on meanwhile."""

        raise NotImplementedError

    def mark_claimed(self, enrollment_id: int) -> bool:
        """Set claim_point; False if it was already set."""

        raise NotImplementedError

    def list_claimed_join(self) -> Sequence[EnrollmentDetail]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, status: EnrollmentStatus) -> Sequence[EnrollmentDetail]:
        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[EnrollmentDetail]:
        raise NotImplementedError

    def event_ids_for_user(self, user_id: int) -> set[int]:
        raise NotImplementedError

    def list_reminder_candidates(self, *, start_date: date, end_date: date) -> Sequence[ReminderCandidate]:
        """Unreminded enrollments of opted-in users for events dated in [start_date, end_date]."""

        raise NotImplementedError

    def mark_reminded(self, enrollment_ids: Iterable[int], *, at: datetime) -> int:
        raise NotImplementedError
