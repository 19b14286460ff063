from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EventType
from .model import Event, OutsideEvent


class EventRepository(Protocol):
    def get_by_id(self, event_id: int, *, for_update: bool = False) -> Optional[Event]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        point_value: int,
        event_date: date,
        event_time: str,
        max_student: int,
        event_type: EventType,
    ) -> int:
        raise NotImplementedError

    def update(self, event_id: int, changes: dict) -> bool:
        """Apply a partial update; keys are Event field names."""

        raise NotImplementedError

    def delete(self, event_id: int) -> bool:
        raise NotImplementedError

    def reserve_seat(self, event_id: int) -> bool:
        """Atomically increment `student_enrolled` if a seat is left.

        Returns False when the event is full (or missing).
        """

        raise NotImplementedError

    def list_all(self) -> Sequence[Event]:
        raise NotImplementedError

    def list_from(self, day: date) -> Sequence[Event]:
        """Events dated `day` or later, soonest first."""

        raise NotImplementedError


class OutsideEventRepository(Protocol):
    def get_by_id(self, outside_event_id: int, *, for_update: bool = False) -> Optional[OutsideEvent]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        title: str,
        description: Optional[str],
        point_value: int,
        event_date: date,
    ) -> int:
        raise NotImplementedError

    def list_unapproved(self) -> Sequence[dict]:
        """Pending events joined with their owner, newest first."""

        raise NotImplementedError

    def list_approved_for_user(self, user_id: int) -> Sequence[OutsideEvent]:
        raise NotImplementedError

    def mark_approved(self, outside_event_id: int) -> bool:
        """Flip approved false -> true; False if already approved or missing."""

        raise NotImplementedError

    def delete_unapproved(self, outside_event_id: int) -> bool:
        raise NotImplementedError
