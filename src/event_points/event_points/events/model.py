from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import EventType


@dataclass(frozen=True)
class Event:
    """Domain entity: catalog event. `student_enrolled <= max_student` always holds."""

    event_id: int
    title: str
    description: Optional[str]
    point_value: int
    event_date: date
    event_time: str
    max_student: int
    student_enrolled: int = 0
    event_type: EventType = EventType.INSIDE
    created_at: Optional[datetime] = None

    @property
    def is_full(self) -> bool:
        return self.student_enrolled >= self.max_student

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "title": self.title,
            "description": self.description,
            "pointValue": self.point_value,
            "date": self.event_date,
            "time": self.event_time,
            "maxStudent": self.max_student,
            "studentEnrolled": self.student_enrolled,
            "eventType": self.event_type.value,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class OutsideEvent:
    """Domain entity: user-proposed event waiting for admin approval."""

    outside_event_id: int
    user_id: Optional[int]
    title: str
    description: Optional[str]
    point_value: int
    event_date: date
    approved: bool = False
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.outside_event_id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "pointValue": self.point_value,
            "date": self.event_date,
            "approved": self.approved,
            "createdAt": self.created_at,
        }


EVENT_UPDATE_FIELDS = ("title", "description", "point_value", "event_date", "event_time", "max_student", "event_type")
