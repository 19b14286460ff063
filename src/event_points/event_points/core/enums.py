from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for access control."""

    ADMIN = "ADMIN"
    USER = "USER"


class EnrollmentStatus(str, Enum):
    """Workflow status of a user's enrollment in an event."""

    JOIN = "JOIN"
    SCANNED = "SCANNED"
    ATTENDED = "ATTENDED"
    REJECTED = "REJECTED"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"


class EventType(str, Enum):
    INSIDE = "INSIDE"
    OUTSIDE = "OUTSIDE"


class OutsideEventDecision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
