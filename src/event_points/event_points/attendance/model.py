from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one daily self check-in (timestamps are UTC)."""

    attendance_id: int
    user_id: int
    attendance_date: date
    status: AttendanceStatus
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "userId": self.user_id,
            "attendence": self.status.value,
            "date": self.attendance_date,
            "createdAt": self.created_at,
        }
