from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc, utc_day_window
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def record_attendance(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_utc()
        today = now.date()

        user = self._users.get_by_id(int(user_id))
        if not user or user.is_deleted:
            raise NotFoundError("User not found")

        if self._attendance.get_for_user_and_date(user.user_id, today):
            raise ValidationError("Attendance already recorded for today")

        attendance_id = self._attendance.create_present(user_id=user.user_id, attendance_date=today, created_at=now)
        if not attendance_id:
            raise ValidationError("Attendance already recorded for today")

        return self._attendance.get_for_user_and_date(user.user_id, today)

    def list_by_date(self, day: date) -> Sequence[dict]:
        start, end = utc_day_window(day)
        return self._attendance.list_in_window(start=start, end=end)


def require_present_on(attendance: AttendanceRepository, *, user_id: int, day: date, message: str) -> AttendanceRecord:
    """PRESENT record created inside the UTC calendar day of `day`, or ValidationError."""
    start, end = utc_day_window(day)
    record = attendance.find_present_in_window(user_id=int(user_id), start=start, end=end)
    if not record:
        raise ValidationError(message)
    return record
