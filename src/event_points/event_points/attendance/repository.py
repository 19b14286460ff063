from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_present(self, *, user_id: int, attendance_date: date, created_at: datetime) -> int:
        """Insert a PRESENT record; returns 0 when one already exists for that day."""

        raise NotImplementedError

    def find_present_in_window(self, *, user_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_in_window(self, *, start: datetime, end: datetime) -> Sequence[dict]:
        """Records in [start, end] joined with user names, oldest first."""

        raise NotImplementedError
