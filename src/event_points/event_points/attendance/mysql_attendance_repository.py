from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        created_at=r["created_at"],
    )


class MySQLAttendanceRepository(MySQLRepository, AttendanceRepository):
    def get_for_user_and_date(self, user_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT attendance_id, user_id, attendance_date, status, created_at
                FROM attendance_records
                WHERE user_id=%s AND attendance_date=%s
                """,
                (int(user_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_present(self, *, user_id: int, attendance_date: date, created_at: datetime) -> int:
        with self._cursor() as cur:
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, attendance_date, status, created_at)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(user_id), attendance_date, AttendanceStatus.PRESENT.value, created_at),
                )
            except mysql_errors.IntegrityError:
                # uq_attendance_user_day: a concurrent check-in won.
                return 0
            return int(cur.lastrowid)

    def find_present_in_window(self, *, user_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT attendance_id, user_id, attendance_date, status, created_at
                FROM attendance_records
                WHERE user_id=%s AND status=%s AND created_at BETWEEN %s AND %s
                ORDER BY created_at ASC
                LIMIT 1
                """,
                (int(user_id), AttendanceStatus.PRESENT.value, start, end),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_in_window(self, *, start: datetime, end: datetime) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT a.attendance_id, a.user_id, a.attendance_date, a.status, a.created_at,
                       u.username, u.first_name, u.last_name
                FROM attendance_records a
                JOIN users u ON u.user_id = a.user_id
                WHERE a.created_at BETWEEN %s AND %s
                ORDER BY a.created_at ASC
                """,
                (start, end),
            )
            out: list[dict] = []
            for r in fetchall(cur):
                row = _to_record(r).to_dict()
                row["user"] = {
                    "id": int(r["user_id"]),
                    "username": r["username"],
                    "firstName": r.get("first_name") or "",
                    "lastName": r.get("last_name") or "",
                }
                out.append(row)
            return out
