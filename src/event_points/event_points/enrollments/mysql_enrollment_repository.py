from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import EnrollmentStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone, in_clause
from ..events.mysql_event_repository import row_to_event
from .model import Enrollment, EnrollmentDetail, ReminderCandidate
from .repository import EnrollmentRepository

_ENROLLMENT_COLUMNS = "enrollment_id, user_id, event_id, status, claim_point, reminder_sent_at, created_at"

# Event columns keep their own names; enrollment/user ones are aliased.
_DETAIL_SELECT = """
    SELECT n.enrollment_id, n.user_id AS n_user_id, n.status, n.claim_point,
           n.reminder_sent_at, n.created_at AS n_created_at,
           ev.event_id, ev.title, ev.description, ev.point_value, ev.event_date, ev.event_time,
           ev.max_student, ev.student_enrolled, ev.event_type, ev.created_at,
           u.username AS u_username, u.first_name AS u_first_name, u.last_name AS u_last_name,
           u.points AS u_points, u.push_token AS u_push_token
    FROM enrollments n
    JOIN events ev ON ev.event_id = n.event_id
    JOIN users u ON u.user_id = n.user_id
"""


def _to_enrollment(r: dict) -> Enrollment:
    return Enrollment(
        enrollment_id=int(r["enrollment_id"]),
        user_id=int(r["user_id"]),
        event_id=int(r["event_id"]),
        status=EnrollmentStatus(r["status"]),
        claim_point=bool(r.get("claim_point", False)),
        reminder_sent_at=r.get("reminder_sent_at"),
        created_at=r.get("created_at"),
    )


def _to_detail(r: dict, *, with_user: bool) -> EnrollmentDetail:
    enrollment = Enrollment(
        enrollment_id=int(r["enrollment_id"]),
        user_id=int(r["n_user_id"]),
        event_id=int(r["event_id"]),
        status=EnrollmentStatus(r["status"]),
        claim_point=bool(r.get("claim_point", False)),
        reminder_sent_at=r.get("reminder_sent_at"),
        created_at=r.get("n_created_at"),
    )
    user = None
    if with_user:
        user = {
            "id": enrollment.user_id,
            "username": r.get("u_username"),
            "firstName": r.get("u_first_name") or "",
            "lastName": r.get("u_last_name") or "",
            "point": int(r.get("u_points") or 0),
        }
    return EnrollmentDetail(enrollment=enrollment, event=row_to_event(r), user=user)


class MySQLEnrollmentRepository(MySQLRepository, EnrollmentRepository):
    def get_by_id(self, enrollment_id: int, *, for_update: bool = False) -> Optional[Enrollment]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_ENROLLMENT_COLUMNS} FROM enrollments WHERE enrollment_id=%s" + self._lock_clause(for_update),
                (int(enrollment_id),),
            )
            r = fetchone(cur)
            return _to_enrollment(r) if r else None

    def get_many(self, enrollment_ids: Sequence[int], *, for_update: bool = False) -> Sequence[Enrollment]:
        ids = [int(i) for i in enrollment_ids]
        if not ids:
            return []
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_ENROLLMENT_COLUMNS} FROM enrollments
                WHERE enrollment_id IN ({in_clause(ids)})
                ORDER BY enrollment_id ASC
                """
                + self._lock_clause(for_update),
                tuple(ids),
            )
            return [_to_enrollment(r) for r in fetchall(cur)]

    def exists(self, *, user_id: int, event_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "SELECT 1 AS found FROM enrollments WHERE user_id=%s AND event_id=%s LIMIT 1",
                (int(user_id), int(event_id)),
            )
            return fetchone(cur) is not None

    def create(self, *, user_id: int, event_id: int, created_at: datetime) -> int:
        with self._cursor() as cur:
            try:
                cur.execute(
                    """
                    INSERT INTO enrollments(user_id, event_id, status, claim_point, created_at)
                    VALUES(%s,%s,%s,0,%s)
                    """,
                    (int(user_id), int(event_id), EnrollmentStatus.JOIN.value, created_at),
                )
            except mysql_errors.IntegrityError:
                # uq_enrollment_user_event
                return 0
            return int(cur.lastrowid)

    def set_status(self, enrollment_id: int, status: EnrollmentStatus, *, expected: EnrollmentStatus) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE enrollments SET status=%s WHERE enrollment_id=%s AND status=%s",
                (status.value, int(enrollment_id), expected.value),
            )
            return cur.rowcount == 1

    def mark_claimed(self, enrollment_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE enrollments SET claim_point=1 WHERE enrollment_id=%s AND claim_point=0",
                (int(enrollment_id),),
            )
            return cur.rowcount == 1

    def list_claimed_join(self) -> Sequence[EnrollmentDetail]:
        with self._cursor() as cur:
            cur.execute(
                _DETAIL_SELECT
                + " WHERE n.claim_point=1 AND n.status=%s ORDER BY n.created_at DESC, n.enrollment_id DESC",
                (EnrollmentStatus.JOIN.value,),
            )
            return [_to_detail(r, with_user=True) for r in fetchall(cur)]

    def list_for_user(self, user_id: int, status: EnrollmentStatus) -> Sequence[EnrollmentDetail]:
        with self._cursor() as cur:
            cur.execute(
                _DETAIL_SELECT + " WHERE n.user_id=%s AND n.status=%s ORDER BY ev.event_date ASC, n.enrollment_id ASC",
                (int(user_id), status.value),
            )
            return [_to_detail(r, with_user=False) for r in fetchall(cur)]

    def list_for_event(self, event_id: int) -> Sequence[EnrollmentDetail]:
        with self._cursor() as cur:
            cur.execute(
                _DETAIL_SELECT + " WHERE n.event_id=%s ORDER BY n.created_at ASC, n.enrollment_id ASC",
                (int(event_id),),
            )
            return [_to_detail(r, with_user=True) for r in fetchall(cur)]

    def event_ids_for_user(self, user_id: int) -> set[int]:
        with self._cursor() as cur:
            cur.execute("SELECT event_id FROM enrollments WHERE user_id=%s", (int(user_id),))
            return {int(r["event_id"]) for r in fetchall(cur)}

    def list_reminder_candidates(self, *, start_date: date, end_date: date) -> Sequence[ReminderCandidate]:
        with self._cursor() as cur:
            cur.execute(
                _DETAIL_SELECT
                + """
                WHERE ev.event_date BETWEEN %s AND %s
                  AND n.reminder_sent_at IS NULL
                  AND n.status <> %s
                  AND u.reminder_notify=1 AND u.is_active=1 AND u.is_deleted=0
                  AND u.push_token IS NOT NULL AND u.push_token <> ''
                ORDER BY ev.event_date ASC, ev.event_id ASC, n.enrollment_id ASC
                """,
                (start_date, end_date, EnrollmentStatus.REJECTED.value),
            )
            return [
                ReminderCandidate(
                    enrollment_id=int(r["enrollment_id"]),
                    user_id=int(r["n_user_id"]),
                    push_token=r["u_push_token"],
                    event=row_to_event(r),
                )
                for r in fetchall(cur)
            ]

    def mark_reminded(self, enrollment_ids: Iterable[int], *, at: datetime) -> int:
        ids = [int(i) for i in enrollment_ids]
        if not ids:
            return 0
        with self._cursor() as cur:
            cur.execute(
                f"""
                UPDATE enrollments SET reminder_sent_at=%s
                WHERE reminder_sent_at IS NULL AND enrollment_id IN ({in_clause(ids)})
                """,
                tuple([at] + ids),
            )
            return cur.rowcount
