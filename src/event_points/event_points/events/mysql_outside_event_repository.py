from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from .model import OutsideEvent
from .repository import OutsideEventRepository

_OUTSIDE_COLUMNS = "outside_event_id, user_id, title, description, point_value, event_date, approved, created_at"


def _to_outside_event(r: dict) -> OutsideEvent:
    return OutsideEvent(
        outside_event_id=int(r["outside_event_id"]),
        user_id=int(r["user_id"]) if r.get("user_id") is not None else None,
        title=r["title"],
        description=r.get("description"),
        point_value=int(r.get("point_value") or 0),
        event_date=r["event_date"],
        approved=bool(r.get("approved", False)),
        created_at=r.get("created_at"),
    )


class MySQLOutsideEventRepository(MySQLRepository, OutsideEventRepository):
    def get_by_id(self, outside_event_id: int, *, for_update: bool = False) -> Optional[OutsideEvent]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_OUTSIDE_COLUMNS} FROM outside_events WHERE outside_event_id=%s"
                + self._lock_clause(for_update),
                (int(outside_event_id),),
            )
            r = fetchone(cur)
            return _to_outside_event(r) if r else None

    def create(
        self,
        *,
        user_id: int,
        title: str,
        description: Optional[str],
        point_value: int,
        event_date: date,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO outside_events(user_id, title, description, point_value, event_date, approved)
                VALUES(%s,%s,%s,%s,%s,0)
                """,
                (int(user_id), title, description, int(point_value), event_date),
            )
            return int(cur.lastrowid)

    def list_unapproved(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT o.outside_event_id, o.user_id, o.title, o.description, o.point_value,
                       o.event_date, o.approved, o.created_at,
                       u.username, u.first_name, u.last_name
                FROM outside_events o
                LEFT JOIN users u ON u.user_id = o.user_id
                WHERE o.approved = 0
                ORDER BY o.created_at DESC, o.outside_event_id DESC
                """
            )
            out: list[dict] = []
            for r in fetchall(cur):
                row = _to_outside_event(r).to_dict()
                row["user"] = None
                if r.get("user_id") is not None:
                    row["user"] = {
                        "id": int(r["user_id"]),
                        "username": r.get("username"),
                        "firstName": r.get("first_name") or "",
                        "lastName": r.get("last_name") or "",
                    }
                out.append(row)
            return out

    def list_approved_for_user(self, user_id: int) -> Sequence[OutsideEvent]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_OUTSIDE_COLUMNS} FROM outside_events
                WHERE user_id=%s AND approved=1
                ORDER BY event_date DESC, outside_event_id DESC
                """,
                (int(user_id),),
            )
            return [_to_outside_event(r) for r in fetchall(cur)]

    def mark_approved(self, outside_event_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE outside_events SET approved=1 WHERE outside_event_id=%s AND approved=0",
                (int(outside_event_id),),
            )
            return cur.rowcount == 1

    def delete_unapproved(self, outside_event_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "DELETE FROM outside_events WHERE outside_event_id=%s AND approved=0",
                (int(outside_event_id),),
            )
            return cur.rowcount == 1
