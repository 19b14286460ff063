from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import EventType
from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from .model import EVENT_UPDATE_FIELDS, Event
from .repository import EventRepository

_EVENT_COLUMNS = """
    event_id, title, description, point_value, event_date, event_time,
    max_student, student_enrolled, event_type, created_at
"""


def row_to_event(r: dict) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        title=r["title"],
        description=r.get("description"),
        point_value=int(r.get("point_value") or 0),
        event_date=r["event_date"],
        event_time=r.get("event_time") or "",
        max_student=int(r.get("max_student") or 0),
        student_enrolled=int(r.get("student_enrolled") or 0),
        event_type=EventType(r.get("event_type") or EventType.INSIDE.value),
        created_at=r.get("created_at"),
    )


class MySQLEventRepository(MySQLRepository, EventRepository):
    def get_by_id(self, event_id: int, *, for_update: bool = False) -> Optional[Event]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_EVENT_COLUMNS} FROM events WHERE event_id=%s" + self._lock_clause(for_update),
                (int(event_id),),
            )
            r = fetchone(cur)
            return row_to_event(r) if r else None

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
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO events(title, description, point_value, event_date, event_time, max_student, event_type)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (title, description, int(point_value), event_date, event_time, int(max_student), event_type.value),
            )
            return int(cur.lastrowid)

    def update(self, event_id: int, changes: dict) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column in EVENT_UPDATE_FIELDS:
            if column not in changes:
                continue
            value = changes[column]
            if isinstance(value, EventType):
                value = value.value
            sets.append(f"{column}=%s")
            params.append(value)
        if not sets:
            return False

        with self._cursor() as cur:
            cur.execute(f"UPDATE events SET {', '.join(sets)} WHERE event_id=%s", tuple(params + [int(event_id)]))
            return cur.rowcount > 0

    def delete(self, event_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0

    def reserve_seat(self, event_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE events
                SET student_enrolled = student_enrolled + 1
                WHERE event_id=%s AND student_enrolled < max_student
                """,
                (int(event_id),),
            )
            return cur.rowcount == 1

    def list_all(self) -> Sequence[Event]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM events ORDER BY created_at DESC, event_id DESC")
            return [row_to_event(r) for r in fetchall(cur)]

    def list_from(self, day: date) -> Sequence[Event]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_EVENT_COLUMNS} FROM events WHERE event_date >= %s ORDER BY event_date ASC, event_id ASC",
                (day,),
            )
            return [row_to_event(r) for r in fetchall(cur)]
