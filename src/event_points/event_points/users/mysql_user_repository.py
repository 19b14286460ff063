from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.mysql_base import MySQLRepository, fetchall, fetchone, in_clause
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, username, first_name, last_name, password_hash, role,
    is_active, is_deleted, points, push_token,
    approve_notify, new_event_notify, reminder_notify, created_at
"""


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", False)),
        is_deleted=bool(row.get("is_deleted", False)),
        points=int(row.get("points") or 0),
        push_token=row.get("push_token"),
        approve_notify=bool(row.get("approve_notify", True)),
        new_event_notify=bool(row.get("new_event_notify", True)),
        reminder_notify=bool(row.get("reminder_notify", True)),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(MySQLRepository, UserRepository):
    def get_by_id(self, user_id: int, *, for_update: bool = False) -> Optional[User]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s" + self._lock_clause(for_update),
                (int(user_id),),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        username: str,
        first_name: str,
        last_name: str,
        password_hash: str,
        role: Role,
        is_active: bool,
        push_token: Optional[str] = None,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO users(username, first_name, last_name, password_hash, role, is_active, push_token)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (username, first_name, last_name, password_hash, role.value, int(bool(is_active)), push_token),
            )
            return int(cur.lastrowid)

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE users SET is_active=%s WHERE user_id=%s AND is_deleted=0",
                (int(bool(is_active)), int(user_id)),
            )
            return cur.rowcount > 0

    def soft_delete(self, user_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE users SET is_deleted=1, is_active=0, push_token=NULL WHERE user_id=%s AND is_deleted=0",
                (int(user_id),),
            )
            return cur.rowcount > 0

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        with self._cursor() as cur:
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    def update_profile(
        self,
        user_id: int,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        push_token: Optional[str] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column, value in (("first_name", first_name), ("last_name", last_name), ("push_token", push_token)):
            if value is not None:
                sets.append(f"{column}=%s")
                params.append(value)
        if not sets:
            return False

        with self._cursor() as cur:
            cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE user_id=%s", tuple(params + [int(user_id)]))
            return cur.rowcount > 0

    def update_notification_settings(
        self,
        user_id: int,
        *,
        approve_notify: Optional[bool] = None,
        new_event_notify: Optional[bool] = None,
        reminder_notify: Optional[bool] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column, value in (
            ("approve_notify", approve_notify),
            ("new_event_notify", new_event_notify),
            ("reminder_notify", reminder_notify),
        ):
            if value is not None:
                sets.append(f"{column}=%s")
                params.append(int(bool(value)))
        if not sets:
            return False

        with self._cursor() as cur:
            cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE user_id=%s", tuple(params + [int(user_id)]))
            # rowcount is 0 when the values did not change; existence was checked by the caller.
            return True

    def add_points(self, user_id: int, delta: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE users SET points = points + %s WHERE user_id=%s",
                (int(delta), int(user_id)),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE is_deleted=0 ORDER BY user_id DESC")
            return [_to_user(r) for r in fetchall(cur)]

    def list_inactive(self) -> Sequence[User]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE is_active=0 AND is_deleted=0 ORDER BY created_at DESC"
            )
            return [_to_user(r) for r in fetchall(cur)]

    def top_by_points(self, limit: int) -> Sequence[User]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS} FROM users
                WHERE role=%s AND is_deleted=0
                ORDER BY points DESC, user_id ASC
                LIMIT %s
                """,
                (Role.USER.value, int(limit)),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def list_new_event_push_tokens(self) -> Sequence[str]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT push_token FROM users
                WHERE new_event_notify=1 AND is_active=1 AND is_deleted=0
                  AND push_token IS NOT NULL AND push_token <> ''
                """
            )
            return [r["push_token"] for r in fetchall(cur)]

    def clear_push_tokens(self, tokens: Iterable[str]) -> int:
        tokens = list(dict.fromkeys(t for t in tokens if t))
        if not tokens:
            return 0
        with self._cursor() as cur:
            cur.execute(f"UPDATE users SET push_token=NULL WHERE push_token IN ({in_clause(tokens)})", tuple(tokens))
            return int(cur.rowcount)
