from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholder list for `IN (...)`; callers guard against empty input."""
    return ",".join(["%s"] * len(values))


class MySQLRepository:
    """Base for MySQL repositories.

    Unbound instances open a short-lived connection per call (autocommit per
    operation). Instances built with `cur=` reuse the cursor of an open unit
    of work, so every statement joins that transaction.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, cur=None):
        self._conn_factory = conn_factory
        self._cur = cur

    @property
    def in_transaction(self) -> bool:
        return self._cur is not None

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        if self._cur is not None:
            yield self._cur
            return
        with db_cursor(self._conn_factory) as (_, cur):
            yield cur

    def _lock_clause(self, for_update: bool) -> str:
        # Row locks only make sense inside a unit of work.
        return " FOR UPDATE" if for_update and self.in_transaction else ""
