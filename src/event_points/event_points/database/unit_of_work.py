from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
from ..enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from ..events.mysql_event_repository import MySQLEventRepository
from ..events.mysql_outside_event_repository import MySQLOutsideEventRepository
from ..settings.mysql_settings_repository import MySQLSettingsRepository
from ..users.mysql_user_repository import MySQLUserRepository
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MySQLTransaction:
    users: MySQLUserRepository
    events: MySQLEventRepository
    outside_events: MySQLOutsideEventRepository
    enrollments: MySQLEnrollmentRepository
    attendance: MySQLAttendanceRepository
    settings: MySQLSettingsRepository


class MySQLUnitOfWork:
    """One connection, one transaction, every repository bound to it."""

    ISOLATION_LEVEL = "READ COMMITTED"

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def begin(self) -> Iterator[MySQLTransaction]:
        conn = self._conn_factory.connect()
        try:
            conn.start_transaction(isolation_level=self.ISOLATION_LEVEL)
            cur = conn.cursor(dictionary=True)
            try:
                yield MySQLTransaction(
                    users=MySQLUserRepository(self._conn_factory, cur=cur),
                    events=MySQLEventRepository(self._conn_factory, cur=cur),
                    outside_events=MySQLOutsideEventRepository(self._conn_factory, cur=cur),
                    enrollments=MySQLEnrollmentRepository(self._conn_factory, cur=cur),
                    attendance=MySQLAttendanceRepository(self._conn_factory, cur=cur),
                    settings=MySQLSettingsRepository(self._conn_factory, cur=cur),
                )
                conn.commit()
            finally:
                cur.close()
        except Exception:
            logger.debug("Rolling back transaction", exc_info=True)
            conn.rollback()
            raise
        finally:
            conn.close()
