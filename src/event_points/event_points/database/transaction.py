from __future__ import annotations

from typing import ContextManager, Protocol

from ..attendance.repository import AttendanceRepository
from ..enrollments.repository import EnrollmentRepository
from ..events.repository import EventRepository, OutsideEventRepository
from ..settings.repository import SettingsRepository
from ..users.repository import UserRepository


class Transaction(Protocol):
    """Repositories sharing one open database transaction."""

    users: UserRepository
    events: EventRepository
    outside_events: OutsideEventRepository
    enrollments: EnrollmentRepository
    attendance: AttendanceRepository
    settings: SettingsRepository


class UnitOfWork(Protocol):
    def begin(self) -> ContextManager[Transaction]:
        """Open a transaction: commit on normal exit, roll back on exception."""

        raise NotImplementedError
