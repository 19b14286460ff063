from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import REMINDER_WINDOW_END_HOURS, REMINDER_WINDOW_START_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import UnitOfWork
from .database.unit_of_work import MySQLUnitOfWork
from .enrollments.factory import EnrollmentTransitionFactory
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollments.service import EnrollmentService
from .events.mysql_event_repository import MySQLEventRepository
from .events.mysql_outside_event_repository import MySQLOutsideEventRepository
from .events.outside_service import OutsideEventService
from .events.service import EventService
from .notifications.dispatcher import LoggingDispatcher, NotificationDispatcher
from .notifications.reminder_service import ReminderService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    settings_service: SettingsService
    event_service: EventService
    outside_event_service: OutsideEventService
    enrollment_service: EnrollmentService
    reminder_service: ReminderService

    uow: UnitOfWork
    dispatcher: NotificationDispatcher
    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    users_repo,
    events_repo,
    outside_events_repo,
    enrollments_repo,
    attendance_repo,
    settings_repo,
    uow: UnitOfWork,
    dispatcher: NotificationDispatcher,
    conn: Optional[DatabaseConnection] = None,
    reminder_window: tuple[int, int] = (REMINDER_WINDOW_START_HOURS, REMINDER_WINDOW_END_HOURS),
) -> Container:
    """Wire services on top of any repository set (MySQL or in-memory)."""
    window_start, window_end = reminder_window
    return Container(
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, uow, dispatcher),
        attendance_service=AttendanceService(attendance_repo, users_repo),
        settings_service=SettingsService(settings_repo),
        event_service=EventService(events_repo, enrollments_repo, users_repo, uow, dispatcher),
        outside_event_service=OutsideEventService(outside_events_repo, users_repo, settings_repo, uow, dispatcher),
        enrollment_service=EnrollmentService(
            enrollments_repo,
            uow,
            dispatcher,
            transition_factory=EnrollmentTransitionFactory(),
        ),
        reminder_service=ReminderService(
            enrollments_repo,
            users_repo,
            settings_repo,
            dispatcher,
            window_start_hours=window_start,
            window_end_hours=window_end,
        ),
        uow=uow,
        dispatcher=dispatcher,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    dispatcher: Optional[NotificationDispatcher] = None,
    reminder_window: tuple[int, int] = (REMINDER_WINDOW_START_HOURS, REMINDER_WINDOW_END_HOURS),
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        events_repo=MySQLEventRepository(conn),
        outside_events_repo=MySQLOutsideEventRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        uow=MySQLUnitOfWork(conn),
        dispatcher=dispatcher or LoggingDispatcher(),
        conn=conn,
        reminder_window=reminder_window,
    )
