from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.event_points.event_points.attendance.model import AttendanceRecord
from src.event_points.event_points.container import Container, build_services
from src.event_points.event_points.core.enums import AttendanceStatus, EnrollmentStatus, EventType, Role
from src.event_points.event_points.core.exceptions import InvalidPushTokenError, NotificationError
from src.event_points.event_points.enrollments.model import Enrollment, EnrollmentDetail, ReminderCandidate
from src.event_points.event_points.events.model import EVENT_UPDATE_FIELDS, Event, OutsideEvent
from src.event_points.event_points.notifications.dispatcher import BaseDispatcher
from src.event_points.event_points.settings.model import AppSettings
from src.event_points.event_points.users.model import User


class InMemoryStore:
    def __init__(self):
        self.users: dict[int, User] = {}
        self.events: dict[int, Event] = {}
        self.outside_events: dict[int, OutsideEvent] = {}
        self.enrollments: dict[int, Enrollment] = {}
        self.attendance: dict[int, AttendanceRecord] = {}
        self.settings: Optional[AppSettings] = None
        self.ids: dict[str, int] = {}

    def next_id(self, table: str) -> int:
        self.ids[table] = self.ids.get(table, 0) + 1
        return self.ids[table]


def _user_summary(user: User) -> dict:
    return {
        "id": user.user_id,
        "username": user.username,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "point": user.points,
    }


class InMemoryUsers:
    def __init__(self, store: InMemoryStore):
        self.s = store

    def get_by_id(self, user_id, *, for_update=False):
        return self.s.users.get(int(user_id))

    def get_by_username(self, username):
        return next((u for u in self.s.users.values() if u.username == username), None)

    def create_user(self, *, username, first_name, last_name, password_hash, role, is_active, push_token=None):
        user_id = self.s.next_id("users")
        self.s.users[user_id] = User(
            user_id=user_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
            role=role,
            is_active=is_active,
            push_token=push_token,
            created_at=datetime(2026, 1, 1, 8, 0),
        )
        return user_id

    def _update(self, user_id, **changes) -> bool:
        user = self.s.users.get(int(user_id))
        if not user:
            return False
        self.s.users[user.user_id] = replace(user, **changes)
        return True

    def set_active(self, user_id, *, is_active):
        user = self.s.users.get(int(user_id))
        if not user or user.is_deleted:
            return False
        return self._update(user_id, is_active=is_active)

    def soft_delete(self, user_id):
        user = self.s.users.get(int(user_id))
        if not user or user.is_deleted:
            return False
        return self._update(user_id, is_deleted=True, is_active=False, push_token=None)

    def update_password(self, user_id, *, password_hash):
        return self._update(user_id, password_hash=password_hash)

    def update_profile(self, user_id, *, first_name=None, last_name=None, push_token=None):
        changes = {
            k: v for k, v in (("first_name", first_name), ("last_name", last_name), ("push_token", push_token)) if v is not None
        }
        return bool(changes) and self._update(user_id, **changes)

    def update_notification_settings(self, user_id, *, approve_notify=None, new_event_notify=None, reminder_notify=None):
        changes = {
            k: v
            for k, v in (
                ("approve_notify", approve_notify),
                ("new_event_notify", new_event_notify),
                ("reminder_notify", reminder_notify),
            )
            if v is not None
        }
        return bool(changes) and self._update(user_id, **changes)

    def add_points(self, user_id, delta):
        user = self.s.users.get(int(user_id))
        return bool(user) and self._update(user_id, points=user.points + int(delta))

    def list_all(self):
        return sorted((u for u in self.s.users.values() if not u.is_deleted), key=lambda u: -u.user_id)

    def list_inactive(self):
        return [u for u in self.s.users.values() if not u.is_active and not u.is_deleted]

    def top_by_points(self, limit):
        users = [u for u in self.s.users.values() if u.role == Role.USER and not u.is_deleted]
        return sorted(users, key=lambda u: (-u.points, u.user_id))[:limit]

    def list_new_event_push_tokens(self):
        return [
            u.push_token
            for u in self.s.users.values()
            if u.new_event_notify and u.is_active and not u.is_deleted and u.push_token
        ]

    def clear_push_tokens(self, tokens: Iterable[str]):
        tokens = set(tokens)
        cleared = 0
        for user in list(self.s.users.values()):
            if user.push_token in tokens:
                self._update(user.user_id, push_token=None)
                cleared += 1
        return cleared


class InMemoryEvents:
    def __init__(self, store: InMemoryStore):
        self.s = store

    def get_by_id(self, event_id, *, for_update=False):
        return self.s.events.get(int(event_id))

    def create(self, *, title, description, point_value, event_date, event_time, max_student, event_type):
        event_id = self.s.next_id("events")
        self.s.events[event_id] = Event(
            event_id=event_id,
            title=title,
            description=description,
            point_value=point_value,
            event_date=event_date,
            event_time=event_time,
            max_student=max_student,
            event_type=event_type,
            created_at=datetime(2026, 1, 1, 9, 0),
        )
        return event_id

    def update(self, event_id, changes):
        event = self.s.events.get(int(event_id))
        cleaned = {k: v for k, v in changes.items() if k in EVENT_UPDATE_FIELDS}
        if not event or not cleaned:
            return False
        self.s.events[event.event_id] = replace(event, **cleaned)
        return True

    def delete(self, event_id):
        if self.s.events.pop(int(event_id), None) is None:
            return False
        # enrollments cascade with the event
        for enrollment_id, e in list(self.s.enrollments.items()):
            if e.event_id == int(event_id):
                del self.s.enrollments[enrollment_id]
        return True

    def reserve_seat(self, event_id):
        event = self.s.events.get(int(event_id))
        if not event or event.student_enrolled >= event.max_student:
            return False
        self.s.events[event.event_id] = replace(event, student_enrolled=event.student_enrolled + 1)
        return True

    def list_all(self):
        return sorted(self.s.events.values(), key=lambda e: -e.event_id)

    def list_from(self, day):
        return sorted((e for e in self.s.events.values() if e.event_date >= day), key=lambda e: (e.event_date, e.event_id))


class InMemoryOutsideEvents:
    def __init__(self, store: InMemoryStore):
        self.s = store

    def get_by_id(self, outside_event_id, *, for_update=False):
        return self.s.outside_events.get(int(outside_event_id))

    def create(self, *, user_id, title, description, point_value, event_date):
        outside_event_id = self.s.next_id("outside_events")
        self.s.outside_events[outside_event_id] = OutsideEvent(
            outside_event_id=outside_event_id,
            user_id=user_id,
            title=title,
            description=description,
            point_value=point_value,
            event_date=event_date,
            created_at=datetime(2026, 1, 1, 10, 0),
        )
        return outside_event_id

    def list_unapproved(self):
        out = []
        for e in sorted(self.s.outside_events.values(), key=lambda e: -e.outside_event_id):
            if e.approved:
                continue
            row = e.to_dict()
            owner = self.s.users.get(e.user_id) if e.user_id is not None else None
            row["user"] = _user_summary(owner) if owner else None
            out.append(row)
        return out

    def list_approved_for_user(self, user_id):
        return [e for e in self.s.outside_events.values() if e.user_id == int(user_id) and e.approved]

    def mark_approved(self, outside_event_id):
        event = self.s.outside_events.get(int(outside_event_id))
        if not event or event.approved:
            return False
        self.s.outside_events[event.outside_event_id] = replace(event, approved=True)
        return True

    def delete_unapproved(self, outside_event_id):
        event = self.s.outside_events.get(int(outside_event_id))
        if not event or event.approved:
            return False
        del self.s.outside_events[event.outside_event_id]
        return True


class InMemoryEnrollments:
    def __init__(self, store: InMemoryStore):
        self.s = store

    def _detail(self, e: Enrollment, *, with_user: bool) -> EnrollmentDetail:
        user = _user_summary(self.s.users[e.user_id]) if with_user else None
        return EnrollmentDetail(enrollment=e, event=self.s.events[e.event_id], user=user)

    def get_by_id(self, enrollment_id, *, for_update=False):
        return self.s.enrollments.get(int(enrollment_id))

    def get_many(self, enrollment_ids, *, for_update=False):
        return [self.s.enrollments[i] for i in sorted(set(enrollment_ids)) if i in self.s.enrollments]

    def exists(self, *, user_id, event_id):
        return any(e.user_id == user_id and e.event_id == event_id for e in self.s.enrollments.values())

    def create(self, *, user_id, event_id, created_at):
        # unique (user_id, event_id)
        if any(e.user_id == user_id and e.event_id == event_id for e in self.s.enrollments.values()):
            return 0
        enrollment_id = self.s.next_id("enrollments")
        self.s.enrollments[enrollment_id] = Enrollment(
            enrollment_id=enrollment_id, user_id=user_id, event_id=event_id, created_at=created_at
        )
        return enrollment_id

    def set_status(self, enrollment_id, status, *, expected):
        e = self.s.enrollments.get(int(enrollment_id))
        if not e or e.status != expected:
            return False
        self.s.enrollments[e.enrollment_id] = replace(e, status=status)
        return True

    def mark_claimed(self, enrollment_id):
        e = self.s.enrollments.get(int(enrollment_id))
        if not e or e.claim_point:
            return False
        self.s.enrollments[e.enrollment_id] = replace(e, claim_point=True)
        return True

    def list_claimed_join(self):
        rows = [e for e in self.s.enrollments.values() if e.claim_point and e.status == EnrollmentStatus.JOIN]
        rows.sort(key=lambda e: (e.created_at, e.enrollment_id), reverse=True)
        return [self._detail(e, with_user=True) for e in rows]

    def list_for_user(self, user_id, status):
        rows = [e for e in self.s.enrollments.values() if e.user_id == int(user_id) and e.status == status]
        return [self._detail(e, with_user=False) for e in rows]

    def list_for_event(self, event_id):
        rows = [e for e in self.s.enrollments.values() if e.event_id == int(event_id)]
        return [self._detail(e, with_user=True) for e in rows]

    def event_ids_for_user(self, user_id):
        return {e.event_id for e in self.s.enrollments.values() if e.user_id == int(user_id)}

    def list_reminder_candidates(self, *, start_date, end_date):
        out = []
        for e in self.s.enrollments.values():
            event = self.s.events[e.event_id]
            user = self.s.users[e.user_id]
            if not (start_date <= event.event_date <= end_date):
                continue
            if e.reminder_sent_at is not None or e.status == EnrollmentStatus.REJECTED:
                continue
            if not user.can_receive(opted_in=user.reminder_notify):
                continue
            out.append(ReminderCandidate(enrollment_id=e.enrollment_id, user_id=user.user_id, push_token=user.push_token, event=event))
        return out

    def mark_reminded(self, enrollment_ids, *, at):
        marked = 0
        for i in enrollment_ids:
            e = self.s.enrollments.get(int(i))
            if e and e.reminder_sent_at is None:
                self.s.enrollments[e.enrollment_id] = replace(e, reminder_sent_at=at)
                marked += 1
        return marked


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self.s = store

    def get_for_user_and_date(self, user_id, attendance_date):
        return next(
            (r for r in self.s.attendance.values() if r.user_id == int(user_id) and r.attendance_date == attendance_date),
            None,
        )

    def create_present(self, *, user_id, attendance_date, created_at):
        if self.get_for_user_and_date(user_id, attendance_date):
            return 0
        attendance_id = self.s.next_id("attendance")
        self.s.attendance[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            user_id=int(user_id),
            attendance_date=attendance_date,
            status=AttendanceStatus.PRESENT,
            created_at=created_at,
        )
        return attendance_id

    def find_present_in_window(self, *, user_id, start, end):
        return next(
            (
                r
                for r in self.s.attendance.values()
                if r.user_id == int(user_id) and r.status == AttendanceStatus.PRESENT and start <= r.created_at <= end
            ),
            None,
        )

    def list_in_window(self, *, start, end):
        rows = sorted((r for r in self.s.attendance.values() if start <= r.created_at <= end), key=lambda r: r.created_at)
        out = []
        for r in rows:
            row = r.to_dict()
            row["user"] = _user_summary(self.s.users[r.user_id])
            out.append(row)
        return out


class InMemorySettings:
    def __init__(self, store: InMemoryStore):
        self.s = store

    def get(self):
        return self.s.settings

    def save(self, settings):
        self.s.settings = settings


@dataclass(frozen=True)
class InMemoryTransaction:
    users: InMemoryUsers
    events: InMemoryEvents
    outside_events: InMemoryOutsideEvents
    enrollments: InMemoryEnrollments
    attendance: InMemoryAttendance
    settings: InMemorySettings


class InMemoryUnitOfWork:
    """Snapshot on begin, restore on exception: models a rolled back transaction."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def begin(self):
        snapshot = copy.deepcopy(self.store.__dict__)
        try:
            yield InMemoryTransaction(
                users=InMemoryUsers(self.store),
                events=InMemoryEvents(self.store),
                outside_events=InMemoryOutsideEvents(self.store),
                enrollments=InMemoryEnrollments(self.store),
                attendance=InMemoryAttendance(self.store),
                settings=InMemorySettings(self.store),
            )
        except Exception:
            self.store.__dict__.clear()
            self.store.__dict__.update(snapshot)
            self.rollbacks += 1
            raise
        self.commits += 1


class RecordingDispatcher(BaseDispatcher):
    def __init__(self):
        self.sent: list[tuple[str, str, str, dict]] = []
        self.invalid_tokens: set[str] = set()
        self.down = False

    def send_push(self, token, title, body, data=None):
        if self.down:
            raise NotificationError("provider unavailable")
        if token in self.invalid_tokens:
            raise InvalidPushTokenError(token)
        self.sent.append((token, title, body, dict(data or {})))
        return f"msg-{len(self.sent)}"

    def titles(self) -> list[str]:
        return [title for _, title, _, _ in self.sent]


class World:
    """Services wired on in-memory repositories plus helpers to arrange data."""

    def __init__(self):
        self.store = InMemoryStore()
        # the settings row exists in every bootstrapped database
        self.store.settings = AppSettings()
        self.dispatcher = RecordingDispatcher()
        self.uow = InMemoryUnitOfWork(self.store)
        self.users = InMemoryUsers(self.store)
        self.events = InMemoryEvents(self.store)
        self.outside_events = InMemoryOutsideEvents(self.store)
        self.enrollments = InMemoryEnrollments(self.store)
        self.attendance = InMemoryAttendance(self.store)
        self.settings = InMemorySettings(self.store)
        self.container: Container = build_services(
            users_repo=self.users,
            events_repo=self.events,
            outside_events_repo=self.outside_events,
            enrollments_repo=self.enrollments,
            attendance_repo=self.attendance,
            settings_repo=self.settings,
            uow=self.uow,
            dispatcher=self.dispatcher,
        )

    def add_user(
        self,
        username: str = "alice",
        *,
        password: str = "secret1",
        role: Role = Role.USER,
        is_active: bool = True,
        push_token: Optional[str] = None,
        **toggles,
    ) -> User:
        user_id = self.users.create_user(
            username=username,
            first_name=username.title(),
            last_name="Tester",
            password_hash=generate_password_hash(password),
            role=role,
            is_active=is_active,
            push_token=push_token,
        )
        if toggles:
            self.users.update_notification_settings(user_id, **toggles)
        return self.users.get_by_id(user_id)

    def add_event(
        self,
        *,
        title: str = "Beach cleanup",
        point_value: int = 10,
        event_date: date = date(2026, 3, 10),
        event_time: str = "10:00",
        max_student: int = 5,
        student_enrolled: int = 0,
    ) -> Event:
        event_id = self.events.create(
            title=title,
            description=None,
            point_value=point_value,
            event_date=event_date,
            event_time=event_time,
            max_student=max_student,
            event_type=EventType.INSIDE,
        )
        if student_enrolled:
            self.store.events[event_id] = replace(self.store.events[event_id], student_enrolled=student_enrolled)
        return self.events.get_by_id(event_id)

    def enroll(self, user: User, event: Event) -> Enrollment:
        return self.container.enrollment_service.create_enrollment(
            user_id=user.user_id, event_id=event.event_id, now=datetime(2026, 3, 1, 12, 0)
        )

    def check_in(self, user: User, at: datetime) -> AttendanceRecord:
        return self.container.attendance_service.record_attendance(user.user_id, now=at)

    def set_settings(self, **switches) -> AppSettings:
        settings = replace(self.store.settings or AppSettings(), **switches)
        self.store.settings = settings
        return settings

    def user(self, user_id: int) -> User:
        return self.store.users[user_id]

    def enrollment(self, enrollment_id: int) -> Enrollment:
        return self.store.enrollments[enrollment_id]

    def event(self, event_id: int) -> Event:
        return self.store.events[event_id]


@pytest.fixture
def world() -> World:
    return World()
