from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_utc, parse_event_time
from ..common.validators import optional_text, require_date, require_int, require_non_empty
from ..core.enums import EnrollmentStatus, EventType
from ..core.exceptions import NotFoundError, ValidationError
from ..database.transaction import UnitOfWork
from ..enrollments.repository import EnrollmentRepository
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.outbox import NotificationOutbox
from ..settings.service import enforced_settings
from ..users.repository import UserRepository
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


def _event_time(value: Any) -> str:
    text = require_non_empty(value, "Time")
    if parse_event_time(text) is None:
        raise ValidationError("Time must look like '14:00' or '10:30 AM'")
    return text


def _event_type(value: Any) -> EventType:
    if isinstance(value, EventType):
        return value
    try:
        return EventType(str(value).strip().upper())
    except ValueError:
        raise ValidationError("Event type must be INSIDE or OUTSIDE") from None


class EventService:
    """Use cases: the admin-managed event catalog and per-user event views."""

    def __init__(
        self,
        events: EventRepository,
        enrollments: EnrollmentRepository,
        users: UserRepository,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
    ):
        self._events = events
        self._enrollments = enrollments
        self._users = users
        self._uow = uow
        self._dispatcher = dispatcher

    def create_event(
        self,
        *,
        title: Any,
        description: Any = None,
        point_value: Any,
        event_date: Any,
        event_time: Any,
        max_student: Any,
        event_type: Any = None,
    ) -> Event:
        title = require_non_empty(title, "Title")
        description = optional_text(description)
        point_value = require_int(point_value, "Point value", min_value=0)
        event_date = require_date(event_date, "Date")
        event_time = _event_time(event_time)
        max_student = require_int(max_student, "Max student", min_value=1)
        event_type = _event_type(event_type) if event_type is not None else EventType.INSIDE

        outbox = NotificationOutbox()
        with self._uow.begin() as tx:
            event_id = tx.events.create(
                title=title,
                description=description,
                point_value=point_value,
                event_date=event_date,
                event_time=event_time,
                max_student=max_student,
                event_type=event_type,
            )
            settings = enforced_settings(tx.settings)
            if settings.notify_on_event_create:
                outbox.add_bulk(
                    tx.users.list_new_event_push_tokens(),
                    "New Event Created!",
                    f'A new event "{title}" is now available!',
                    {"eventType": "new_event", "eventId": str(event_id)},
                )
            event = tx.events.get_by_id(event_id)

        outbox.flush(self._dispatcher)
        logger.info("Event %s created: %s on %s %s", event_id, title, event_date, event_time)
        return event

    def update_event(self, event_id: int, changes: dict) -> Event:
        cleaned: dict[str, Any] = {}
        if "title" in changes:
            cleaned["title"] = require_non_empty(changes["title"], "Title")
        if "description" in changes:
            cleaned["description"] = optional_text(changes["description"])
        if "point_value" in changes:
            cleaned["point_value"] = require_int(changes["point_value"], "Point value", min_value=0)
        if "event_date" in changes:
            cleaned["event_date"] = require_date(changes["event_date"], "Date")
        if "event_time" in changes:
            cleaned["event_time"] = _event_time(changes["event_time"])
        if "max_student" in changes:
            cleaned["max_student"] = require_int(changes["max_student"], "Max student", min_value=1)
        if "event_type" in changes:
            cleaned["event_type"] = _event_type(changes["event_type"])
        if not cleaned:
            raise ValidationError("No valid fields to update")

        with self._uow.begin() as tx:
            event = tx.events.get_by_id(int(event_id), for_update=True)
            if not event:
                raise NotFoundError("Event not found")
            if cleaned.get("max_student", event.max_student) < event.student_enrolled:
                raise ValidationError(
                    f"Max student cannot be lower than the {event.student_enrolled} already enrolled"
                )
            tx.events.update(event.event_id, cleaned)
            return tx.events.get_by_id(event.event_id)

    def delete_event(self, event_id: int) -> None:
        if not self._events.get_by_id(int(event_id)):
            raise NotFoundError("Event not found")
        self._events.delete(int(event_id))
        logger.info("Event %s deleted", event_id)

    def get_event(self, event_id: int) -> dict:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        row = event.to_dict()
        row["enrolled"] = [d.to_dict() for d in self._enrollments.list_for_event(event.event_id)]
        return row

    def list_events(self) -> Sequence[Event]:
        return self._events.list_all()

    def list_upcoming(self, user_id: int, *, today: Optional[date] = None) -> list[dict]:
        today = today or now_utc().date()
        joined = self._enrollments.event_ids_for_user(int(user_id))
        out: list[dict] = []
        for event in self._events.list_from(today):
            row = event.to_dict()
            row["enrolled"] = event.event_id in joined
            out.append(row)
        return out

    def _require_user(self, user_id: int) -> None:
        user = self._users.get_by_id(int(user_id))
        if not user or user.is_deleted:
            raise NotFoundError("User not found")

    def attended_with_stats(self, user_id: int) -> dict:
        self._require_user(user_id)
        attended = self._enrollments.list_for_user(int(user_id), EnrollmentStatus.ATTENDED)
        return {
            "attendedEvents": [d.to_dict() for d in attended],
            "totalAttended": len(attended),
            "totalPoints": sum(d.event.point_value for d in attended),
        }

    def joined_with_stats(self, user_id: int) -> dict:
        self._require_user(user_id)
        joined = self._enrollments.list_for_user(int(user_id), EnrollmentStatus.JOIN)
        return {
            "joinedEvents": [d.to_dict() for d in joined],
            "totalJoin": len(joined),
        }
