from __future__ import annotations

import logging
from typing import Any

from ..attendance.service import require_present_on
from ..common.validators import optional_text, require_date, require_int, require_non_empty
from ..core.enums import OutsideEventDecision
from ..core.exceptions import NotFoundError, PolicyDeniedError, ValidationError
from ..database.transaction import UnitOfWork
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.outbox import NotificationOutbox
from ..settings.repository import SettingsRepository
from ..settings.service import enforced_settings
from ..users.repository import UserRepository
from .model import OutsideEvent
from .repository import OutsideEventRepository

logger = logging.getLogger(__name__)


def parse_decision(value: Any) -> OutsideEventDecision:
    if isinstance(value, OutsideEventDecision):
        return value
    try:
        return OutsideEventDecision(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError("isActiveOrReject must be APPROVE or REJECT") from None


class OutsideEventService:
    """User-proposed events: admin policy gate, approval with points, rejection by deletion."""

    def __init__(
        self,
        outside_events: OutsideEventRepository,
        users: UserRepository,
        settings: SettingsRepository,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
    ):
        self._outside_events = outside_events
        self._users = users
        self._settings = settings
        self._uow = uow
        self._dispatcher = dispatcher

    def create_outside_event(
        self,
        *,
        user_id: int,
        title: Any,
        description: Any = None,
        point_value: Any,
        event_date: Any,
    ) -> OutsideEvent:
        settings = enforced_settings(self._settings)
        if not settings.allow_custom_events:
            raise PolicyDeniedError("Outside event creation is currently disabled by the administrator.")

        user = self._users.get_by_id(int(user_id))
        if not user or user.is_deleted:
            raise NotFoundError("User not found")

        outside_event_id = self._outside_events.create(
            user_id=user.user_id,
            title=require_non_empty(title, "Title"),
            description=optional_text(description),
            point_value=require_int(point_value, "Point value", min_value=1),
            event_date=require_date(event_date, "Date"),
        )
        logger.info("Outside event %s proposed by user %s", outside_event_id, user.user_id)
        return self._outside_events.get_by_id(outside_event_id)

    def list_unapproved(self):
        return self._outside_events.list_unapproved()

    def decide(self, *, outside_event_id: Any, decision: Any) -> dict:
        decision = parse_decision(decision)
        outside_event_id = require_int(outside_event_id, "eventId", min_value=1)
        outbox = NotificationOutbox()

        with self._uow.begin() as tx:
            event = tx.outside_events.get_by_id(outside_event_id, for_update=True)
            if not event:
                raise NotFoundError("Outside event not found")
            if event.approved:
                raise ValidationError("Event is already approved")
            if event.user_id is None:
                raise ValidationError("Event is not associated with any user")

            owner = tx.users.get_by_id(event.user_id, for_update=True)
            if not owner:
                raise ValidationError("Event is not associated with any user")
            notify = owner.can_receive(opted_in=owner.approve_notify)

            if decision == OutsideEventDecision.APPROVE:
                require_present_on(
                    tx.attendance,
                    user_id=owner.user_id,
                    day=event.event_date,
                    message="User was not marked PRESENT on the event date. Cannot approve the event.",
                )
                if not tx.outside_events.mark_approved(event.outside_event_id):
                    raise ValidationError("Event is already approved")
                tx.users.add_points(owner.user_id, event.point_value)
                if notify:
                    outbox.add(
                        owner.push_token,
                        "Points Awarded!",
                        f'Your outside event "{event.title}" has been approved. {event.point_value} points added!',
                        {"status": "approved", "eventId": str(event.outside_event_id)},
                    )
                result = tx.outside_events.get_by_id(event.outside_event_id).to_dict()
            else:
                if not tx.outside_events.delete_unapproved(event.outside_event_id):
                    raise NotFoundError("Outside event not found")
                if notify:
                    outbox.add(
                        owner.push_token,
                        "Event Rejected",
                        f'Your outside event "{event.title}" was not approved and has been removed.',
                        {"status": "rejected", "eventId": str(event.outside_event_id)},
                    )
                result = {"id": event.outside_event_id, "deleted": True}

        outbox.flush(self._dispatcher)
        logger.info("Outside event %s: %s", outside_event_id, decision.value)
        return result

    def approved_summary(self, user_id: int) -> dict:
        events = self._outside_events.list_approved_for_user(int(user_id))
        return {
            "events": [e.to_dict() for e in events],
            "totalCount": len(events),
            "totalPoints": sum(e.point_value for e in events),
        }

    def delete_unapproved(self, outside_event_id: int) -> None:
        event = self._outside_events.get_by_id(int(outside_event_id))
        if not event:
            raise NotFoundError("Outside event not found")
        if event.approved:
            raise ValidationError("Cannot delete an approved event")
        if not self._outside_events.delete_unapproved(event.outside_event_id):
            # approved (or deleted) between the read and the delete
            raise ValidationError("Cannot delete an approved event")
