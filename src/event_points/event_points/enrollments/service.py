from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import require_int
from ..core.enums import EnrollmentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..database.transaction import Transaction, UnitOfWork
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.outbox import NotificationOutbox
from ..settings.service import enforced_settings
from .factory import EnrollmentTransitionFactory
from .model import Enrollment, EnrollmentDetail
from .repository import EnrollmentRepository
from .transitions.base import TransitionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimResult:
    enrollments: list[Enrollment]
    auto_approved: bool
    points_awarded: int

    def to_dict(self) -> dict:
        return {
            "enrollments": [e.to_dict() for e in self.enrollments],
            "autoApproved": self.auto_approved,
            "pointsAwarded": self.points_awarded,
        }


def parse_status(value: Any) -> EnrollmentStatus:
    if isinstance(value, EnrollmentStatus):
        return value
    try:
        return EnrollmentStatus(str(value or "").strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in EnrollmentStatus)
        raise ValidationError(f"Status must be one of: {allowed}") from None


def normalize_enrollment_ids(values: Any) -> list[int]:
    """Validate the claim payload; duplicates collapse, order is kept."""
    if not isinstance(values, (list, tuple)) or not values:
        raise ValidationError("enrolledIds must be a non-empty list")
    ids: list[int] = []
    for v in values:
        enrollment_id = require_int(v, "enrolledIds", min_value=1)
        if enrollment_id not in ids:
            ids.append(enrollment_id)
    return ids


class EnrollmentService:
    """Use cases: enroll, claim points, admin status transitions."""

    def __init__(
        self,
        enrollments: EnrollmentRepository,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        *,
        transition_factory: Optional[EnrollmentTransitionFactory] = None,
    ):
        self._enrollments = enrollments
        self._uow = uow
        self._dispatcher = dispatcher
        self._factory = transition_factory or EnrollmentTransitionFactory()

    def create_enrollment(self, *, user_id: int, event_id: int, now: Optional[datetime] = None) -> Enrollment:
        now = now or now_utc()
        with self._uow.begin() as tx:
            user = tx.users.get_by_id(int(user_id))
            if not user or user.is_deleted:
                raise NotFoundError("User not found")

            event = tx.events.get_by_id(int(event_id))
            if not event:
                raise NotFoundError("Event not found")
            if event.is_full:
                raise ValidationError("Event has reached maximum capacity")
            if tx.enrollments.exists(user_id=user.user_id, event_id=event.event_id):
                raise ValidationError("Already enrolled in this event")

            # Conditional increment: two requests racing for the last seat cannot both win.
            if not tx.events.reserve_seat(event.event_id):
                raise ValidationError("Event has reached maximum capacity")

            enrollment_id = tx.enrollments.create(user_id=user.user_id, event_id=event.event_id, created_at=now)
            if not enrollment_id:
                raise ValidationError("Already enrolled in this event")

            enrollment = tx.enrollments.get_by_id(enrollment_id)

        logger.info("User %s enrolled in event %s (enrollment %s)", user_id, event_id, enrollment_id)
        return enrollment

    def claim_points(self, *, user_id: int, enrollment_ids: Any) -> ClaimResult:
        ids = normalize_enrollment_ids(enrollment_ids)
        outbox = NotificationOutbox()
        awarded = 0

        with self._uow.begin() as tx:
            settings = enforced_settings(tx.settings)

            # Foreign enrollments are reported as missing.
            found = {e.enrollment_id: e for e in tx.enrollments.get_many(ids, for_update=True) if e.user_id == user_id}
            missing = [i for i in ids if i not in found]
            if missing:
                raise NotFoundError(f"Enrollment(s) not found: {', '.join(str(i) for i in missing)}")

            claimed = [found[i] for i in ids]
            for e in claimed:
                if e.status != EnrollmentStatus.JOIN:
                    raise ValidationError(f"Enrollment {e.enrollment_id} must have status 'JOIN' to claim points")
                if e.claim_point:
                    raise ValidationError(f"Points already claimed for enrollment {e.enrollment_id}")

            if settings.auto_approve_points:
                awarded = self._auto_approve(tx, user_id=user_id, claimed=claimed, outbox=outbox)

            for e in claimed:
                if not tx.enrollments.mark_claimed(e.enrollment_id):
                    raise ValidationError(f"Points already claimed for enrollment {e.enrollment_id}")

            updated = list(tx.enrollments.get_many(ids))

        outbox.flush(self._dispatcher)
        logger.info(
            "User %s claimed %s enrollment(s), auto_approved=%s, points=%s",
            user_id,
            len(ids),
            settings.auto_approve_points,
            awarded,
        )
        return ClaimResult(enrollments=updated, auto_approved=settings.auto_approve_points, points_awarded=awarded)

    def _auto_approve(self, tx: Transaction, *, user_id: int, claimed: Sequence[Enrollment], outbox: NotificationOutbox) -> int:
        user = tx.users.get_by_id(int(user_id), for_update=True)
        if not user:
            raise NotFoundError("User not found")

        strategy = self._factory.for_target(current=EnrollmentStatus.JOIN, target=EnrollmentStatus.ATTENDED)
        awarded = 0
        for e in claimed:
            event = tx.events.get_by_id(e.event_id)
            if not event:
                raise NotFoundError("Event not found")
            strategy.apply(TransitionContext(tx=tx, enrollment=e, event=event, user=user, outbox=outbox))
            awarded += event.point_value
        return awarded

    def update_status(self, *, enrollment_id: int, status: Any) -> Enrollment:
        target = parse_status(status)
        outbox = NotificationOutbox()

        with self._uow.begin() as tx:
            enrollment = tx.enrollments.get_by_id(int(enrollment_id), for_update=True)
            if not enrollment:
                raise NotFoundError("Enrollment not found")

            strategy = self._factory.for_target(current=enrollment.status, target=target)

            event = tx.events.get_by_id(enrollment.event_id)
            user = tx.users.get_by_id(enrollment.user_id, for_update=True)
            if not event or not user:
                raise NotFoundError("Enrollment not found")

            strategy.apply(TransitionContext(tx=tx, enrollment=enrollment, event=event, user=user, outbox=outbox))
            updated = tx.enrollments.get_by_id(enrollment.enrollment_id)

        outbox.flush(self._dispatcher)
        logger.info("Enrollment %s: %s -> %s", enrollment_id, enrollment.status.value, target.value)
        return updated

    def list_claimed_join(self) -> Sequence[EnrollmentDetail]:
        return self._enrollments.list_claimed_join()

    def list_user_joined(self, user_id: int) -> Sequence[EnrollmentDetail]:
        return self._enrollments.list_for_user(int(user_id), EnrollmentStatus.JOIN)
