from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import EnrollmentStatus
from ...core.exceptions import ValidationError
from ...database.transaction import Transaction
from ...events.model import Event
from ...notifications.outbox import NotificationOutbox
from ...users.model import User
from ..model import Enrollment


@dataclass(frozen=True)
class TransitionContext:
    tx: Transaction
    enrollment: Enrollment
    event: Event
    user: User
    outbox: NotificationOutbox


class EnrollmentTransition(ABC):
    """Strategy Pattern: what moving an enrollment into one status entails."""

    target: EnrollmentStatus

    @abstractmethod
    def apply(self, ctx: TransitionContext) -> None:
        raise NotImplementedError

    def _move(self, ctx: TransitionContext) -> None:
        moved = ctx.tx.enrollments.set_status(
            ctx.enrollment.enrollment_id, self.target, expected=ctx.enrollment.status
        )
        if not moved:
            raise ValidationError(f"Enrollment {ctx.enrollment.enrollment_id} was updated concurrently")
