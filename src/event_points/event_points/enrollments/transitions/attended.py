from __future__ import annotations

import logging

from ...attendance.service import require_present_on
from ...core.enums import EnrollmentStatus
from .base import EnrollmentTransition, TransitionContext

logger = logging.getLogger(__name__)


class AttendedTransition(EnrollmentTransition):
    """Requires a PRESENT check-in on the event day, then awards the event's points."""

    target = EnrollmentStatus.ATTENDED

    def apply(self, ctx: TransitionContext) -> None:
        require_present_on(
            ctx.tx.attendance,
            user_id=ctx.enrollment.user_id,
            day=ctx.event.event_date,
            message="User was not marked PRESENT on the event date. Cannot mark as ATTENDED.",
        )
        self._move(ctx)
        ctx.tx.users.add_points(ctx.user.user_id, ctx.event.point_value)
        logger.info(
            "Enrollment %s ATTENDED: +%s points for user %s",
            ctx.enrollment.enrollment_id,
            ctx.event.point_value,
            ctx.user.user_id,
        )

        if ctx.user.can_receive(opted_in=ctx.user.approve_notify):
            ctx.outbox.add(
                ctx.user.push_token,
                "Claim Approved!",
                "Your claimed point has been approved.",
                {"status": "approved"},
            )
