from __future__ import annotations

from ...core.enums import EnrollmentStatus
from .base import EnrollmentTransition, TransitionContext


class RejectedTransition(EnrollmentTransition):
    """No points; the enrollment is closed."""

    target = EnrollmentStatus.REJECTED

    def apply(self, ctx: TransitionContext) -> None:
        self._move(ctx)
