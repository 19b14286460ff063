from __future__ import annotations

from ...core.enums import EnrollmentStatus
from .base import EnrollmentTransition, TransitionContext


class ScannedTransition(EnrollmentTransition):
    """Check-in marker only."""

    target = EnrollmentStatus.SCANNED

    def apply(self, ctx: TransitionContext) -> None:
        self._move(ctx)
