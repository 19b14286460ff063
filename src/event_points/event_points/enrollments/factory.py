from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import EnrollmentStatus
from ..core.exceptions import ValidationError
from .transitions.attended import AttendedTransition
from .transitions.base import EnrollmentTransition
from .transitions.rejected import RejectedTransition
from .transitions.scanned import ScannedTransition

ALLOWED_TRANSITIONS: dict[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    EnrollmentStatus.JOIN: frozenset({EnrollmentStatus.SCANNED, EnrollmentStatus.ATTENDED, EnrollmentStatus.REJECTED}),
    EnrollmentStatus.SCANNED: frozenset({EnrollmentStatus.ATTENDED, EnrollmentStatus.REJECTED}),
    EnrollmentStatus.ATTENDED: frozenset(),
    EnrollmentStatus.REJECTED: frozenset(),
}


@dataclass
class EnrollmentTransitionFactory:
    """Factory Pattern: validate the move and pick the strategy for the target status."""

    def for_target(self, *, current: EnrollmentStatus, target: EnrollmentStatus) -> EnrollmentTransition:
        if current == EnrollmentStatus.ATTENDED:
            raise ValidationError("User is already marked as ATTENDED")
        if not ALLOWED_TRANSITIONS[current]:
            raise ValidationError(f"Enrollment is already {current.value}")
        if target not in ALLOWED_TRANSITIONS[current]:
            raise ValidationError(f"Cannot change enrollment status from {current.value} to {target.value}")

        if target == EnrollmentStatus.ATTENDED:
            return AttendedTransition()
        if target == EnrollmentStatus.REJECTED:
            return RejectedTransition()
        return ScannedTransition()
