"""
Finite state machine for appointment status.

Appointments are created as PENDING and only ever move forward:

    pending   -> confirmed | cancelled
    confirmed -> completed | cancelled
    completed, cancelled: terminal

Usage:
    lifecycle = AppointmentLifecycle()
    lifecycle.check(AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)
"""

import logging
from dataclasses import dataclass

from autobrilho.errors import InvalidTransitionError
from autobrilho.schemas.appointment_schema import AppointmentStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: AppointmentStatus
    to_status: AppointmentStatus


class AppointmentLifecycle:
    """
    Explicit transition table for appointment status.

    Every transition must be listed. Anything else is rejected with an
    error naming the statuses reachable from the current one.
    """

    TRANSITIONS: tuple[Transition, ...] = (
        # --- Staff review ---
        Transition(AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED),
        Transition(AppointmentStatus.PENDING, AppointmentStatus.CANCELLED),

        # --- Service day ---
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED),
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED),
    )

    def allowed_targets(self, current: AppointmentStatus) -> list[AppointmentStatus]:
        """Return all statuses reachable in one step from ``current``."""
        return [t.to_status for t in self.TRANSITIONS if t.from_status == current]

    def can_transition(self, current: AppointmentStatus, target: AppointmentStatus) -> bool:
        return target in self.allowed_targets(current)

    def is_terminal(self, status: AppointmentStatus) -> bool:
        return not self.allowed_targets(status)

    def check(self, current: AppointmentStatus, target: AppointmentStatus) -> AppointmentStatus:
        """
        Validate a transition.

        Returns:
            The target status.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        if self.can_transition(current, target):
            logger.debug("Status transition: %s -> %s", current.value, target.value)
            return target

        valid = [s.value for s in self.allowed_targets(current)]
        raise InvalidTransitionError(
            f"No valid transition from '{current.value}' to '{target.value}'. "
            f"Valid targets: {valid}"
        )
