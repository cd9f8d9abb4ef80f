"""
Staff-side operations: appointment status changes, blackout management,
and the joined appointment listing the admin view displays.
"""

from typing import Optional

from autobrilho.errors import AppointmentNotFoundError
from autobrilho.logging_context import get_request_logger
from autobrilho.scheduling.blackout import BlackoutRegistry
from autobrilho.scheduling.catalog import Catalog
from autobrilho.scheduling.lifecycle import AppointmentLifecycle
from autobrilho.schemas.appointment_schema import (
    Appointment,
    AppointmentDetails,
    AppointmentStatus,
)
from autobrilho.schemas.profile_schema import Profile
from autobrilho.store.base import Datastore

logger = get_request_logger(__name__)


class StaffDesk:
    """Administrative entry points. Status writes are single-row updates."""

    def __init__(
        self,
        store: Datastore,
        lifecycle: Optional[AppointmentLifecycle] = None,
    ) -> None:
        self._store = store
        self._lifecycle = lifecycle or AppointmentLifecycle()
        self.catalog = Catalog(store)
        self.blackouts = BlackoutRegistry(store)

    def set_status(self, appointment_id: str, target: AppointmentStatus) -> Appointment:
        """
        Move an appointment to ``target``.

        Raises:
            AppointmentNotFoundError: If the id is unknown.
            InvalidTransitionError: If the lifecycle forbids the move.
        """
        appointment = self._store.get_appointment(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found.")
        self._lifecycle.check(appointment.status, target)
        updated = self._store.update_appointment_status(appointment_id, target)
        logger.info(
            "Appointment %s: %s -> %s",
            appointment_id, appointment.status.value, target.value,
        )
        return updated

    def confirm(self, appointment_id: str) -> Appointment:
        return self.set_status(appointment_id, AppointmentStatus.CONFIRMED)

    def complete(self, appointment_id: str) -> Appointment:
        return self.set_status(appointment_id, AppointmentStatus.COMPLETED)

    def cancel(self, appointment_id: str) -> Appointment:
        return self.set_status(appointment_id, AppointmentStatus.CANCELLED)

    def appointments(self) -> list[AppointmentDetails]:
        """All appointments, newest date first, with service and client profile attached."""
        services = {s.id: s for s in self._store.list_services()}
        profiles = {p.user_id: p for p in self._store.list_profiles()}
        return [
            AppointmentDetails(
                appointment=a,
                service=services.get(a.service_id),
                profile=profiles.get(a.user_id),
            )
            for a in self._store.list_appointments()
        ]

    def clients(self) -> list[Profile]:
        """Client profiles, most recent sign-ups first."""
        return self._store.list_profiles()
