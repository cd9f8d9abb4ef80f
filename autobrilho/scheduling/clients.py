"""Client-side account operations: profile upkeep and appointment history."""

import logging
from datetime import date
from typing import Optional

from autobrilho.schemas.appointment_schema import (
    ACTIVE_STATUSES,
    AppointmentDetails,
    AppointmentHistory,
    AppointmentStatus,
)
from autobrilho.schemas.profile_schema import Profile
from autobrilho.store.base import Datastore

logger = logging.getLogger(__name__)


class ClientAccount:
    """Profile and history reads/writes for one signed-in user."""

    def __init__(self, store: Datastore, user_id: str) -> None:
        self._store = store
        self.user_id = user_id

    def save_profile(
        self,
        full_name: str,
        email: str,
        phone: Optional[str] = None,
        vehicle_model: Optional[str] = None,
        vehicle_color: Optional[str] = None,
        vehicle_plate: Optional[str] = None,
    ) -> Profile:
        """Create or update this user's profile. Raises pydantic ValidationError on bad input."""
        profile = self._store.upsert_profile(Profile(
            user_id=self.user_id,
            full_name=full_name,
            email=email,
            phone=phone,
            vehicle_model=vehicle_model,
            vehicle_color=vehicle_color,
            vehicle_plate=vehicle_plate,
        ))
        logger.info("Profile saved for user %s", self.user_id)
        return profile

    def profile(self) -> Optional[Profile]:
        return self._store.get_profile(self.user_id)

    def history(self, today: date) -> AppointmentHistory:
        """
        Split this user's appointments into upcoming and past.

        Upcoming: pending/confirmed on or after ``today``. Past: completed,
        or dated before ``today``. Cancelled appointments that are still in
        the future appear in neither list.
        """
        services = {s.id: s for s in self._store.list_services()}
        history = AppointmentHistory()
        for appointment in self._store.list_appointments(user_id=self.user_id):
            details = AppointmentDetails(
                appointment=appointment,
                service=services.get(appointment.service_id),
            )
            if appointment.status in ACTIVE_STATUSES and appointment.appointment_date >= today:
                history.upcoming.append(details)
            elif (
                appointment.status == AppointmentStatus.COMPLETED
                or appointment.appointment_date < today
            ):
                history.past.append(details)
        return history
