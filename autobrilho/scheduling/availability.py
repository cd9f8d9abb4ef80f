"""
Availability resolution for one service on one date.

A roster slot is free when no pending/confirmed appointment starts at
it and no blackout covers it. A full-day block empties the day. Every
call re-reads the datastore; nothing is cached between calls.
"""

from datetime import date, time
from typing import Optional

from autobrilho.errors import StorageUnavailableError
from autobrilho.logging_context import get_request_logger
from autobrilho.scheduling.blackout import BlackoutRegistry
from autobrilho.scheduling.calendar_policy import CalendarWindowPolicy
from autobrilho.schemas.booking_schema import AvailabilityOutcome, AvailabilityResult
from autobrilho.schemas.service_schema import Service
from autobrilho.store.base import Datastore

logger = get_request_logger(__name__)


class AvailabilityResolver:
    """Filters the daily roster down to the slots that can still be booked."""

    def __init__(
        self,
        store: Datastore,
        policy: CalendarWindowPolicy,
        blackouts: Optional[BlackoutRegistry] = None,
    ) -> None:
        self._store = store
        self._policy = policy
        self._blackouts = blackouts or BlackoutRegistry(store)

    def available_slots(self, service: Service, day: date) -> list[time]:
        """Return free start times in roster order.

        Raises:
            StorageUnavailableError: If the datastore cannot be read.
        """
        return self.resolve(service, day, raise_on_storage_error=True).slots

    def resolve(
        self, service: Service, day: date, raise_on_storage_error: bool = False
    ) -> AvailabilityResult:
        """Resolve availability, reporting why a day has no slots."""
        if not self._policy.is_bookable(day):
            return AvailabilityResult(
                service_id=service.id,
                appointment_date=day,
                outcome=AvailabilityOutcome.DATE_NOT_BOOKABLE,
                message=f"{day} is outside the booking window.",
            )

        if not service.is_active:
            return AvailabilityResult(
                service_id=service.id,
                appointment_date=day,
                outcome=AvailabilityOutcome.SERVICE_UNAVAILABLE,
                message=f"{service.name} is not currently offered.",
            )

        try:
            taken = self._store.active_start_times(day)
            blocks = self._blackouts.blocks_for(day)
        except StorageUnavailableError:
            if raise_on_storage_error:
                raise
            logger.warning("Availability lookup failed for %s on %s", service.id, day)
            return AvailabilityResult(
                service_id=service.id,
                appointment_date=day,
                outcome=AvailabilityOutcome.TRANSIENT_FAILURE,
                message="Could not load availability right now. Please try again.",
                retryable=True,
            )

        if any(b.is_full_day for b in blocks):
            return AvailabilityResult(
                service_id=service.id,
                appointment_date=day,
                outcome=AvailabilityOutcome.FULL_DAY_BLOCKED,
                message=f"No appointments on {day}.",
            )

        partial = [b for b in blocks if not b.is_full_day]
        slots = [
            t for t in self._policy.day_slots(service)
            if t not in taken and not any(b.covers(t) for b in partial)
        ]

        logger.debug(
            "Availability for %s on %s: %d free, %d taken, %d blocks",
            service.id, day, len(slots), len(taken), len(partial),
        )
        return AvailabilityResult(
            service_id=service.id,
            appointment_date=day,
            slots=slots,
            message=f"{len(slots)} time slots available on {day}.",
        )
