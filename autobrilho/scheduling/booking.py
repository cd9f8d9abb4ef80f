"""
Booking transaction: validate a (service, date, start) request and commit it.

Preconditions are checked in a fixed order, each with its own outcome:

    1. date inside the legal window        -> DATE_NOT_BOOKABLE
    2. service active                      -> SERVICE_UNAVAILABLE
    3. start time on the roster, and the
       service ends before midnight        -> INVALID_SLOT
    4. start time free right now           -> SLOT_TAKEN

The availability read and the insert are separate round-trips. The
datastore guards the insert itself, so a booking that loses a race after
passing step 4 is still reported as SLOT_TAKEN and nothing is written.
"""

from datetime import date, time
from typing import Optional

from autobrilho.errors import (
    AppointmentNotFoundError,
    ServiceNotFoundError,
    SlotConflictError,
    StorageUnavailableError,
)
from autobrilho.logging_context import get_request_logger
from autobrilho.scheduling.availability import AvailabilityResolver
from autobrilho.scheduling.calendar_policy import CalendarWindowPolicy, compute_end_time
from autobrilho.scheduling.lifecycle import AppointmentLifecycle
from autobrilho.schemas.appointment_schema import Appointment, AppointmentStatus
from autobrilho.schemas.booking_schema import BookingOutcome, BookingRequest, BookingResult
from autobrilho.schemas.service_schema import Service
from autobrilho.store.base import Datastore
from autobrilho.utils import truncate_to_minute

logger = get_request_logger(__name__)


def _reject(outcome: BookingOutcome, message: str, retryable: bool = False) -> BookingResult:
    logger.info("Booking rejected (%s): %s", outcome.value, message)
    return BookingResult(success=False, outcome=outcome, message=message, retryable=retryable)


class BookingTransaction:
    """Creates pending appointments in free slots, never in taken ones."""

    def __init__(
        self,
        store: Datastore,
        policy: CalendarWindowPolicy,
        resolver: Optional[AvailabilityResolver] = None,
        lifecycle: Optional[AppointmentLifecycle] = None,
    ) -> None:
        self._store = store
        self._policy = policy
        self._resolver = resolver or AvailabilityResolver(store, policy)
        self._lifecycle = lifecycle or AppointmentLifecycle()

    def book(
        self,
        user_id: str,
        service_id: str,
        day: date,
        start: time,
        notes: Optional[str] = None,
    ) -> BookingResult:
        """
        Validate and create one appointment.

        Returns:
            A BookingResult whose ``outcome`` names the rejection reason,
            or BOOKED with the created appointment.

        Raises:
            ServiceNotFoundError: If ``service_id`` does not exist.
        """
        start = truncate_to_minute(start)
        try:
            service = self._store.get_service(service_id)
        except StorageUnavailableError:
            return self._transient_failure()
        if service is None:
            raise ServiceNotFoundError(f"Cannot book unknown service {service_id}.")

        if not self._policy.is_bookable(day):
            window = self._policy.legal_window()
            return _reject(
                BookingOutcome.DATE_NOT_BOOKABLE,
                f"{day} is not bookable. Choose a date between "
                f"{window.earliest} and {window.latest}.",
            )

        if not service.is_active:
            return _reject(
                BookingOutcome.SERVICE_UNAVAILABLE,
                f"{service.name} is not currently offered.",
            )

        if start not in self._policy.day_slots(service) or not self._policy.fits_in_day(
            start, service
        ):
            return _reject(
                BookingOutcome.INVALID_SLOT,
                f"{start:%H:%M} is not a bookable start time for {service.name}.",
            )

        try:
            free = self._resolver.available_slots(service, day)
        except StorageUnavailableError:
            return self._transient_failure()
        if start not in free:
            return _reject(
                BookingOutcome.SLOT_TAKEN,
                f"{start:%H:%M} on {day} is no longer available. Please pick another time.",
            )

        return self._commit(user_id, service, day, start, notes)

    def book_request(self, request: BookingRequest) -> BookingResult:
        """Book from an already-validated request model."""
        return self.book(
            request.user_id,
            request.service_id,
            request.appointment_date,
            request.start_time,
            notes=request.notes,
        )

    def cancel(self, appointment_id: str, user_id: Optional[str] = None) -> Appointment:
        """
        Cancel an appointment, freeing its slot.

        When ``user_id`` is given, the appointment must belong to that user.

        Raises:
            AppointmentNotFoundError: Unknown id, or owned by another user.
            InvalidTransitionError: The appointment is already completed or cancelled.
        """
        appointment = self._store.get_appointment(appointment_id)
        if appointment is None or (user_id is not None and appointment.user_id != user_id):
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found.")
        self._lifecycle.check(appointment.status, AppointmentStatus.CANCELLED)
        cancelled = self._store.update_appointment_status(
            appointment_id, AppointmentStatus.CANCELLED
        )
        logger.info(
            "Appointment cancelled: %s (%s %s)",
            appointment_id, appointment.appointment_date, f"{appointment.start_time:%H:%M}",
        )
        return cancelled

    def _commit(
        self, user_id: str, service: Service, day: date, start: time, notes: Optional[str]
    ) -> BookingResult:
        appointment = Appointment(
            user_id=user_id,
            service_id=service.id,
            appointment_date=day,
            start_time=start,
            end_time=compute_end_time(start, service.duration_minutes),
            status=AppointmentStatus.PENDING,
            notes=notes,
        )
        try:
            created = self._store.insert_appointment(appointment)
        except SlotConflictError:
            logger.info("Slot lost at commit: %s %s", day, f"{start:%H:%M}")
            return _reject(
                BookingOutcome.SLOT_TAKEN,
                f"{start:%H:%M} on {day} was just booked by someone else. "
                "Please pick another time.",
            )
        except StorageUnavailableError:
            return self._transient_failure()

        logger.info(
            "Booking created: %s for %s on %s at %s",
            created.id, user_id, day, f"{start:%H:%M}",
        )
        return BookingResult(
            success=True,
            outcome=BookingOutcome.BOOKED,
            message=(
                f"Booking received. {service.name} on {day} at {start:%H:%M}. "
                "You will receive a confirmation soon."
            ),
            appointment=created,
        )

    @staticmethod
    def _transient_failure() -> BookingResult:
        return _reject(
            BookingOutcome.TRANSIENT_FAILURE,
            "We could not reach the booking system. Please try again.",
            retryable=True,
        )
