"""
Booking desk: the async entry points the customer-facing UI calls.

Flow: list the catalog -> resolve availability for a chosen date ->
book an open slot. Datastore calls are blocking round-trips, so every
call runs the synchronous engine in a worker thread and the event loop
stays free while it waits. Each call gets its own request id for log
correlation.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Optional

from pydantic import ValidationError

from autobrilho.errors import StorageUnavailableError
from autobrilho.logging_context import get_request_logger, new_request_id
from autobrilho.scheduling.availability import AvailabilityResolver
from autobrilho.scheduling.booking import BookingTransaction
from autobrilho.scheduling.calendar_policy import BookingWindow, CalendarWindowPolicy
from autobrilho.scheduling.catalog import Catalog
from autobrilho.schemas.appointment_schema import Appointment
from autobrilho.schemas.booking_schema import (
    AvailabilityOutcome,
    AvailabilityResult,
    BookingOutcome,
    BookingRequest,
    BookingResult,
)
from autobrilho.schemas.service_schema import Service
from autobrilho.store.base import Datastore

logger = get_request_logger(__name__)


class BookingDesk:
    """Customer booking surface over the catalog, resolver and transaction."""

    def __init__(self, store: Datastore, policy: Optional[CalendarWindowPolicy] = None) -> None:
        self._policy = policy or CalendarWindowPolicy()
        self._catalog = Catalog(store)
        self._resolver = AvailabilityResolver(store, self._policy)
        self._transaction = BookingTransaction(store, self._policy, resolver=self._resolver)

    # ------------------------------------------------------------------ #
    # Catalog and calendar
    # ------------------------------------------------------------------ #

    async def list_services(self) -> list[Service]:
        """Active services, cheapest first."""
        new_request_id()
        return await asyncio.to_thread(self._catalog.offerable)

    def booking_window(self) -> BookingWindow:
        """Dates the calendar widget may offer; no datastore access."""
        return self._policy.legal_window()

    # ------------------------------------------------------------------ #
    # Availability
    # ------------------------------------------------------------------ #

    async def available_slots(self, service_id: str, day: date) -> AvailabilityResult:
        """Resolve open start times for a service on ``day``.

        A datastore failure is reported as a retryable TRANSIENT_FAILURE
        result rather than raised.

        Raises:
            ServiceNotFoundError: If ``service_id`` does not exist.
        """
        new_request_id()
        try:
            service = await asyncio.to_thread(self._catalog.get, service_id)
        except StorageUnavailableError:
            logger.warning("Service lookup failed for %s", service_id)
            return AvailabilityResult(
                service_id=service_id,
                appointment_date=day,
                outcome=AvailabilityOutcome.TRANSIENT_FAILURE,
                message="Could not load availability right now. Please try again.",
                retryable=True,
            )
        return await asyncio.to_thread(self._resolver.resolve, service, day)

    # ------------------------------------------------------------------ #
    # Booking
    # ------------------------------------------------------------------ #

    async def book(
        self,
        user_id: str,
        service_id: str,
        day: str | date,
        start: str,
        notes: Optional[str] = None,
    ) -> BookingResult:
        """Validate raw form input and book the slot.

        ``day`` is YYYY-MM-DD (or a date), ``start`` is HH:MM.
        """
        new_request_id()
        try:
            request = BookingRequest(
                user_id=user_id,
                service_id=service_id,
                appointment_date=day,
                start_time=start,
                notes=notes,
            )
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            logger.info("Booking request rejected: invalid %s", fields)
            return BookingResult(
                success=False,
                outcome=BookingOutcome.INVALID_REQUEST,
                message=f"Invalid booking details: {', '.join(fields)}.",
            )
        return await asyncio.to_thread(self._transaction.book_request, request)

    async def cancel(self, user_id: str, appointment_id: str) -> Appointment:
        """Cancel one of the user's own appointments, freeing the slot.

        Raises:
            AppointmentNotFoundError: Unknown id or not owned by ``user_id``.
            InvalidTransitionError: Already completed or cancelled.
        """
        new_request_id()
        return await asyncio.to_thread(self._transaction.cancel, appointment_id, user_id)
