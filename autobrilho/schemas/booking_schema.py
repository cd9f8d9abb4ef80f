"""Booking request/result and availability result models."""

from datetime import date, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from autobrilho.schemas.appointment_schema import Appointment
from autobrilho.utils import truncate_to_minute


class BookingRequest(BaseModel):
    """Validated booking request data."""
    user_id: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    appointment_date: date
    start_time: time
    notes: Optional[str] = None

    @field_validator("user_id", "service_id", mode="before")
    @classmethod
    def _strip_ids(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("start_time")
    @classmethod
    def _truncate(cls, value: time) -> time:
        return truncate_to_minute(value)


class BookingOutcome(str, Enum):
    """Why a booking attempt ended the way it did."""

    BOOKED = "booked"
    INVALID_REQUEST = "invalid_request"
    DATE_NOT_BOOKABLE = "date_not_bookable"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_SLOT = "invalid_slot"
    SLOT_TAKEN = "slot_taken"
    TRANSIENT_FAILURE = "transient_failure"


# Rejections the user can fix by changing their input
VALIDATION_OUTCOMES: frozenset[BookingOutcome] = frozenset({
    BookingOutcome.INVALID_REQUEST,
    BookingOutcome.DATE_NOT_BOOKABLE,
    BookingOutcome.SERVICE_UNAVAILABLE,
    BookingOutcome.INVALID_SLOT,
})


class BookingResult(BaseModel):
    """Booking attempt result."""
    success: bool
    outcome: BookingOutcome
    message: str
    retryable: bool = False
    appointment: Optional[Appointment] = None

    @property
    def is_validation_rejection(self) -> bool:
        return self.outcome in VALIDATION_OUTCOMES

    @property
    def is_conflict(self) -> bool:
        """True when the request was well-formed but lost the slot to another booking."""
        return self.outcome == BookingOutcome.SLOT_TAKEN


class AvailabilityOutcome(str, Enum):
    """How an availability lookup was resolved."""

    RESOLVED = "resolved"
    DATE_NOT_BOOKABLE = "date_not_bookable"
    SERVICE_UNAVAILABLE = "service_unavailable"
    FULL_DAY_BLOCKED = "full_day_blocked"
    TRANSIENT_FAILURE = "transient_failure"


class AvailabilityResult(BaseModel):
    """Free start times for one service on one date, in roster order."""
    service_id: str
    appointment_date: date
    outcome: AvailabilityOutcome = AvailabilityOutcome.RESOLVED
    slots: list[time] = Field(default_factory=list)
    message: str = ""
    retryable: bool = False

    @property
    def available(self) -> bool:
        return bool(self.slots)
