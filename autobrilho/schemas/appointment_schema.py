"""Appointment data models and status values."""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from autobrilho.schemas.profile_schema import Profile
from autobrilho.schemas.service_schema import Service
from autobrilho.utils import new_id


class AppointmentStatus(str, Enum):
    """Lifecycle status of an appointment."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that occupy a slot and constrain availability
ACTIVE_STATUSES: frozenset[AppointmentStatus] = frozenset(
    {AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED}
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(BaseModel):
    """A booked appointment for one service in one daily slot."""

    id: str = Field(default_factory=new_id)
    user_id: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    appointment_date: date
    start_time: time
    end_time: time
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class AppointmentDetails(BaseModel):
    """An appointment joined with its service and the client's profile, for display."""

    appointment: Appointment
    service: Optional[Service] = None
    profile: Optional[Profile] = None


class AppointmentHistory(BaseModel):
    """A client's appointments split for display."""

    upcoming: list[AppointmentDetails] = Field(default_factory=list)
    past: list[AppointmentDetails] = Field(default_factory=list)
