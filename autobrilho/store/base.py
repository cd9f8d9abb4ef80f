"""
Datastore interface shared by the in-memory and SQL backends.

The datastore is the single owner of persisted state. The scheduling
engine re-reads it on every call and never caches availability.
Backends must guarantee that ``insert_appointment`` refuses a second
active appointment for the same (date, start time), raising
``SlotConflictError`` at commit.
"""

from abc import ABC, abstractmethod
from datetime import date, time
from typing import Optional

from autobrilho.schemas.appointment_schema import Appointment, AppointmentStatus
from autobrilho.schemas.blocked_slot_schema import BlockedSlot
from autobrilho.schemas.profile_schema import Profile
from autobrilho.schemas.service_schema import Service, ServiceUpdate

SERVICE_ORDERINGS = ("name", "price")


class Datastore(ABC):
    """Query and write capability over services, appointments, blocks and profiles."""

    # -- services ------------------------------------------------------- #

    @abstractmethod
    def add_service(self, service: Service) -> Service: ...

    @abstractmethod
    def get_service(self, service_id: str) -> Optional[Service]: ...

    @abstractmethod
    def list_services(self, active_only: bool = False, order_by: str = "name") -> list[Service]:
        """List services ordered by ``name`` or by ascending ``price``."""

    @abstractmethod
    def update_service(self, service_id: str, changes: ServiceUpdate) -> Service:
        """Apply a partial update. Raises ServiceNotFoundError."""

    # -- appointments --------------------------------------------------- #

    @abstractmethod
    def active_start_times(self, day: date) -> set[time]:
        """Start times (hour:minute) of pending/confirmed appointments on ``day``."""

    @abstractmethod
    def insert_appointment(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment. Raises SlotConflictError if the slot is held."""

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Optional[Appointment]: ...

    @abstractmethod
    def update_appointment_status(
        self, appointment_id: str, status: AppointmentStatus
    ) -> Appointment:
        """Single-row status write. Raises AppointmentNotFoundError."""

    @abstractmethod
    def list_appointments(self, user_id: Optional[str] = None) -> list[Appointment]:
        """List appointments, newest date first, optionally for one user."""

    # -- blocked slots -------------------------------------------------- #

    @abstractmethod
    def add_block(self, block: BlockedSlot) -> BlockedSlot: ...

    @abstractmethod
    def blocks_for(self, day: date) -> list[BlockedSlot]: ...

    @abstractmethod
    def delete_block(self, block_id: str) -> None:
        """Remove a block. Raises BlockNotFoundError."""

    @abstractmethod
    def list_blocks(self, from_date: Optional[date] = None) -> list[BlockedSlot]:
        """List blocks in date order, optionally from ``from_date`` onwards."""

    # -- profiles ------------------------------------------------------- #

    @abstractmethod
    def upsert_profile(self, profile: Profile) -> Profile:
        """Insert or replace the profile keyed by ``user_id``."""

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[Profile]: ...

    @abstractmethod
    def list_profiles(self) -> list[Profile]:
        """List profiles, most recently created first."""


def check_ordering(order_by: str) -> None:
    if order_by not in SERVICE_ORDERINGS:
        raise ValueError(f"order_by must be one of {SERVICE_ORDERINGS}, got {order_by!r}")
