"""
In-memory datastore for tests, demos and the offline CLI.

All state lives in per-instance dicts guarded by one lock. The slot
check inside ``insert_appointment`` and the insert itself run under that
lock, so two concurrent bookings for one slot cannot both commit.
"""

import logging
import threading
from datetime import date, datetime, time, timezone
from typing import Optional

from autobrilho.errors import (
    AppointmentNotFoundError,
    BlockNotFoundError,
    ServiceNotFoundError,
    SlotConflictError,
)
from autobrilho.schemas.appointment_schema import Appointment, AppointmentStatus
from autobrilho.schemas.blocked_slot_schema import BlockedSlot
from autobrilho.schemas.profile_schema import Profile
from autobrilho.schemas.service_schema import Service, ServiceUpdate
from autobrilho.store.base import Datastore, check_ordering
from autobrilho.utils import truncate_to_minute

logger = logging.getLogger(__name__)


class InMemoryDatastore(Datastore):
    """Dict-backed datastore. Returned records are copies."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._services: dict[str, Service] = {}
        self._appointments: dict[str, Appointment] = {}
        self._blocks: dict[str, BlockedSlot] = {}
        self._profiles: dict[str, Profile] = {}

    # -- services ------------------------------------------------------- #

    def add_service(self, service: Service) -> Service:
        with self._lock:
            self._services[service.id] = service.model_copy()
        logger.debug("Service stored: %s (%s)", service.name, service.id)
        return service.model_copy()

    def get_service(self, service_id: str) -> Optional[Service]:
        with self._lock:
            service = self._services.get(service_id)
            return service.model_copy() if service else None

    def list_services(self, active_only: bool = False, order_by: str = "name") -> list[Service]:
        check_ordering(order_by)
        with self._lock:
            services = [s.model_copy() for s in self._services.values()]
        if active_only:
            services = [s for s in services if s.is_active]
        return sorted(services, key=lambda s: getattr(s, order_by))

    def update_service(self, service_id: str, changes: ServiceUpdate) -> Service:
        with self._lock:
            current = self._services.get(service_id)
            if current is None:
                raise ServiceNotFoundError(f"Service {service_id} not found.")
            updated = Service.model_validate({
                **current.model_dump(),
                **changes.model_dump(exclude_unset=True),
                "updated_at": datetime.now(timezone.utc),
            })
            self._services[service_id] = updated
            return updated.model_copy()

    # -- appointments --------------------------------------------------- #

    def active_start_times(self, day: date) -> set[time]:
        with self._lock:
            return {
                truncate_to_minute(a.start_time)
                for a in self._appointments.values()
                if a.appointment_date == day and a.is_active
            }

    def insert_appointment(self, appointment: Appointment) -> Appointment:
        start = truncate_to_minute(appointment.start_time)
        with self._lock:
            if appointment.is_active and start in self.active_start_times(
                appointment.appointment_date
            ):
                raise SlotConflictError(
                    f"Slot {start:%H:%M} on {appointment.appointment_date} is already held."
                )
            self._appointments[appointment.id] = appointment.model_copy()
        return appointment.model_copy()

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            appointment = self._appointments.get(appointment_id)
            return appointment.model_copy() if appointment else None

    def update_appointment_status(
        self, appointment_id: str, status: AppointmentStatus
    ) -> Appointment:
        with self._lock:
            current = self._appointments.get(appointment_id)
            if current is None:
                raise AppointmentNotFoundError(f"Appointment {appointment_id} not found.")
            updated = current.model_copy(
                update={"status": status, "updated_at": datetime.now(timezone.utc)}
            )
            self._appointments[appointment_id] = updated
            return updated.model_copy()

    def list_appointments(self, user_id: Optional[str] = None) -> list[Appointment]:
        with self._lock:
            appointments = [a.model_copy() for a in self._appointments.values()]
        if user_id is not None:
            appointments = [a for a in appointments if a.user_id == user_id]
        return sorted(
            appointments,
            key=lambda a: (a.appointment_date, a.start_time),
            reverse=True,
        )

    # -- blocked slots -------------------------------------------------- #

    def add_block(self, block: BlockedSlot) -> BlockedSlot:
        with self._lock:
            self._blocks[block.id] = block.model_copy()
        return block.model_copy()

    def blocks_for(self, day: date) -> list[BlockedSlot]:
        with self._lock:
            return [b.model_copy() for b in self._blocks.values() if b.blocked_date == day]

    def delete_block(self, block_id: str) -> None:
        with self._lock:
            if self._blocks.pop(block_id, None) is None:
                raise BlockNotFoundError(f"Blocked slot {block_id} not found.")

    def list_blocks(self, from_date: Optional[date] = None) -> list[BlockedSlot]:
        with self._lock:
            blocks = [b.model_copy() for b in self._blocks.values()]
        if from_date is not None:
            blocks = [b for b in blocks if b.blocked_date >= from_date]
        return sorted(blocks, key=lambda b: (b.blocked_date, b.start_time or time.min))

    # -- profiles ------------------------------------------------------- #

    def upsert_profile(self, profile: Profile) -> Profile:
        with self._lock:
            existing = self._profiles.get(profile.user_id)
            if existing is not None:
                profile = profile.model_copy(update={
                    "id": existing.id,
                    "created_at": existing.created_at,
                    "updated_at": datetime.now(timezone.utc),
                })
            self._profiles[profile.user_id] = profile.model_copy()
        return profile.model_copy()

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with self._lock:
            profile = self._profiles.get(user_id)
            return profile.model_copy() if profile else None

    def list_profiles(self) -> list[Profile]:
        with self._lock:
            profiles = [p.model_copy() for p in self._profiles.values()]
        return sorted(profiles, key=lambda p: p.created_at, reverse=True)

    def reset(self) -> None:
        """Clear all records. Used by test fixtures for isolation."""
        with self._lock:
            self._services.clear()
            self._appointments.clear()
            self._blocks.clear()
            self._profiles.clear()
