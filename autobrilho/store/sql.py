"""
SQLAlchemy-backed datastore for SQLite and PostgreSQL.

The at-most-one-booking-per-slot rule is enforced by the partial unique
index ``uq_appointments_active_slot`` on (appointment_date, start_time)
over pending/confirmed rows. A losing concurrent insert surfaces as
``IntegrityError`` at flush and is re-raised as ``SlotConflictError``.
Connection-level failures become ``StorageUnavailableError``.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime, time, timezone
from typing import Iterator, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from autobrilho.errors import (
    AppointmentNotFoundError,
    BlockNotFoundError,
    ServiceNotFoundError,
    SlotConflictError,
    StorageUnavailableError,
)
from autobrilho.schemas.appointment_schema import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentStatus,
)
from autobrilho.schemas.blocked_slot_schema import BlockedSlot
from autobrilho.schemas.profile_schema import Profile
from autobrilho.schemas.service_schema import Service, ServiceUpdate
from autobrilho.store.base import Datastore, check_ordering
from autobrilho.store.models import (
    AppointmentRow,
    Base,
    BlockedSlotRow,
    ProfileRow,
    ServiceRow,
)
from autobrilho.utils import truncate_to_minute

logger = logging.getLogger(__name__)

_ACTIVE_STATUS_VALUES = sorted(s.value for s in ACTIVE_STATUSES)


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if url.startswith("sqlite") and (url.endswith(":memory:") or url.rstrip("/") == "sqlite:"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo)
    return create_engine(url, echo=echo, pool_pre_ping=True)


class SqlDatastore(Datastore):
    """Relational datastore using SQLAlchemy ORM sessions, one per operation."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "SqlDatastore":
        return cls(build_engine(url, echo=echo))

    def create_schema(self) -> None:
        """Create all tables and indexes if they do not exist."""
        try:
            Base.metadata.create_all(self._engine)
        except (OperationalError, InterfaceError) as exc:
            raise StorageUnavailableError(f"Could not create schema: {exc}") from exc
        logger.info("Database schema ready on %s", self._engine.url.render_as_string())

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """Yield a session inside a transaction that commits on success."""
        try:
            with self._session_factory.begin() as session:
                yield session
        except (OperationalError, InterfaceError) as exc:
            logger.warning("Datastore unavailable: %s", exc.__class__.__name__)
            raise StorageUnavailableError(str(exc.orig or exc)) from exc

    # -- services ------------------------------------------------------- #

    def add_service(self, service: Service) -> Service:
        with self._transaction() as session:
            session.add(ServiceRow(**service.model_dump()))
        return service.model_copy()

    def get_service(self, service_id: str) -> Optional[Service]:
        with self._transaction() as session:
            row = session.get(ServiceRow, service_id)
            return Service.model_validate(row, from_attributes=True) if row else None

    def list_services(self, active_only: bool = False, order_by: str = "name") -> list[Service]:
        check_ordering(order_by)
        stmt = select(ServiceRow).order_by(getattr(ServiceRow, order_by), ServiceRow.name)
        if active_only:
            stmt = stmt.where(ServiceRow.is_active.is_(True))
        with self._transaction() as session:
            rows = session.scalars(stmt).all()
            return [Service.model_validate(r, from_attributes=True) for r in rows]

    def update_service(self, service_id: str, changes: ServiceUpdate) -> Service:
        with self._transaction() as session:
            row = session.get(ServiceRow, service_id)
            if row is None:
                raise ServiceNotFoundError(f"Service {service_id} not found.")
            edits = changes.model_dump(exclude_unset=True)
            current = Service.model_validate(row, from_attributes=True).model_dump()
            Service.model_validate({**current, **edits})
            for name, value in edits.items():
                setattr(row, name, value)
            row.updated_at = datetime.now(timezone.utc)
            session.flush()
            return Service.model_validate(row, from_attributes=True)

    # -- appointments --------------------------------------------------- #

    def active_start_times(self, day: date) -> set[time]:
        stmt = select(AppointmentRow.start_time).where(
            AppointmentRow.appointment_date == day,
            AppointmentRow.status.in_(_ACTIVE_STATUS_VALUES),
        )
        with self._transaction() as session:
            return {truncate_to_minute(t) for t in session.scalars(stmt)}

    def insert_appointment(self, appointment: Appointment) -> Appointment:
        values = appointment.model_dump()
        values["status"] = appointment.status.value
        values["start_time"] = truncate_to_minute(appointment.start_time)
        try:
            with self._transaction() as session:
                session.add(AppointmentRow(**values))
                session.flush()
        except IntegrityError as exc:
            raise SlotConflictError(
                f"Slot {values['start_time']:%H:%M} on {appointment.appointment_date} "
                "is already held."
            ) from exc
        return appointment.model_copy(update={"start_time": values["start_time"]})

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        with self._transaction() as session:
            row = session.get(AppointmentRow, appointment_id)
            return Appointment.model_validate(row, from_attributes=True) if row else None

    def update_appointment_status(
        self, appointment_id: str, status: AppointmentStatus
    ) -> Appointment:
        with self._transaction() as session:
            row = session.get(AppointmentRow, appointment_id)
            if row is None:
                raise AppointmentNotFoundError(f"Appointment {appointment_id} not found.")
            row.status = status.value
            row.updated_at = datetime.now(timezone.utc)
            session.flush()
            return Appointment.model_validate(row, from_attributes=True)

    def list_appointments(self, user_id: Optional[str] = None) -> list[Appointment]:
        stmt = select(AppointmentRow).order_by(
            AppointmentRow.appointment_date.desc(), AppointmentRow.start_time.desc()
        )
        if user_id is not None:
            stmt = stmt.where(AppointmentRow.user_id == user_id)
        with self._transaction() as session:
            return [
                Appointment.model_validate(r, from_attributes=True)
                for r in session.scalars(stmt)
            ]

    # -- blocked slots -------------------------------------------------- #

    def add_block(self, block: BlockedSlot) -> BlockedSlot:
        with self._transaction() as session:
            session.add(BlockedSlotRow(**block.model_dump()))
        return block.model_copy()

    def blocks_for(self, day: date) -> list[BlockedSlot]:
        stmt = select(BlockedSlotRow).where(BlockedSlotRow.blocked_date == day)
        with self._transaction() as session:
            return [
                BlockedSlot.model_validate(r, from_attributes=True)
                for r in session.scalars(stmt)
            ]

    def delete_block(self, block_id: str) -> None:
        with self._transaction() as session:
            row = session.get(BlockedSlotRow, block_id)
            if row is None:
                raise BlockNotFoundError(f"Blocked slot {block_id} not found.")
            session.delete(row)

    def list_blocks(self, from_date: Optional[date] = None) -> list[BlockedSlot]:
        stmt = select(BlockedSlotRow).order_by(
            BlockedSlotRow.blocked_date, BlockedSlotRow.start_time
        )
        if from_date is not None:
            stmt = stmt.where(BlockedSlotRow.blocked_date >= from_date)
        with self._transaction() as session:
            return [
                BlockedSlot.model_validate(r, from_attributes=True)
                for r in session.scalars(stmt)
            ]

    # -- profiles ------------------------------------------------------- #

    def upsert_profile(self, profile: Profile) -> Profile:
        stmt = select(ProfileRow).where(ProfileRow.user_id == profile.user_id)
        with self._transaction() as session:
            row = session.scalars(stmt).first()
            if row is None:
                row = ProfileRow(**profile.model_dump())
                session.add(row)
            else:
                for name, value in profile.model_dump(
                    exclude={"id", "user_id", "created_at", "updated_at"}
                ).items():
                    setattr(row, name, value)
                row.updated_at = datetime.now(timezone.utc)
            session.flush()
            return Profile.model_validate(row, from_attributes=True)

    def get_profile(self, user_id: str) -> Optional[Profile]:
        stmt = select(ProfileRow).where(ProfileRow.user_id == user_id)
        with self._transaction() as session:
            row = session.scalars(stmt).first()
            return Profile.model_validate(row, from_attributes=True) if row else None

    def list_profiles(self) -> list[Profile]:
        stmt = select(ProfileRow).order_by(ProfileRow.created_at.desc())
        with self._transaction() as session:
            return [
                Profile.model_validate(r, from_attributes=True)
                for r in session.scalars(stmt)
            ]
