"""Shared test fixtures and helpers."""

from datetime import date, time
from decimal import Decimal
from typing import Optional

import pytest

from autobrilho.scheduling.availability import AvailabilityResolver
from autobrilho.scheduling.booking import BookingTransaction
from autobrilho.scheduling.calendar_policy import CalendarWindowPolicy, FixedClock
from autobrilho.schemas.appointment_schema import Appointment, AppointmentStatus
from autobrilho.schemas.service_schema import Service
from autobrilho.store.memory import InMemoryDatastore
from autobrilho.store.sql import SqlDatastore

TODAY = date(2025, 6, 1)
ROSTER = (
    time(8), time(9), time(10), time(11),
    time(13), time(14), time(15), time(16), time(17),
)


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def policy(clock):
    return CalendarWindowPolicy(clock=clock, window_days=30, time_slots=ROSTER)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Every datastore backend; tests using this run once per backend."""
    if request.param == "memory":
        return InMemoryDatastore()
    sql = SqlDatastore.from_url("sqlite://")
    sql.create_schema()
    return sql


@pytest.fixture
def memory_store():
    return InMemoryDatastore()


@pytest.fixture
def lavagem(store):
    return store.add_service(make_service("Lavagem Simples", "40.00", 30))


@pytest.fixture
def resolver(store, policy):
    return AvailabilityResolver(store, policy)


@pytest.fixture
def transaction(store, policy):
    return BookingTransaction(store, policy)


def make_service(
    name: str = "Lavagem Completa",
    price: str = "80.00",
    duration_minutes: int = 60,
    is_active: bool = True,
) -> Service:
    """Helper to create a Service with sensible defaults."""
    return Service(
        name=name,
        price=Decimal(price),
        duration_minutes=duration_minutes,
        is_active=is_active,
    )


def make_appointment(
    service: Service,
    day: date,
    start: time,
    status: AppointmentStatus = AppointmentStatus.CONFIRMED,
    user_id: str = "user-1",
    end: Optional[time] = None,
) -> Appointment:
    """Helper to create an Appointment without going through the booking transaction."""
    return Appointment(
        user_id=user_id,
        service_id=service.id,
        appointment_date=day,
        start_time=start,
        end_time=end or time(start.hour + 1, start.minute),
        status=status,
    )
