"""Tests for staff operations, the catalog and client accounts."""

from datetime import date, time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from autobrilho.errors import AppointmentNotFoundError, InvalidTransitionError
from autobrilho.scheduling.availability import AvailabilityResolver
from autobrilho.scheduling.catalog import DEFAULT_SERVICES, Catalog
from autobrilho.scheduling.clients import ClientAccount
from autobrilho.scheduling.staff import StaffDesk
from autobrilho.schemas.appointment_schema import AppointmentStatus
from autobrilho.schemas.service_schema import ServiceUpdate
from tests.conftest import TODAY, make_appointment, make_service

DAY = date(2025, 6, 10)


@pytest.fixture
def staff(store):
    return StaffDesk(store)


class TestStatusTransitions:
    def test_confirm_then_complete(self, store, staff, lavagem, transaction):
        booked = transaction.book("user-1", lavagem.id, DAY, time(9)).appointment
        assert staff.confirm(booked.id).status == AppointmentStatus.CONFIRMED
        assert staff.complete(booked.id).status == AppointmentStatus.COMPLETED
        assert store.active_start_times(DAY) == set()

    def test_cannot_complete_pending(self, staff, lavagem, transaction):
        booked = transaction.book("user-1", lavagem.id, DAY, time(9)).appointment
        with pytest.raises(InvalidTransitionError):
            staff.complete(booked.id)

    def test_cancelled_cannot_be_revived(self, staff, lavagem, transaction):
        booked = transaction.book("user-1", lavagem.id, DAY, time(9)).appointment
        staff.cancel(booked.id)
        with pytest.raises(InvalidTransitionError):
            staff.confirm(booked.id)

    def test_staff_cancel_frees_slot(self, store, policy, staff, lavagem, transaction):
        booked = transaction.book("user-1", lavagem.id, DAY, time(9)).appointment
        staff.confirm(booked.id)
        staff.cancel(booked.id)
        assert time(9) in AvailabilityResolver(store, policy).available_slots(lavagem, DAY)

    def test_unknown_appointment(self, staff):
        with pytest.raises(AppointmentNotFoundError):
            staff.confirm("missing")


class TestAdminListing:
    def test_appointments_joined_with_service_and_profile(self, store, staff, lavagem):
        ClientAccount(store, "user-1").save_profile("Ana Souza", "ana@example.com")
        store.insert_appointment(make_appointment(lavagem, DAY, time(9), user_id="user-1"))
        store.insert_appointment(make_appointment(lavagem, DAY, time(10), user_id="user-9"))

        rows = staff.appointments()

        by_user = {r.appointment.user_id: r for r in rows}
        assert by_user["user-1"].service.name == "Lavagem Simples"
        assert by_user["user-1"].profile.full_name == "Ana Souza"
        assert by_user["user-9"].profile is None

    def test_clients(self, store, staff):
        ClientAccount(store, "user-1").save_profile("Ana Souza", "ana@example.com")
        assert [p.user_id for p in staff.clients()] == ["user-1"]


class TestCatalog:
    def test_seed_is_idempotent(self, store):
        catalog = Catalog(store)
        assert len(catalog.seed_defaults()) == len(DEFAULT_SERVICES)
        assert catalog.seed_defaults() == []

    def test_seeded_lavagem_simples_is_thirty_minutes(self, store):
        catalog = Catalog(store)
        catalog.seed_defaults()
        assert catalog.find_by_name("lavagem simples").duration_minutes == 30

    def test_deactivated_service_hidden_from_customers(self, store, staff):
        service = staff.catalog.create("Cera Express", Decimal("30.00"), 30)
        staff.catalog.deactivate(service.id)
        assert service.id not in {s.id for s in staff.catalog.offerable()}
        assert service.id in {s.id for s in staff.catalog.all_services()}

    def test_update_service(self, staff):
        service = staff.catalog.create("Cera Express", Decimal("30.00"), 30)
        updated = staff.catalog.update(service.id, ServiceUpdate(duration_minutes=45))
        assert updated.duration_minutes == 45

    def test_invalid_price_rejected(self, staff):
        with pytest.raises(ValidationError):
            staff.catalog.create("Grátis?", Decimal("-1.00"), 30)


class TestBlackoutManagement:
    def test_upcoming_blocks(self, staff):
        staff.blackouts.block_day(date(2025, 5, 20))
        staff.blackouts.block_range(DAY, time(14), time(15), reason="Manutenção")
        upcoming = staff.blackouts.upcoming(TODAY)
        assert [b.blocked_date for b in upcoming] == [DAY]
        assert upcoming[0].reason == "Manutenção"

    def test_inverted_range_rejected(self, staff):
        with pytest.raises(ValidationError):
            staff.blackouts.block_range(DAY, time(15), time(14))


class TestClientAccount:
    def test_save_and_read_profile(self, store):
        account = ClientAccount(store, "user-1")
        account.save_profile(
            "Ana Souza", "Ana@Example.com", phone="+55 11 98765-4321",
            vehicle_model="Onix", vehicle_color="Prata", vehicle_plate="abc1d23",
        )
        profile = account.profile()
        assert profile.email == "ana@example.com"
        assert profile.phone == "+5511987654321"

    def test_short_phone_rejected(self, store):
        with pytest.raises(ValidationError):
            ClientAccount(store, "user-1").save_profile("Ana Souza", "ana@example.com", phone="1234")

    def test_history_split(self, store):
        service = store.add_service(make_service())
        upcoming = store.insert_appointment(
            make_appointment(service, date(2025, 6, 5), time(9), status=AppointmentStatus.PENDING)
        )
        old = store.insert_appointment(make_appointment(service, date(2025, 5, 20), time(9)))
        done = store.insert_appointment(
            make_appointment(service, date(2025, 6, 1), time(8), status=AppointmentStatus.COMPLETED)
        )
        store.insert_appointment(
            make_appointment(service, date(2025, 6, 8), time(9), status=AppointmentStatus.CANCELLED)
        )
        store.insert_appointment(make_appointment(service, DAY, time(9), user_id="someone-else"))

        history = ClientAccount(store, "user-1").history(TODAY)

        assert [d.appointment.id for d in history.upcoming] == [upcoming.id]
        assert {d.appointment.id for d in history.past} == {old.id, done.id}
        assert history.upcoming[0].service.id == service.id
