"""Tests for availability resolution over bookings and blackouts."""

from datetime import date, time
from unittest.mock import create_autospec

import pytest

from autobrilho.errors import StorageUnavailableError
from autobrilho.scheduling.availability import AvailabilityResolver
from autobrilho.scheduling.blackout import BlackoutRegistry
from autobrilho.schemas.appointment_schema import AppointmentStatus
from autobrilho.schemas.booking_schema import AvailabilityOutcome
from autobrilho.store.base import Datastore
from autobrilho.store.memory import InMemoryDatastore
from tests.conftest import ROSTER, make_appointment, make_service

DAY = date(2025, 6, 10)


class TestConcreteScenario:
    def test_lavagem_simples_on_june_tenth(self, store, resolver, lavagem):
        store.insert_appointment(make_appointment(lavagem, DAY, time(9)))
        BlackoutRegistry(store).block_range(DAY, time(14), time(15))

        slots = resolver.available_slots(lavagem, DAY)

        assert time(9) not in slots
        assert time(14) not in slots
        assert slots == [
            time(8), time(10), time(11), time(13), time(15), time(16), time(17),
        ]


class TestBookingsConstrainSlots:
    def test_empty_day_offers_full_roster(self, resolver, lavagem):
        assert resolver.available_slots(lavagem, DAY) == list(ROSTER)

    def test_pending_booking_takes_slot(self, store, resolver, lavagem):
        store.insert_appointment(
            make_appointment(lavagem, DAY, time(10), status=AppointmentStatus.PENDING)
        )
        assert time(10) not in resolver.available_slots(lavagem, DAY)

    @pytest.mark.parametrize("status", [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])
    def test_inactive_booking_frees_slot(self, store, resolver, lavagem, status):
        store.insert_appointment(make_appointment(lavagem, DAY, time(10), status=status))
        assert time(10) in resolver.available_slots(lavagem, DAY)

    def test_booking_of_other_service_takes_slot(self, store, resolver, lavagem):
        other = store.add_service(make_service("Polimento", "250.00", 60))
        store.insert_appointment(make_appointment(other, DAY, time(11)))
        assert time(11) not in resolver.available_slots(lavagem, DAY)

    def test_booking_on_other_date_is_ignored(self, store, resolver, lavagem):
        store.insert_appointment(make_appointment(lavagem, date(2025, 6, 11), time(8)))
        assert time(8) in resolver.available_slots(lavagem, DAY)

    def test_seconds_in_stored_start_are_ignored(self, memory_store, policy):
        service = memory_store.add_service(make_service())
        memory_store.insert_appointment(make_appointment(service, DAY, time(13, 0, 42)))
        resolver = AvailabilityResolver(memory_store, policy)
        assert time(13) not in resolver.available_slots(service, DAY)


class TestBlackouts:
    def test_full_day_block_empties_day(self, store, resolver, lavagem):
        BlackoutRegistry(store).block_day(DAY, reason="Feriado")
        result = resolver.resolve(lavagem, DAY)
        assert result.slots == []
        assert result.outcome == AvailabilityOutcome.FULL_DAY_BLOCKED

    def test_full_day_block_applies_to_every_service(self, store, resolver, lavagem):
        other = store.add_service(make_service("Polimento", "250.00", 60))
        store.insert_appointment(make_appointment(lavagem, DAY, time(9)))
        BlackoutRegistry(store).block_day(DAY)
        assert resolver.available_slots(lavagem, DAY) == []
        assert resolver.available_slots(other, DAY) == []

    def test_block_end_is_exclusive(self, store, resolver, lavagem):
        BlackoutRegistry(store).block_range(DAY, time(10), time(11))
        slots = resolver.available_slots(lavagem, DAY)
        assert time(10) not in slots
        assert time(11) in slots

    def test_block_covering_several_slots(self, store, resolver, lavagem):
        BlackoutRegistry(store).block_range(DAY, time(13), time(16, 30))
        slots = resolver.available_slots(lavagem, DAY)
        assert [t for t in ROSTER if t not in slots] == [time(13), time(14), time(15), time(16)]

    def test_block_between_slots_removes_nothing(self, store, resolver, lavagem):
        BlackoutRegistry(store).block_range(DAY, time(12), time(13))
        assert resolver.available_slots(lavagem, DAY) == list(ROSTER)

    def test_removed_block_restores_slots(self, store, resolver, lavagem):
        registry = BlackoutRegistry(store)
        block = registry.block_day(DAY)
        registry.remove_block(block.id)
        assert resolver.available_slots(lavagem, DAY) == list(ROSTER)


class TestResolutionOutcomes:
    def test_repeated_reads_are_identical(self, store, resolver, lavagem):
        store.insert_appointment(make_appointment(lavagem, DAY, time(15)))
        assert resolver.resolve(lavagem, DAY) == resolver.resolve(lavagem, DAY)

    def test_inactive_service_resolves_to_nothing(self, store, resolver):
        service = store.add_service(make_service(is_active=False))
        result = resolver.resolve(service, DAY)
        assert result.outcome == AvailabilityOutcome.SERVICE_UNAVAILABLE
        assert not result.available

    def test_out_of_window_date_skips_datastore(self, policy):
        store = create_autospec(Datastore, instance=True)
        resolver = AvailabilityResolver(store, policy)

        result = resolver.resolve(make_service(), date(2025, 7, 2))

        assert result.outcome == AvailabilityOutcome.DATE_NOT_BOOKABLE
        assert result.slots == []
        store.active_start_times.assert_not_called()
        store.blocks_for.assert_not_called()

    def test_past_date_is_empty(self, resolver, lavagem):
        assert resolver.available_slots(lavagem, date(2025, 5, 31)) == []


class _BrokenStore(InMemoryDatastore):
    def active_start_times(self, day):
        raise StorageUnavailableError("connection reset")


class TestStorageFailures:
    def test_resolve_reports_retryable_failure(self, policy):
        store = _BrokenStore()
        service = store.add_service(make_service())
        result = AvailabilityResolver(store, policy).resolve(service, DAY)
        assert result.outcome == AvailabilityOutcome.TRANSIENT_FAILURE
        assert result.retryable

    def test_available_slots_raises(self, policy):
        store = _BrokenStore()
        service = store.add_service(make_service())
        with pytest.raises(StorageUnavailableError):
            AvailabilityResolver(store, policy).available_slots(service, DAY)
