"""Tests for the booking window, slot roster and end-time arithmetic."""

from datetime import date, time

import pytest

from autobrilho.scheduling.calendar_policy import (
    CalendarWindowPolicy,
    FixedClock,
    SystemClock,
    compute_end_time,
)
from tests.conftest import ROSTER, TODAY, make_service


class TestLegalWindow:
    def test_window_spans_today_to_thirty_days(self, policy):
        window = policy.legal_window()
        assert window.earliest == TODAY
        assert window.latest == date(2025, 7, 1)

    def test_today_is_bookable(self, policy):
        assert policy.is_bookable(TODAY)

    def test_last_day_is_bookable(self, policy):
        assert policy.is_bookable(date(2025, 7, 1))

    def test_yesterday_is_not_bookable(self, policy):
        assert not policy.is_bookable(date(2025, 5, 31))

    def test_day_after_window_is_not_bookable(self, policy):
        assert not policy.is_bookable(date(2025, 7, 2))

    def test_window_follows_clock(self, clock, policy):
        clock.advance(days=2)
        assert policy.legal_window().earliest == date(2025, 6, 3)
        assert not policy.is_bookable(TODAY)

    def test_zero_day_window_allows_only_today(self, clock):
        policy = CalendarWindowPolicy(clock=clock, window_days=0, time_slots=ROSTER)
        assert policy.is_bookable(TODAY)
        assert not policy.is_bookable(date(2025, 6, 2))

    def test_system_clock_returns_a_date(self):
        assert isinstance(SystemClock().today(), date)


class TestDaySlots:
    def test_roster_is_fixed_and_ordered(self, policy):
        slots = policy.day_slots(make_service())
        assert slots == ROSTER
        assert time(12) not in slots

    def test_roster_ignores_service_duration(self, policy):
        short = make_service("Lavagem Simples", "40.00", 30)
        long = make_service("Vitrificação", "900.00", 240)
        assert policy.day_slots(short) == policy.day_slots(long)

    def test_default_roster_comes_from_settings(self):
        policy = CalendarWindowPolicy(clock=FixedClock(TODAY))
        assert policy.day_slots(make_service())[0] == time(8)
        assert len(policy.day_slots(make_service())) == 9


class TestComputeEndTime:
    def test_adds_minutes_within_hour(self):
        assert compute_end_time(time(9), 30) == time(9, 30)

    def test_wraps_into_next_hour(self):
        assert compute_end_time(time(9, 45), 30) == time(10, 15)

    def test_multi_hour_duration(self):
        assert compute_end_time(time(13), 150) == time(15, 30)

    def test_ending_just_before_midnight(self):
        assert compute_end_time(time(23), 59) == time(23, 59)

    def test_reaching_midnight_is_rejected(self):
        with pytest.raises(ValueError, match="midnight"):
            compute_end_time(time(23), 60)

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValueError):
            compute_end_time(time(9), 0)

    def test_fits_in_day(self, policy):
        assert policy.fits_in_day(time(17), make_service(duration_minutes=60))
        assert not policy.fits_in_day(time(17), make_service(duration_minutes=7 * 60))
