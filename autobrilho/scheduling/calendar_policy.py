"""
Booking horizon and daily slot roster.

"Today" comes from an injected clock so the legal window can be pinned
in tests. The roster is a fixed list of start times with a lunch gap and
is not adjusted for service duration.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Protocol

from autobrilho.config import settings
from autobrilho.schemas.service_schema import Service

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class Clock(Protocol):
    """Source of the server's notion of today."""

    def today(self) -> date: ...


class SystemClock:
    """Wall-clock today in the server's local timezone."""

    def today(self) -> date:
        return datetime.now().date()


class FixedClock:
    """Clock pinned to one date; ``advance`` moves it forward."""

    def __init__(self, current: date) -> None:
        self._current = current

    def today(self) -> date:
        return self._current

    def advance(self, days: int = 1) -> None:
        self._current += timedelta(days=days)


@dataclass(frozen=True)
class BookingWindow:
    """Inclusive range of bookable dates."""

    earliest: date
    latest: date

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.earliest <= day <= self.latest


def compute_end_time(start: time, duration_minutes: int) -> time:
    """Add ``duration_minutes`` to ``start`` with hour wrapping.

    Raises ValueError when the result would reach or pass midnight,
    since appointments never roll over into the next day.

    Examples:
        >>> compute_end_time(time(9, 45), 30)
        datetime.time(10, 15)
    """
    if duration_minutes <= 0:
        raise ValueError(f"Duration must be positive, got {duration_minutes}")
    end_minutes = start.hour * 60 + start.minute + duration_minutes
    if end_minutes >= MINUTES_PER_DAY:
        raise ValueError(
            f"A {duration_minutes}-minute service starting at {start:%H:%M} "
            "would end after midnight"
        )
    return time(end_minutes // 60, end_minutes % 60)


class CalendarWindowPolicy:
    """Computes the legal booking window and the slots a service may start in."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        window_days: Optional[int] = None,
        time_slots: Optional[tuple[time, ...]] = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._window_days = (
            settings.booking.window_days if window_days is None else window_days
        )
        self._time_slots = tuple(
            settings.booking.time_slots if time_slots is None else time_slots
        )

    @property
    def clock(self) -> Clock:
        return self._clock

    def legal_window(self) -> BookingWindow:
        today = self._clock.today()
        return BookingWindow(earliest=today, latest=today + timedelta(days=self._window_days))

    def is_bookable(self, day: date) -> bool:
        return day in self.legal_window()

    def day_slots(self, service: Service) -> tuple[time, ...]:
        """Return the fixed start-time roster; identical for every service."""
        return self._time_slots

    def fits_in_day(self, start: time, service: Service) -> bool:
        """True if the service started at ``start`` ends before midnight."""
        try:
            compute_end_time(start, service.duration_minutes)
        except ValueError:
            return False
        return True
