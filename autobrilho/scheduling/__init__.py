from autobrilho.scheduling.availability import AvailabilityResolver
from autobrilho.scheduling.blackout import BlackoutRegistry
from autobrilho.scheduling.booking import BookingTransaction
from autobrilho.scheduling.calendar_policy import (
    BookingWindow,
    CalendarWindowPolicy,
    FixedClock,
    SystemClock,
    compute_end_time,
)
from autobrilho.scheduling.catalog import Catalog
from autobrilho.scheduling.clients import ClientAccount
from autobrilho.scheduling.lifecycle import AppointmentLifecycle
from autobrilho.scheduling.staff import StaffDesk

__all__ = [
    "AvailabilityResolver",
    "BlackoutRegistry",
    "BookingTransaction",
    "BookingWindow",
    "CalendarWindowPolicy",
    "FixedClock",
    "SystemClock",
    "compute_end_time",
    "Catalog",
    "ClientAccount",
    "AppointmentLifecycle",
    "StaffDesk",
]
