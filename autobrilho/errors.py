"""Domain exceptions raised by the scheduling engine and its datastores.

User-correctable rejections are not exceptions: the booking transaction
reports them through ``BookingResult``. Exceptions here cover storage
conflicts, transient infrastructure failures and programmer errors.
"""


class SchedulingError(Exception):
    """Base class for all scheduling engine errors."""


class SlotConflictError(SchedulingError):
    """An active appointment already occupies the (date, start time) slot.

    Raised by a datastore at commit time when the storage-level guard
    rejects the insert.
    """


class StorageUnavailableError(SchedulingError):
    """The datastore could not be reached or failed mid-operation.

    Safe to retry: a failed write leaves no partial state behind.
    """


class ServiceNotFoundError(SchedulingError, LookupError):
    """A service id does not exist in the catalog."""


class AppointmentNotFoundError(SchedulingError, LookupError):
    """An appointment id does not exist."""


class BlockNotFoundError(SchedulingError, LookupError):
    """A blocked slot id does not exist."""


class InvalidTransitionError(SchedulingError):
    """Raised when a status transition is not valid from the current status."""
