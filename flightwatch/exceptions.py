"""
Exceptions raised by the fetch pipeline and the tracking loop.

None of these are retried: a fetch failure aborts the whole pool run, and
the remaining ones are coordination bugs that end the offending thread.
"""

from typing import Any, Optional


class FlightWatchError(Exception):
    """Base class for all FlightWatch errors."""


class FetchError(FlightWatchError):
    """
    Raised when a flight status could not be produced for a passenger.

    The pool has no per-item isolation, so one FetchError fails the run.
    """

    def __init__(self, message: str, passenger_name: Optional[str] = None):
        super().__init__(message)
        self.passenger_name = passenger_name


class FlightParseError(FetchError):
    """Raised when a status payload from the remote source is malformed."""


class InvalidPhaseError(FlightWatchError):
    """Raised when a record carries a boarding state outside the known five."""

    def __init__(self, state: Any):
        super().__init__(f'Unrecognized boarding state: {state!r}')
        self.state = state


class CounterUnderflowError(FlightWatchError):
    """Raised when the tracking counter is decremented past zero."""


class QueueClosedError(FlightWatchError):
    """Raised on put to a closed queue, or get from a closed, drained one."""
