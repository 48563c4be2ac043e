"""
Per-flight watch loop.

A FlightStatusStream walks one flight towards departure, one minute per
tick. Its state is the current record plus a started/finished flag:

1. Check: stop once departure_minutes < 0 or the flight is canceled
2. Emit the current record
3. Wait one tick interval, then advance the record by one minute

The first record is emitted without waiting. The stop check runs before
every emission, so the last record emitted for a flight that is not
canceled is the one at 0 minutes, and a canceled flight emits nothing.

FlightWatcher turns each emitted record into a status line for the
output sink and announces completion once the stream ends normally.
"""

import logging
import threading
from typing import Iterator, Optional

from flightwatch.exceptions import InvalidPhaseError
from flightwatch.models import BoardingState, FlightStatus
from flightwatch.output import OutputSink

logger = logging.getLogger(__name__)


def status_message(state: BoardingState) -> str:
    """Map a boarding state to its passenger-facing message."""
    if state is BoardingState.FLIGHT_CANCELED:
        return 'Your flight was canceled'
    elif state is BoardingState.BOARDING_NOT_STARTED:
        return 'Boarding will start soon'
    elif state is BoardingState.WAITING_TO_BOARD:
        return 'Other passengers are boarding'
    elif state is BoardingState.BOARDING:
        return 'You can now board the plane'
    elif state is BoardingState.BOARDING_ENDED:
        return 'The boarding doors have closed'
    else:
        raise InvalidPhaseError(state)


def format_status_line(flight: FlightStatus) -> str:
    """E.g. 'Madrigal: Boarding will start soon (Flight departs in 72 minutes)'."""
    message = status_message(flight.boarding_state)
    return (
        f'{flight.passenger_name}: {message} '
        f'(Flight departs in {flight.departure_minutes} minutes)'
    )


def should_stop(flight: FlightStatus) -> bool:
    return flight.departure_minutes < 0 or flight.is_canceled


class FlightStatusStream:
    """
    Lazy, minute-by-minute sequence of one flight's statuses.

    Single use: once exhausted it stays exhausted. If stop_event is set
    while waiting for the next tick, the stream ends early and `stopped`
    becomes True.
    """

    def __init__(
        self,
        initial: FlightStatus,
        interval: float = 1.0,
        stop_event: Optional[threading.Event] = None,
    ):
        self.current = initial
        self.interval = interval
        self.stop_event = stop_event if stop_event is not None else threading.Event()

        self.stopped = False
        self._started = False
        self._finished = False

    def __iter__(self) -> Iterator[FlightStatus]:
        return self

    def __next__(self) -> FlightStatus:
        if self._finished:
            raise StopIteration

        if self._started:
            if self.stop_event.wait(self.interval):
                self.stopped = True
                self._finished = True
                raise StopIteration
            self.current = self.current.advance()
        self._started = True

        if should_stop(self.current):
            self._finished = True
            raise StopIteration

        return self.current

    @property
    def finished(self) -> bool:
        return self._finished


class FlightWatcher:
    """
    Follows flights and reports their status to an output sink.

    One watcher may watch several flights, sequentially or from several
    threads; it holds no per-flight state.
    """

    def __init__(
        self,
        sink: OutputSink,
        interval: float = 1.0,
        stop_event: Optional[threading.Event] = None,
    ):
        if interval <= 0:
            raise ValueError(f'interval must be positive, got {interval}')

        self.sink = sink
        self.interval = interval
        self.stop_event = stop_event if stop_event is not None else threading.Event()

    def stream(self, initial: FlightStatus) -> FlightStatusStream:
        return FlightStatusStream(initial, self.interval, self.stop_event)

    def watch(self, initial: FlightStatus) -> bool:
        """
        Report a flight's status every tick until departure or cancellation.

        Returns True if the flight was followed to the end, False if the
        watch was stopped early.

        Raises:
            InvalidPhaseError if a record's boarding state is unrecognized
        """
        passenger_name = initial.passenger_name
        logger.debug(f'Watching {initial}')

        stream = self.stream(initial)
        emitted = 0
        for flight in stream:
            self.sink(format_status_line(flight))
            emitted += 1

        if stream.stopped:
            logger.info(f'Stopped tracking {passenger_name} after {emitted} updates')
            return False

        self.sink(f"Finished tracking {passenger_name}'s flight")
        logger.debug(f'Finished tracking {passenger_name} after {emitted} updates')
        return True
