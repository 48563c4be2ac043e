"""
Shared count of flights still being tracked.

Every watch that completes decrements the counter once. Observers receive
each value change through their own ClosableQueue, so no change is missed
and nothing polls. An observation ends right after it yields a value at or
below zero, or when the counter is closed.
"""

import logging
import threading
from typing import List

from flightwatch.exceptions import CounterUnderflowError, QueueClosedError
from flightwatch.queues import ClosableQueue

logger = logging.getLogger(__name__)


class TrackingCounter:
    """
    Thread-safe, observable countdown of tracked flights.

    Created once per run with the number of flights, shared by every
    watch thread (through decrement) and one observer (through observe).
    """

    def __init__(self, initial: int):
        if initial < 0:
            raise ValueError(f'initial count must not be negative, got {initial}')

        self.initial = initial

        self._value = initial
        self._lock = threading.Lock()
        self._subscribers: List[ClosableQueue[int]] = []
        self._closed = False

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    @property
    def decrements(self) -> int:
        with self._lock:
            return self.initial - self._value

    def decrement(self) -> int:
        """
        Atomically reduce the count by one and notify observers.

        Returns the new value.

        Raises:
            CounterUnderflowError if every registered flight was already counted
        """
        with self._lock:
            if self._value <= 0:
                logger.error(f'Counter decremented past zero (initial={self.initial})')
                raise CounterUnderflowError(
                    f'Counter already at {self._value}; '
                    f'{self.initial} flights were registered'
                )
            self._value -= 1
            value = self._value
            for subscriber in self._subscribers:
                subscriber.put(value)

        logger.debug(f'Tracking counter decremented to {value}')
        return value

    def _subscribe(self) -> ClosableQueue[int]:
        """Register a subscriber seeded with the current value."""
        subscriber: ClosableQueue[int] = ClosableQueue(name='counter-subscriber')
        with self._lock:
            if self._closed:
                subscriber.close()
            else:
                subscriber.put(self._value)
                self._subscribers.append(subscriber)
        return subscriber

    def _unsubscribe(self, subscriber: ClosableQueue[int]) -> None:
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)
        subscriber.close()

    def observe(self) -> 'CounterObservation':
        """
        Yield the current value, then every later value, in order.

        Ends right after a value <= 0 is yielded, or when the counter is
        closed. The subscription is taken when observe() is called, so no
        change made after that point is missed, even if iteration starts
        later on another thread. It stays registered until the observation
        ends, its close() is called, or the counter is closed.
        """
        return CounterObservation(self, self._subscribe())

    def close(self) -> None:
        """End every current and future observation."""
        with self._lock:
            self._closed = True
            subscribers, self._subscribers = self._subscribers, []
        for subscriber in subscribers:
            subscriber.close()

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed


class CounterObservation:
    """
    One subscriber's view of a TrackingCounter's values.

    Single use. close() unsubscribes whether or not iteration started.
    """

    def __init__(self, counter: TrackingCounter, subscriber: ClosableQueue[int]):
        self._counter = counter
        self._subscriber = subscriber
        self._finished = False

    def __iter__(self) -> 'CounterObservation':
        return self

    def __next__(self) -> int:
        if self._finished:
            raise StopIteration
        try:
            value = self._subscriber.get()
        except QueueClosedError:
            self.close()
            raise StopIteration from None
        if value <= 0:
            self.close()
        return value

    def close(self) -> None:
        if not self._finished:
            self._finished = True
            self._counter._unsubscribe(self._subscriber)

    @property
    def finished(self) -> bool:
        return self._finished
