"""
Tracking run coordinator.

Wires the pieces together for one run:
1. Fetch: every passenger's flight through the FetchWorkerPool
2. Count: a TrackingCounter starting at the number of flights, with one
   observer thread reporting how many flights are still tracked
3. Watch: each flight until departure or cancellation, one after another
   or one thread per flight, decrementing the counter as each completes

A failure in any watch stops the others, closes the counter so the
observer ends, and is re-raised once every thread has been joined.
Flights that already completed are not rolled back.
"""

import logging
import threading
from typing import Iterable, List, Optional

from flightwatch.config import config
from flightwatch.ingestion import FetchWorkerPool, create_fetcher
from flightwatch.models import FlightStatus
from flightwatch.output import ConsoleOutput, OutputSink
from flightwatch.tracking.counter import CounterObservation, TrackingCounter
from flightwatch.tracking.watcher import FlightWatcher

logger = logging.getLogger(__name__)


class FlightTracker:
    """
    Fetches and follows a set of passengers' flights.

    Blocking: run() returns once every flight has been tracked to the end
    (or the run was stopped). Use stop() from another thread to end early.
    """

    def __init__(
        self,
        fetcher=None,
        sink: Optional[OutputSink] = None,
        worker_count: Optional[int] = None,
        tick_interval: Optional[float] = None,
        concurrent_watches: Optional[bool] = None,
        queue_size: Optional[int] = None,
    ):
        """
        Initialize the tracker.

        Args:
            fetcher: Flight status fetcher (created from config if None)
            sink: Receives user-facing status lines (stdout if None)
            worker_count: Concurrent fetch workers
            tick_interval: Seconds between status updates of one flight
            concurrent_watches: Watch all flights at once instead of in turn
            queue_size: Bound for the fetch pool queues (0 = unbounded)
        """
        tracking = config.tracking
        self.fetcher = fetcher if fetcher is not None else create_fetcher()
        self.sink = sink if sink is not None else ConsoleOutput()
        self.worker_count = worker_count if worker_count is not None else tracking.worker_count
        self.tick_interval = tick_interval if tick_interval is not None else tracking.tick_interval
        self.concurrent_watches = (
            concurrent_watches if concurrent_watches is not None else tracking.concurrent_watches
        )
        self.queue_size = queue_size if queue_size is not None else tracking.queue_size

        self.pool = FetchWorkerPool(self.fetcher, self.worker_count, self.queue_size)
        self.counter: Optional[TrackingCounter] = None

        # State tracking
        self._stop_event = threading.Event()
        self._running = False
        self._fetched = 0
        self._completed = 0
        self._lock = threading.Lock()

    def stop(self) -> None:
        """
        Stop all watches; no further flights are counted as completed.

        Applies to the run in progress, or to the next run if none is
        active. The request is cleared when that run returns.
        """
        self._stop_event.set()
        logger.info('Tracking stop requested')

    def run(self, passenger_names: Optional[Iterable[str]] = None) -> List[FlightStatus]:
        """
        Fetch and track every passenger's flight.

        Returns the flights as initially fetched.

        Raises:
            FetchError if the fetch pool fails (nothing is tracked)
            FlightWatchError if a watch hits an invariant violation
            Any error raised by the sink while reporting progress
        """
        if passenger_names is None:
            passenger_names = config.tracking.passenger_names
        names = list(passenger_names)
        self._running = True
        observer_errors: List[BaseException] = []

        try:
            self.sink('Getting the latest flight info...')
            flights = self.pool.fetch_all(names)
            self._fetched = len(flights)

            descriptions = ', '.join(flight.describe() for flight in flights)
            self.sink(f'Found flights for {descriptions}')

            counter = TrackingCounter(len(flights))
            self.counter = counter
            observer = threading.Thread(
                target=self._report_progress,
                args=(counter, counter.observe(), observer_errors),
                name='tracking-observer',
                daemon=True,
            )
            observer.start()

            try:
                if self.concurrent_watches:
                    self._watch_concurrently(flights, counter)
                else:
                    self._watch_sequentially(flights, counter)
            finally:
                counter.close()
                observer.join()

            if observer_errors:
                raise observer_errors[0]
        finally:
            self._running = False
            self._stop_event.clear()

        logger.info(f'Tracking run finished: {self._completed}/{self._fetched} flights completed')
        return flights

    def _watcher(self) -> FlightWatcher:
        return FlightWatcher(self.sink, self.tick_interval, self._stop_event)

    def _watch_one(self, watcher: FlightWatcher, flight: FlightStatus, counter: TrackingCounter) -> None:
        if self._stop_event.is_set():
            return
        if watcher.watch(flight):
            counter.decrement()
            with self._lock:
                self._completed += 1

    def _watch_sequentially(self, flights: List[FlightStatus], counter: TrackingCounter) -> None:
        watcher = self._watcher()
        for flight in flights:
            if self._stop_event.is_set():
                break
            self._watch_one(watcher, flight, counter)

    def _watch_concurrently(self, flights: List[FlightStatus], counter: TrackingCounter) -> None:
        watcher = self._watcher()
        errors: List[BaseException] = []

        def watch(flight: FlightStatus) -> None:
            try:
                self._watch_one(watcher, flight, counter)
            except Exception as e:
                logger.error(f'Watch failed for {flight.passenger_name}: {e}')
                with self._lock:
                    errors.append(e)
                self._stop_event.set()

        threads = [
            threading.Thread(
                target=watch,
                args=(flight,),
                name=f'watch-{flight.passenger_name}',
                daemon=True,
            )
            for flight in flights
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if errors:
            raise errors[0]

    def _report_progress(
        self,
        counter: TrackingCounter,
        observation: CounterObservation,
        errors: List[BaseException],
    ) -> None:
        """
        Observer: announce each change in the number of tracked flights.

        A failure here stops the watches and is re-raised by run().
        """
        try:
            reached_zero = False
            for count in observation:
                if count <= 0:
                    reached_zero = True
                elif count == 1:
                    self.sink('There is 1 flight being tracked')
                else:
                    self.sink(f'There are {count} flights being tracked')

            if reached_zero:
                self.sink('Finished tracking all flights')
            else:
                logger.info(f'Stopped observing with {counter.value} flights still tracked')
        except Exception as e:
            logger.error(f'Progress observer failed: {e}')
            errors.append(e)
            self._stop_event.set()
        finally:
            observation.close()

    @property
    def stats(self) -> dict:
        """Get tracking statistics."""
        with self._lock:
            completed = self._completed
        return {
            'running': self._running,
            'fetched': self._fetched,
            'completed': completed,
            'tracking': self.counter.value if self.counter else 0,
            'pool': self.pool.stats,
        }
