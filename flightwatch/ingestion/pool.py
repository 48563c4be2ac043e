"""
Fan-out/fan-in fetch pool.

Pipeline stages, each on its own thread:
1. Produce: enqueue every passenger name, then close the pending queue
2. Fetch: worker_count workers drain pending names through the fetcher
   and push each FlightStatus onto the result queue
3. Supervise: join all workers, then close the result queue
4. Collect: the calling thread drains the result queue until it closes

Completion is signalled only by the result queue closing, never by
counting results, so the collector works for any input size.

Both queues are unbounded unless queue_size is set. With a bound, the
producer and workers block on a full queue instead of growing memory.

A failure anywhere (fetcher or producer) is fatal to the whole run: both
queues are cancelled so the producer and remaining workers stop after
their current item, all threads are joined, and fetch_all() raises
FetchError. Partial results are discarded.
"""

import logging
import threading
from typing import Iterable, List, Optional

from flightwatch.exceptions import FetchError, QueueClosedError
from flightwatch.models import FlightStatus
from flightwatch.queues import ClosableQueue

logger = logging.getLogger(__name__)


class FetchWorkerPool:
    """
    Fetches flight statuses for many passengers with a fixed worker count.

    Output order is unspecified, but every input name yields exactly one
    FlightStatus.
    """

    def __init__(
        self,
        fetcher,
        worker_count: int = 2,
        queue_size: int = 0,
    ):
        """
        Initialize the pool.

        Args:
            fetcher: Object with fetch(passenger_name) -> FlightStatus,
                     safe to call from several threads at once
            worker_count: Number of concurrent fetch workers (>= 1)
            queue_size: Bound for the pending and result queues (0 = unbounded)
        """
        if worker_count < 1:
            raise ValueError(f'worker_count must be at least 1, got {worker_count}')

        self.fetcher = fetcher
        self.worker_count = worker_count
        self.queue_size = queue_size

        self._lock = threading.Lock()
        self._failure: Optional[BaseException] = None
        self._submitted = 0
        self._fetched = 0
        self._failures = 0

    def _fail(self, error: BaseException, *queues: ClosableQueue) -> None:
        """Record the first failure and abandon all remaining work."""
        with self._lock:
            self._failures += 1
            if self._failure is None:
                self._failure = error
        for queue in queues:
            queue.cancel()

    def _produce(
        self,
        names: Iterable[str],
        pending: ClosableQueue,
        results: ClosableQueue,
    ) -> None:
        try:
            for name in names:
                pending.put(name)
                with self._lock:
                    self._submitted += 1
        except QueueClosedError:
            # Cancelled by a failing worker
            logger.debug('Producer stopped, pending queue cancelled')
            return
        except Exception as e:
            logger.error(f'Producer failed: {e}')
            self._fail(e, pending, results)
            return
        except BaseException as e:
            logger.error(f'Producer interrupted: {e!r}')
            self._fail(e, pending, results)
            return
        pending.close()

    def _work(
        self,
        worker_id: int,
        pending: ClosableQueue,
        results: ClosableQueue,
    ) -> None:
        for name in pending:
            try:
                flight = self.fetcher.fetch(name)
            except FetchError as e:
                logger.error(f'Worker {worker_id} failed to fetch {name}: {e}')
                self._fail(e, pending, results)
                return
            except Exception as e:
                logger.exception(f'Worker {worker_id} crashed fetching {name}')
                error = FetchError(f'Failed to fetch {name}: {e}', name)
                error.__cause__ = e
                self._fail(error, pending, results)
                return
            except BaseException as e:
                # Re-raised by fetch_all once every thread has been joined
                logger.error(f'Worker {worker_id} interrupted fetching {name}: {e!r}')
                self._fail(e, pending, results)
                return

            logger.info(f'Fetched flight: {flight}')
            try:
                results.put(flight)
            except QueueClosedError:
                logger.debug(f'Worker {worker_id} stopped, result queue cancelled')
                return
            with self._lock:
                self._fetched += 1

    def _supervise(self, workers: List[threading.Thread], results: ClosableQueue) -> None:
        for worker in workers:
            worker.join()
        results.close()

    def fetch_all(self, names: Iterable[str]) -> List[FlightStatus]:
        """
        Fetch one FlightStatus per passenger name.

        Blocks until every name has been fetched and every worker has
        finished.

        Raises:
            FetchError if any fetch (or the name source) fails
            BaseException subclasses (e.g. KeyboardInterrupt) raised by a
            fetch are re-raised unchanged after all threads are joined
        """
        with self._lock:
            self._failure = None

        pending: ClosableQueue[str] = ClosableQueue(self.queue_size, name='pending-names')
        results: ClosableQueue[FlightStatus] = ClosableQueue(self.queue_size, name='fetched-flights')

        producer = threading.Thread(
            target=self._produce,
            args=(names, pending, results),
            name='fetch-producer',
            daemon=True,
        )
        workers = [
            threading.Thread(
                target=self._work,
                args=(worker_id, pending, results),
                name=f'fetch-worker-{worker_id}',
                daemon=True,
            )
            for worker_id in range(1, self.worker_count + 1)
        ]
        supervisor = threading.Thread(
            target=self._supervise,
            args=(workers, results),
            name='fetch-supervisor',
            daemon=True,
        )

        logger.debug(f'Starting fetch pool with {self.worker_count} workers')
        producer.start()
        for worker in workers:
            worker.start()
        supervisor.start()

        flights = list(results)

        producer.join()
        supervisor.join()

        with self._lock:
            failure = self._failure

        if failure is not None:
            if isinstance(failure, FetchError) or not isinstance(failure, Exception):
                raise failure
            raise FetchError(f'Fetch pool failed: {failure}') from failure

        logger.info(f'Fetched {len(flights)} flights with {self.worker_count} workers')
        return flights

    @property
    def stats(self) -> dict:
        """Get pool statistics."""
        with self._lock:
            return {
                'workers': self.worker_count,
                'submitted': self._submitted,
                'fetched': self._fetched,
                'failures': self._failures,
            }
