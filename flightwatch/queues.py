"""
Closable FIFO queue for handing work between pipeline threads.

The standard library queue has no notion of "no more items are coming",
so consumers would need a sentinel per consumer and a known count. This
queue can be closed instead:

- close(): producers may no longer put, consumers drain what is left
  and then see QueueClosedError (iteration simply ends)
- cancel(): close and discard whatever is still queued, used when the
  pipeline fails and remaining work must be abandoned

All operations are guarded by one Condition, so the queue is safe for any
number of producer and consumer threads.
"""

import logging
import threading
from collections import deque
from typing import Deque, Generic, Iterator, TypeVar

from flightwatch.exceptions import QueueClosedError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ClosableQueue(Generic[T]):
    """
    Thread-safe FIFO that can be marked closed.

    Unbounded by default (every put succeeds immediately). Pass maxsize > 0
    to make put() block while the queue is full.
    """

    def __init__(self, maxsize: int = 0, name: str = 'queue'):
        self.maxsize = maxsize
        self.name = name

        self._items: Deque[T] = deque()
        self._cond = threading.Condition()
        self._closed = False
        self._cancelled = False

    def put(self, item: T) -> None:
        """
        Enqueue an item.

        Raises QueueClosedError if the queue is closed, including when it
        is closed while waiting for space.
        """
        with self._cond:
            while (
                not self._closed
                and self.maxsize > 0
                and len(self._items) >= self.maxsize
            ):
                self._cond.wait()
            if self._closed:
                raise QueueClosedError(f'{self.name} is closed')
            self._items.append(item)
            self._cond.notify_all()

    def get(self) -> T:
        """
        Dequeue the oldest item, blocking until one is available.

        Raises QueueClosedError once the queue is closed and drained.
        """
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if not self._items:
                raise QueueClosedError(f'{self.name} is closed')
            item = self._items.popleft()
            # Wake producers blocked on a full queue
            self._cond.notify_all()
            return item

    def close(self) -> None:
        """Stop accepting items. Already queued items stay consumable."""
        with self._cond:
            if not self._closed:
                self._closed = True
                logger.debug(f'{self.name} closed with {len(self._items)} pending')
            self._cond.notify_all()

    def cancel(self) -> None:
        """Close the queue and drop everything still pending."""
        with self._cond:
            dropped = len(self._items)
            self._items.clear()
            self._closed = True
            self._cancelled = True
            self._cond.notify_all()
        if dropped:
            logger.debug(f'{self.name} cancelled, dropped {dropped} items')

    def __iter__(self) -> Iterator[T]:
        """Yield items until the queue is closed and drained."""
        while True:
            try:
                yield self.get()
            except QueueClosedError:
                return

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    @property
    def cancelled(self) -> bool:
        with self._cond:
            return self._cancelled
