"""
Line sinks for user-facing status messages.

Any callable taking one string works as a sink. Diagnostics go through
logging instead; sinks only carry the lines a passenger would read.
"""

import sys
import threading
from typing import Callable, List, Optional, TextIO

OutputSink = Callable[[str], None]


class ConsoleOutput:
    """
    Writes lines to a text stream (stdout by default).

    Watches may run on several threads, so each line is written and
    flushed under a lock.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        with self._lock:
            self.stream.write(f'{line}\n')
            self.stream.flush()


class CollectingOutput:
    """Keeps emitted lines in memory, in emission order."""

    def __init__(self):
        self._lines: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    @property
    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)
