"""
Flight tracking module for FlightWatch.

Follows fetched flights minute by minute and keeps count of how many
are still being tracked.
"""

from flightwatch.tracking.coordinator import FlightTracker
from flightwatch.tracking.counter import CounterObservation, TrackingCounter
from flightwatch.tracking.watcher import FlightStatusStream, FlightWatcher, format_status_line, status_message

__all__ = [
    'CounterObservation',
    'FlightStatusStream',
    'FlightTracker',
    'FlightWatcher',
    'TrackingCounter',
    'format_status_line',
    'status_message',
]
