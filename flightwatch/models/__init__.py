"""
Data models for FlightWatch.

Records are plain frozen dataclasses; nothing here is persisted.
"""

from flightwatch.models.flight_status import BoardingState, FlightStatus

__all__ = [
    'BoardingState',
    'FlightStatus',
]
