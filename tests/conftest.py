"""Shared pytest fixtures for flightwatch tests."""

import threading
import time
from typing import Dict, List, Optional

import pytest

from flightwatch.exceptions import FetchError
from flightwatch.models import FlightStatus
from flightwatch.output import CollectingOutput


def make_flight(
    passenger_name: str = 'Madrigal',
    departure_minutes: int = 2,
    status: str = 'On Time',
    loyalty_tier: str = 'Bronze',
    flight_number: str = 'BN1234',
) -> FlightStatus:
    return FlightStatus(
        flight_number=flight_number,
        passenger_name=passenger_name,
        passenger_loyalty_tier=loyalty_tier,
        origin_airport='BOS',
        destination_airport='ORD',
        status=status,
        departure_minutes=departure_minutes,
    )


class FakeFetcher:
    """Thread-safe in-memory fetcher that records every call."""

    def __init__(
        self,
        flights: Optional[Dict[str, FlightStatus]] = None,
        fail_for: Optional[Dict[str, Exception]] = None,
        latency: float = 0.0,
        barrier: Optional[threading.Barrier] = None,
    ):
        self.flights = flights or {}
        self.fail_for = fail_for or {}
        self.latency = latency
        self.barrier = barrier

        self.calls: List[str] = []
        self.threads = set()
        self._lock = threading.Lock()

    def fetch(self, passenger_name: str) -> FlightStatus:
        with self._lock:
            self.calls.append(passenger_name)
            self.threads.add(threading.current_thread().name)

        if self.barrier is not None:
            self.barrier.wait()
        if self.latency:
            time.sleep(self.latency)

        if passenger_name in self.fail_for:
            raise self.fail_for[passenger_name]
        if passenger_name in self.flights:
            return self.flights[passenger_name]
        return make_flight(passenger_name, departure_minutes=3)


@pytest.fixture
def flight() -> FlightStatus:
    """A flight two minutes from departure."""
    return make_flight('A', departure_minutes=2)


@pytest.fixture
def canceled_flight() -> FlightStatus:
    return make_flight('B', departure_minutes=5, status='Canceled')


@pytest.fixture
def output() -> CollectingOutput:
    return CollectingOutput()


@pytest.fixture
def flight_factory():
    """Factory for FlightStatus records with test defaults."""
    return make_flight


@pytest.fixture
def fetcher_factory():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def failing_fetcher() -> FakeFetcher:
    return FakeFetcher(fail_for={'Estragon': FetchError('lookup failed', 'Estragon')})
