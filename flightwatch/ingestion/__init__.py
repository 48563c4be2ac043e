"""
Data ingestion module for FlightWatch.

Handles fetching passengers' flight statuses from the status source
through a bounded pool of worker threads.
"""

from flightwatch.ingestion.flight_client import DemoFlightClient, FlightStatusClient, create_fetcher
from flightwatch.ingestion.pool import FetchWorkerPool

__all__ = ['DemoFlightClient', 'FetchWorkerPool', 'FlightStatusClient', 'create_fetcher']
