"""
Flight status source clients.

A fetcher turns a passenger name into one FlightStatus. The pool calls
fetch() from several worker threads at once, so clients keep no mutable
state between calls:

- FlightStatusClient: queries the remote flight and loyalty endpoints
  (plain-text CSV payloads) in parallel and combines them
- DemoFlightClient: generates a deterministic status per passenger,
  for running without network access

Neither client retries. Any failure surfaces as FetchError.
"""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import requests

from flightwatch.config import config
from flightwatch.exceptions import FetchError
from flightwatch.models import FlightStatus

logger = logging.getLogger(__name__)


class FlightStatusClient:
    """
    Client for the remote flight status service.

    Handles:
    - GET requests to the /flight and /loyalty endpoints
    - Combining both payloads into a FlightStatus
    - Mapping transport and parse errors to FetchError
    """

    def __init__(
        self,
        base_url: str = 'http://kotlin-book.bignerdranch.com/2e',
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> 'FlightStatusClient':
        """Create client from application configuration."""
        return cls(
            base_url=config.fetch.base_url,
            timeout=config.fetch.timeout_seconds,
        )

    @property
    def flight_endpoint(self) -> str:
        return f'{self.base_url}/flight'

    @property
    def loyalty_endpoint(self) -> str:
        return f'{self.base_url}/loyalty'

    def _get_text(self, url: str, passenger_name: str) -> str:
        """
        GET a plain-text payload.

        A session per request keeps concurrent fetches independent.
        """
        logger.debug(f'Fetching {url} for {passenger_name}')

        try:
            with requests.Session() as session:
                response = session.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.text

        except requests.exceptions.Timeout as e:
            logger.error(f'Flight API timeout: {url}')
            raise FetchError(f'Timed out fetching {url} for {passenger_name}', passenger_name) from e
        except requests.exceptions.HTTPError as e:
            logger.error(f'Flight API error: {e.response.status_code}')
            raise FetchError(
                f'HTTP {e.response.status_code} from {url} for {passenger_name}',
                passenger_name,
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(f'Flight API request failed: {e}')
            raise FetchError(f'Request to {url} failed for {passenger_name}: {e}', passenger_name) from e

    def fetch(self, passenger_name: str) -> FlightStatus:
        """
        Fetch the current flight status for a passenger.

        The flight and loyalty lookups run concurrently; the first failure
        of either is raised.

        Raises:
            FetchError on network/API errors or malformed payloads
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix='flight-fetch') as executor:
            flight_future = executor.submit(self._get_text, self.flight_endpoint, passenger_name)
            loyalty_future = executor.submit(self._get_text, self.loyalty_endpoint, passenger_name)
            flight_response = flight_future.result()
            loyalty_response = loyalty_future.result()

        logger.debug(f'Combining flight data for {passenger_name}')
        return FlightStatus.parse(
            passenger_name=passenger_name,
            flight_response=flight_response,
            loyalty_response=loyalty_response,
        )


class DemoFlightClient:
    """
    Offline fetcher producing realistic mock statuses.

    The passenger name seeds the generator, so the same name always gets
    the same flight.
    """

    AIRPORTS = ('JFK', 'LAX', 'ORD', 'DFW', 'DEN', 'ATL', 'SFO', 'SEA', 'BOS', 'MIA')
    AIRLINES = ('BN', 'AA', 'DL', 'UA', 'AS')
    STATUSES = ('On Time', 'On Time', 'On Time', 'Delayed', 'Canceled')
    TIERS = ('Bronze', 'Silver', 'Gold', 'Platinum')

    def __init__(self, latency: float = 0.0):
        self.latency = latency

    def fetch(self, passenger_name: str) -> FlightStatus:
        if not passenger_name:
            raise FetchError('Passenger name must not be empty')

        if self.latency:
            time.sleep(self.latency)

        rng = random.Random(passenger_name)
        origin = rng.choice(self.AIRPORTS)
        destination = rng.choice([a for a in self.AIRPORTS if a != origin])

        return FlightStatus(
            flight_number=f'{rng.choice(self.AIRLINES)}{rng.randint(100, 9999)}',
            passenger_name=passenger_name,
            passenger_loyalty_tier=rng.choice(self.TIERS),
            origin_airport=origin,
            destination_airport=destination,
            status=rng.choice(self.STATUSES),
            departure_minutes=rng.randint(0, 75),
        )


def create_fetcher(demo_mode: Optional[bool] = None):
    """Build the fetcher selected by configuration."""
    if demo_mode is None:
        demo_mode = config.fetch.demo_mode

    if demo_mode:
        logger.info('Flight client running in DEMO MODE with mock data')
        return DemoFlightClient()
    return FlightStatusClient.from_config()
