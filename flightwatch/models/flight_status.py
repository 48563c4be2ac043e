"""
FlightStatus model - one passenger's flight at a point in time.

Records are immutable snapshots. The watch loop never edits a record in
place; advancing the clock produces a new record one minute closer to
departure, and the boarding state is re-derived from the new values.

Payload formats returned by the status source (comma separated):
    flight:  flight_number,origin,destination,status,departure_minutes
    loyalty: tier,miles_flown,miles_to_next_tier
"""

from dataclasses import dataclass, replace
from enum import Enum

from flightwatch.exceptions import FlightParseError

PREBOARD_TIERS = ('platinum', 'gold')


class BoardingState(str, Enum):
    """
    Boarding lifecycle stage of a flight.

    Derived from cancellation, minutes to departure and loyalty tier:
    - FLIGHT_CANCELED: status reported as canceled
    - BOARDING_NOT_STARTED: more than 60 minutes to departure
    - WAITING_TO_BOARD: boarding open, but not yet for this passenger
    - BOARDING: passenger may board
    - BOARDING_ENDED: less than 15 minutes to departure
    """
    FLIGHT_CANCELED = 'flight_canceled'
    BOARDING_NOT_STARTED = 'boarding_not_started'
    WAITING_TO_BOARD = 'waiting_to_board'
    BOARDING = 'boarding'
    BOARDING_ENDED = 'boarding_ended'


@dataclass(frozen=True)
class FlightStatus:
    """Status of a passenger's flight, as reported by the status source."""
    flight_number: str
    passenger_name: str
    passenger_loyalty_tier: str
    origin_airport: str
    destination_airport: str
    status: str
    departure_minutes: int

    def __post_init__(self):
        if not self.passenger_name:
            raise ValueError('passenger_name must not be empty')

    @classmethod
    def parse(
        cls,
        passenger_name: str,
        flight_response: str,
        loyalty_response: str,
    ) -> 'FlightStatus':
        """
        Combine the flight and loyalty payloads into a FlightStatus.

        Raises FlightParseError if either payload is malformed.
        """
        flight_fields = [part.strip() for part in (flight_response or '').strip().split(',')]
        loyalty_fields = [part.strip() for part in (loyalty_response or '').strip().split(',')]

        if len(flight_fields) < 5:
            raise FlightParseError(
                f'Malformed flight response for {passenger_name}: {flight_response!r}',
                passenger_name,
            )
        if not loyalty_fields[0]:
            raise FlightParseError(
                f'Malformed loyalty response for {passenger_name}: {loyalty_response!r}',
                passenger_name,
            )

        flight_number, origin, destination, status, minutes = flight_fields[:5]
        try:
            departure_minutes = int(minutes)
        except ValueError:
            raise FlightParseError(
                f'Invalid departure time for {passenger_name}: {minutes!r}',
                passenger_name,
            ) from None

        return cls(
            flight_number=flight_number,
            passenger_name=passenger_name,
            passenger_loyalty_tier=loyalty_fields[0],
            origin_airport=origin,
            destination_airport=destination,
            status=status,
            departure_minutes=departure_minutes,
        )

    def advance(self, minutes: int = 1) -> 'FlightStatus':
        """Return a new record `minutes` closer to departure."""
        return replace(self, departure_minutes=self.departure_minutes - minutes)

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def is_canceled(self) -> bool:
        return self.status.lower() == 'canceled'

    @property
    def has_boarding_started(self) -> bool:
        return 15 <= self.departure_minutes <= 60

    @property
    def is_boarding_over(self) -> bool:
        return self.departure_minutes < 15

    @property
    def is_eligible_to_preboard(self) -> bool:
        return self.passenger_loyalty_tier.lower() in PREBOARD_TIERS

    @property
    def boarding_state(self) -> BoardingState:
        """
        Current boarding state.

        Preboard-eligible passengers (Gold, Platinum) may board as soon as
        boarding starts; everybody else waits until 40 minutes out.
        """
        if self.is_canceled:
            return BoardingState.FLIGHT_CANCELED
        if self.is_boarding_over:
            return BoardingState.BOARDING_ENDED
        if self.is_eligible_to_preboard and self.has_boarding_started:
            return BoardingState.BOARDING
        if not self.is_eligible_to_preboard and 15 <= self.departure_minutes <= 40:
            return BoardingState.BOARDING
        if self.has_boarding_started:
            return BoardingState.WAITING_TO_BOARD
        return BoardingState.BOARDING_NOT_STARTED

    def describe(self) -> str:
        """Short label, e.g. 'Madrigal (BN1234)'."""
        return f'{self.passenger_name} ({self.flight_number})'

    def __repr__(self) -> str:
        return (
            f'<FlightStatus {self.passenger_name} {self.flight_number} '
            f'{self.origin_airport}->{self.destination_airport} '
            f'{self.status} T-{self.departure_minutes}>'
        )
