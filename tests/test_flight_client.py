"""Tests for the flight status clients."""

from unittest import mock

import pytest
import requests

from flightwatch.exceptions import FetchError, FlightParseError
from flightwatch.ingestion import DemoFlightClient, FlightStatusClient, create_fetcher
from flightwatch.models import FlightStatus

BASE_URL = 'http://flights.test/2e'


def make_response(text='', status_code=200):
    response = mock.Mock()
    response.text = text
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def session_get():
    """Patch requests.Session so every session's get() is this mock."""
    with mock.patch('flightwatch.ingestion.flight_client.requests.Session') as session_cls:
        session = session_cls.return_value.__enter__.return_value
        yield session.get


def route(flight=None, loyalty=None):
    def get(url, timeout):
        if url.endswith('/flight'):
            return flight
        if url.endswith('/loyalty'):
            return loyalty
        raise AssertionError(f'unexpected url {url}')
    return get


class TestFlightStatusClient:
    """Tests for the HTTP client."""

    def test_fetch_combines_both_endpoints(self, session_get):
        session_get.side_effect = route(
            flight=make_response('BN4145,BOS,ORD,On Time,37'),
            loyalty=make_response('Platinum,120000,0'),
        )
        client = FlightStatusClient(base_url=BASE_URL, timeout=3)

        flight = client.fetch('Madrigal')

        assert flight.passenger_name == 'Madrigal'
        assert flight.flight_number == 'BN4145'
        assert flight.passenger_loyalty_tier == 'Platinum'
        assert flight.departure_minutes == 37
        requested = sorted(call.args[0] for call in session_get.call_args_list)
        assert requested == [f'{BASE_URL}/flight', f'{BASE_URL}/loyalty']
        assert all(call.kwargs['timeout'] == 3 for call in session_get.call_args_list)

    def test_http_error_becomes_fetch_error(self, session_get):
        session_get.side_effect = route(
            flight=make_response(status_code=503),
            loyalty=make_response('Gold,1,2'),
        )
        with pytest.raises(FetchError, match='HTTP 503') as exc_info:
            FlightStatusClient(base_url=BASE_URL).fetch('Polarcubis')
        assert exc_info.value.passenger_name == 'Polarcubis'

    def test_connection_error_becomes_fetch_error(self, session_get):
        session_get.side_effect = requests.exceptions.ConnectionError('refused')
        with pytest.raises(FetchError) as exc_info:
            FlightStatusClient(base_url=BASE_URL).fetch('Estragon')
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_timeout_becomes_fetch_error(self, session_get):
        session_get.side_effect = requests.exceptions.Timeout()
        with pytest.raises(FetchError, match='Timed out'):
            FlightStatusClient(base_url=BASE_URL).fetch('Taernyl')

    def test_malformed_payload(self, session_get):
        session_get.side_effect = route(
            flight=make_response('garbage'),
            loyalty=make_response('Gold,1,2'),
        )
        with pytest.raises(FlightParseError):
            FlightStatusClient(base_url=BASE_URL).fetch('Madrigal')

    def test_trailing_slash_ignored(self):
        client = FlightStatusClient(base_url=f'{BASE_URL}/')
        assert client.flight_endpoint == f'{BASE_URL}/flight'
        assert client.loyalty_endpoint == f'{BASE_URL}/loyalty'


class TestDemoFlightClient:
    """Tests for the offline mock client."""

    def test_deterministic_per_name(self):
        client = DemoFlightClient()
        assert client.fetch('Madrigal') == client.fetch('Madrigal')

    def test_record_is_plausible(self):
        flight = DemoFlightClient().fetch('Polarcubis')
        assert isinstance(flight, FlightStatus)
        assert flight.passenger_name == 'Polarcubis'
        assert flight.origin_airport != flight.destination_airport
        assert 0 <= flight.departure_minutes <= 75

    def test_empty_name_rejected(self):
        with pytest.raises(FetchError):
            DemoFlightClient().fetch('')


class TestCreateFetcher:

    def test_demo_mode(self):
        assert isinstance(create_fetcher(demo_mode=True), DemoFlightClient)

    def test_live_mode(self):
        assert isinstance(create_fetcher(demo_mode=False), FlightStatusClient)
