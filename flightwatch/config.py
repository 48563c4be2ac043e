"""
Configuration management for FlightWatch.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

DEFAULT_PASSENGER_NAMES = ('Madrigal', 'Polarcubis', 'Estragon', 'Taernyl')


def _parse_names(value: str) -> Tuple[str, ...]:
    """Parse 'A,B,C' string into a tuple of names, or the defaults if empty."""
    if not value:
        return DEFAULT_PASSENGER_NAMES
    names = tuple(name.strip() for name in value.split(',') if name.strip())
    return names or DEFAULT_PASSENGER_NAMES


def _parse_bool(value: str) -> bool:
    return (value or '').strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class FetchConfig:
    """Remote flight status source."""
    base_url: str = os.getenv('FLIGHT_API_BASE_URL', 'http://kotlin-book.bignerdranch.com/2e')
    timeout_seconds: float = float(os.getenv('FLIGHT_API_TIMEOUT_SECONDS', '10'))

    # Use generated statuses instead of calling the API
    demo_mode: bool = _parse_bool(os.getenv('FLIGHT_DEMO_MODE', 'false'))


@dataclass(frozen=True)
class TrackingConfig:
    """Fetch pool and watch loop settings."""
    worker_count: int = int(os.getenv('WORKER_COUNT', '2'))
    tick_interval: float = float(os.getenv('TICK_INTERVAL_SECONDS', '1.0'))
    concurrent_watches: bool = _parse_bool(os.getenv('CONCURRENT_WATCHES', 'false'))

    # 0 keeps the pool queues unbounded
    queue_size: int = int(os.getenv('FETCH_QUEUE_SIZE', '0'))

    passenger_names: Tuple[str, ...] = _parse_names(os.getenv('PASSENGER_NAMES', ''))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    fetch: FetchConfig
    tracking: TrackingConfig
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        fetch=FetchConfig(),
        tracking=TrackingConfig(),
        debug=os.getenv('FLIGHTWATCH_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
