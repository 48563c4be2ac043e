"""
FlightWatch command line entry point.

Fetches the configured passengers' flights and follows them until
departure, printing a status line per flight every tick.

Usage:
    python -m flightwatch.app
    python -m flightwatch.app Madrigal Polarcubis

Passenger names default to PASSENGER_NAMES from the environment (.env).
Set FLIGHT_DEMO_MODE=true to run without network access.
"""

import logging
import sys
from typing import List, Optional

from flightwatch.config import config
from flightwatch.exceptions import FlightWatchError
from flightwatch.ingestion import create_fetcher
from flightwatch.tracking import FlightTracker

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Run one tracking session. Returns the process exit code."""
    if argv is None:
        argv = sys.argv[1:]
    passenger_names = argv or list(config.tracking.passenger_names)

    tracker = FlightTracker(fetcher=create_fetcher())
    logger.info(
        f'Tracking {len(passenger_names)} passengers with '
        f'{tracker.worker_count} fetch workers, tick {tracker.tick_interval}s'
    )

    try:
        tracker.run(passenger_names)
    except KeyboardInterrupt:
        tracker.stop()
        logger.warning('Interrupted, tracking stopped')
        return 130
    except FlightWatchError as e:
        logger.error(f'Tracking failed: {e}')
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
