"""
FlightWatch Package.

Fetches passengers' flight statuses through a bounded worker pool, then
follows each flight minute by minute until departure or cancellation.

Modules:
    models/      FlightStatus record and BoardingState derivation
    ingestion/   Flight status clients and the fan-out/fan-in fetch pool
    tracking/    Per-flight watch loop, tracking counter, run coordinator
    queues.py    Thread-safe closable FIFO used between pipeline stages
    output.py    Line sinks for user-facing status messages
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
