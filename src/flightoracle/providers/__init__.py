"""
FlightOracle Provider Clients

Each provider translates its own schema into FlightObservation behind the
FlightDataProvider protocol. Adding a provider means adding a module here
and registering it in registry.py and the plan schema; the resolver and
evaluator never change.
"""
from __future__ import annotations

from .base import (
    FlightDataProvider,
    get_json,
    select_by_departure_date,
    utc_now,
)
from .flightaware import FlightAwareClient, map_flightaware_status
from .flightstats import FlightStatsClient, map_flightstats_status
from .registry import build_provider, build_providers
from .timestamps import parse_timestamp, to_unix_seconds

PROVIDER_NAMES = (FlightAwareClient.name, FlightStatsClient.name)

__all__ = [
    "FlightDataProvider",
    "FlightAwareClient",
    "FlightStatsClient",
    "PROVIDER_NAMES",
    "build_provider",
    "build_providers",
    "get_json",
    "map_flightaware_status",
    "map_flightstats_status",
    "parse_timestamp",
    "select_by_departure_date",
    "to_unix_seconds",
    "utc_now",
]
