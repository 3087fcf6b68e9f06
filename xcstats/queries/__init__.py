"""
Query layer for XC Stats.

Every function takes an open Session and only reads. Provides:
- Filtered, sorted, paginated flight listings
- Time-bucketed series and the distance histogram
- Leaderboards, records and superlatives
- Per-takeoff and per-wing rollups
- Pilot dashboards and entity lookups
"""

from xcstats.queries.common import GLOBAL, FlightSummary, Scope
from xcstats.queries.filters import FlightFilters, compile_filters, parse_flight_filters
from xcstats.queries.flights import (
    FlightPage,
    FlightQuery,
    count_flights,
    list_flights,
    parse_flight_query,
)
from xcstats.queries.health import HealthStatus, check_health

__all__ = [
    'GLOBAL',
    'FlightSummary',
    'Scope',
    'FlightFilters',
    'compile_filters',
    'parse_flight_filters',
    'FlightPage',
    'FlightQuery',
    'count_flights',
    'list_flights',
    'parse_flight_query',
    'HealthStatus',
    'check_health',
]
