"""
Flight filter compiler.

Turns a sparse set of user criteria into SQL conditions over the flights
explorer query (flights JOIN pilots JOIN gliders LEFT JOIN takeoffs).

Only the keys in FILTER_KEYS exist. Each one has exactly one typed
constraint constructor; callers cannot name a column or an operator.
The compiled conditions are meant to be AND-combined, and an empty list
matches every flight.

Raw request parameters go through parse_flight_filters() first, which is
where malformed input is rejected.
"""

import logging
import math
from dataclasses import dataclass, fields
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import String, func, literal, or_
from sqlalchemy.sql.elements import ColumnElement

from xcstats.errors import InvalidFilterError
from xcstats.models import Flight, Glider, GliderCategory, Pilot, Takeoff

logger = logging.getLogger(__name__)

LIKE_ESCAPE = '/'


@dataclass(frozen=True)
class FlightFilters:
    """
    Optional criteria for the flights explorer.

    None (or a blank string for text fields) means "no constraint".
    """
    pilot_search: Optional[str] = None
    takeoff_search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    dist_min: Optional[float] = None
    dist_max: Optional[float] = None
    flight_type: Optional[str] = None
    glider_category: Optional[str] = None

    def active(self) -> Dict[str, Any]:
        """The criteria that actually constrain the result."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if not _is_blank(getattr(self, f.name))
        }


FILTER_KEYS = tuple(f.name for f in fields(FlightFilters))


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# -------------------------------------------------------------------------
# Constraint constructors
# -------------------------------------------------------------------------

def _contains_pattern(term: str) -> str:
    """LIKE pattern matching term anywhere, with wildcards in term escaped."""
    escaped = (
        term.strip()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )
    return f'%{escaped}%'


def _unaccent(expr) -> ColumnElement:
    return func.unaccent(expr, type_=String)


def _folded_contains(column, term: str) -> ColumnElement:
    """Case- and accent-insensitive substring match."""
    pattern = _unaccent(literal(_contains_pattern(term), String))
    return _unaccent(column).ilike(pattern, escape=LIKE_ESCAPE)


def _pilot_search(term: str) -> ColumnElement:
    return or_(
        _folded_contains(Pilot.name, term),
        _folded_contains(Pilot.username, term),
    )


def _takeoff_search(term: str) -> ColumnElement:
    return _folded_contains(Takeoff.name, term)


def _date_from(value: date) -> ColumnElement:
    return Flight.start_time >= datetime.combine(value, time.min)


def _date_to(value: date) -> ColumnElement:
    # Inclusive of the whole final day
    return Flight.start_time < datetime.combine(value + timedelta(days=1), time.min)


def _dist_min(value: float) -> ColumnElement:
    return Flight.distance_km >= value


def _dist_max(value: float) -> ColumnElement:
    return Flight.distance_km <= value


def _flight_type(term: str) -> ColumnElement:
    return Flight.type.ilike(_contains_pattern(term), escape=LIKE_ESCAPE)


def _glider_category(value: str) -> ColumnElement:
    return Glider.category == str(getattr(value, 'value', value))


CONSTRAINTS: Dict[str, Callable[[Any], ColumnElement]] = {
    'pilot_search': _pilot_search,
    'takeoff_search': _takeoff_search,
    'date_from': _date_from,
    'date_to': _date_to,
    'dist_min': _dist_min,
    'dist_max': _dist_max,
    'flight_type': _flight_type,
    'glider_category': _glider_category,
}


def compile_filters(filters: Optional[FlightFilters]) -> List[ColumnElement]:
    """
    Compile filters into a list of conditions to AND together.

    Absent criteria contribute nothing; no criteria yields [].
    """
    if filters is None:
        return []
    return [CONSTRAINTS[key](value) for key, value in filters.active().items()]


# -------------------------------------------------------------------------
# Boundary parsing
# -------------------------------------------------------------------------

def _parse_text(key: str, raw) -> str:
    return str(raw).strip()


def _parse_date(key: str, raw) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw).strip()[:10])
    except ValueError:
        raise InvalidFilterError(key, raw, 'expected YYYY-MM-DD')


def _parse_distance(key: str, raw) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidFilterError(key, raw, 'expected a number')
    if math.isnan(value) or math.isinf(value):
        raise InvalidFilterError(key, raw, 'expected a finite number')
    if value < 0:
        raise InvalidFilterError(key, raw, 'distance cannot be negative')
    return value


def _parse_category(key: str, raw) -> str:
    try:
        return GliderCategory(str(raw).strip()).value
    except ValueError:
        allowed = ', '.join(c.value for c in GliderCategory)
        raise InvalidFilterError(key, raw, f'expected one of {allowed}')


PARSERS: Dict[str, Callable[[str, Any], Any]] = {
    'pilot_search': _parse_text,
    'takeoff_search': _parse_text,
    'date_from': _parse_date,
    'date_to': _parse_date,
    'dist_min': _parse_distance,
    'dist_max': _parse_distance,
    'flight_type': _parse_text,
    'glider_category': _parse_category,
}


# Short names used by explorer URLs (?pilot=bob&category=D)
PARAM_ALIASES = {
    'pilot': 'pilot_search',
    'takeoff': 'takeoff_search',
    'type': 'flight_type',
    'category': 'glider_category',
    'dateFrom': 'date_from',
    'dateTo': 'date_to',
    'distMin': 'dist_min',
    'distMax': 'dist_max',
}


def parse_flight_filters(params: Mapping[str, Any]) -> FlightFilters:
    """
    Build FlightFilters from raw request parameters.

    Both FILTER_KEYS and their PARAM_ALIASES are recognised; other keys
    are ignored. Blank values are treated as absent. Malformed values
    raise InvalidFilterError.
    """
    values = {}
    for param, raw in params.items():
        key = PARAM_ALIASES.get(param, param)
        parser = PARSERS.get(key)
        if parser is None:
            continue
        if _is_blank(raw):
            continue
        values[key] = parser(param, raw)

    filters = FlightFilters(**values)
    logger.debug(f'Parsed flight filters: {filters.active()}')
    return filters
