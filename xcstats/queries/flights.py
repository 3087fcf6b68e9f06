"""
Flights explorer: filtered, sorted and paginated flight listing.

The total is counted with the same predicate as the page but without the
LIMIT/OFFSET, so paging never changes it. Ordering always ends with the
flight id in the sort direction, which makes page boundaries stable and
makes ascending output the exact reverse of descending output.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from xcstats.config import config, QueryConfig
from xcstats.errors import InvalidFilterError
from xcstats.models import Flight, Pilot, Takeoff
from xcstats.queries.common import FlightSummary, flight_summaries, flights_with_details
from xcstats.queries.filters import FlightFilters, compile_filters, parse_flight_filters

logger = logging.getLogger(__name__)

# Sortable dimensions (whitelist)
SORT_COLUMNS = {
    'date': Flight.start_time,
    'distance': Flight.distance_km,
    'score': Flight.score,
    'airtime': Flight.airtime,
    'pilot': Pilot.name,
    'takeoff': Takeoff.name,
}
DEFAULT_SORT = 'date'
SORT_DIRECTIONS = ('asc', 'desc')
DEFAULT_DIRECTION = 'desc'


def normalize_sort(sort_by, sort_dir) -> tuple:
    """Unknown or missing sort keys fall back to launch date, descending."""
    sort_by = sort_by if sort_by in SORT_COLUMNS else DEFAULT_SORT
    sort_dir = sort_dir if sort_dir in SORT_DIRECTIONS else DEFAULT_DIRECTION
    return sort_by, sort_dir


@dataclass(frozen=True)
class FlightQuery:
    """Filters plus sort and page selection for list_flights()."""
    filters: FlightFilters = field(default_factory=FlightFilters)
    sort_by: str = DEFAULT_SORT
    sort_dir: str = DEFAULT_DIRECTION
    page: int = 1
    page_size: int = 50

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class FlightPage:
    """One page of the flights explorer."""
    items: List[FlightSummary]
    total: int
    page: int
    page_size: int

    @property
    def page_count(self) -> int:
        if self.total == 0:
            return 0
        return -(-self.total // self.page_size)

    def to_dict(self) -> dict:
        return {
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'page': self.page,
            'page_size': self.page_size,
            'page_count': self.page_count,
        }


def _parse_positive_int(key: str, raw, default: int) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidFilterError(key, raw, 'expected an integer')


# Named listing shortcuts. A preset wins over explicit parameters it sets.
PRESETS: Dict[str, Callable[[date], Dict[str, Any]]] = {
    'today': lambda today: {'date_from': today, 'date_to': today},
    'bestMonth': lambda today: {'date_from': today.replace(day=1), 'sort_by': 'distance'},
    'top100': lambda today: {'sort_by': 'distance', 'page_size': 100},
    'club100k': lambda today: {'dist_min': 100.0, 'sort_by': 'distance'},
}


def _first(params: Mapping[str, Any], *keys):
    for key in keys:
        if params.get(key) is not None:
            return params.get(key)
    return None


def parse_flight_query(params: Mapping[str, Any], query_config: QueryConfig = None,
                       today: Optional[date] = None) -> FlightQuery:
    """
    Build a FlightQuery from raw request parameters.

    Recognised keys: the filter keys and their short aliases, sort_by (or
    sort), sort_dir (or dir), page, page_size and preset. today anchors the
    date-relative presets and defaults to the current local date.
    """
    query_config = query_config or config.query
    sort_by, sort_dir = normalize_sort(_first(params, 'sort_by', 'sort'), _first(params, 'sort_dir', 'dir'))
    page = _parse_positive_int('page', params.get('page'), 1)
    page_size = _parse_positive_int('page_size', params.get('page_size'), query_config.default_page_size)
    filters = parse_flight_filters(params)

    preset = params.get('preset')
    if preset is not None and str(preset).strip():
        preset = str(preset).strip()
        if preset not in PRESETS:
            raise InvalidFilterError('preset', preset, f'expected one of {", ".join(PRESETS)}')
        overrides = PRESETS[preset](today or date.today())
        sort_by = overrides.pop('sort_by', sort_by)
        page_size = overrides.pop('page_size', page_size)
        filters = replace(filters, **overrides)
        logger.debug(f'Applied flight preset {preset}: {filters.active()}')

    return FlightQuery(
        filters=filters,
        sort_by=sort_by,
        sort_dir=sort_dir,
        page=max(page, 1),
        page_size=min(max(page_size, 1), query_config.max_page_size),
    )


def _order_by(sort_by: str, sort_dir: str) -> list:
    column = SORT_COLUMNS[sort_by]
    if sort_dir == 'asc':
        return [column.asc().nulls_last(), Flight.id.asc()]
    return [column.desc().nulls_first(), Flight.id.desc()]


def count_flights(session: Session, filters: FlightFilters = None) -> int:
    """Number of paraglider flights matching filters."""
    stmt = flights_with_details(func.count(Flight.id)).where(*compile_filters(filters))
    return session.execute(stmt).scalar_one()


def list_flights(session: Session, query: FlightQuery = None) -> FlightPage:
    """
    Get one page of flights matching the query.

    Zero matches is a valid empty page with total 0.
    """
    query = query or FlightQuery()
    sort_by, sort_dir = normalize_sort(query.sort_by, query.sort_dir)
    page = max(query.page, 1)
    page_size = max(query.page_size, 1)

    conditions = compile_filters(query.filters)
    total = count_flights(session, query.filters)

    stmt = (
        flight_summaries()
        .where(*conditions)
        .order_by(*_order_by(sort_by, sort_dir))
        .limit(page_size)
        .offset((page - 1) * page_size)
    )
    items = [FlightSummary.from_row(row) for row in session.execute(stmt)]

    logger.debug(
        f'Listed {len(items)}/{total} flights '
        f'(sort={sort_by} {sort_dir}, page={page}, size={page_size})'
    )
    return FlightPage(items=items, total=total, page=page, page_size=page_size)
