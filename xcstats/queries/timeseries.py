"""
Time-bucketed activity series.

Fixed-domain series (months, hours, weekdays) are zero-filled here: the
full domain is materialized first and observed counts are overlaid, so
chart consumers always get 12 / 24 / 7 entries. The calendar heatmap and
the yearly series are sparse and only list buckets with flights.
"""

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from xcstats.models import Flight
from xcstats.queries.common import (
    GLOBAL,
    Scope,
    date_part,
    paraglider_flights,
    round_half_up,
    zero_filled,
)

logger = logging.getLogger(__name__)

# Launch-hour series only counts cross-country flights
HOURLY_MIN_DISTANCE_KM = 20.0

MONTHS = 12
HOURS = 24
WEEKDAYS = 7  # 0=Sunday .. 6=Saturday


def calendar_heatmap(session: Session, scope: Scope = GLOBAL) -> List[dict]:
    """
    Year x month activity grid (sparse).

    Returns [{year, month, flight_count, avg_score}] ordered by year, month.
    """
    year = date_part('year').label('year')
    month = date_part('month').label('month')
    stmt = (
        paraglider_flights(
            year,
            month,
            func.count(Flight.id).label('flight_count'),
            func.avg(Flight.score).label('avg_score'),
            scope=scope,
        )
        .group_by(year, month)
        .order_by(year, month)
    )
    return [
        {
            'year': row.year,
            'month': row.month,
            'flight_count': row.flight_count,
            'avg_score': round_half_up(row.avg_score, 1),
        }
        for row in session.execute(stmt)
    ]


def monthly_stats(session: Session, scope: Scope = GLOBAL) -> List[dict]:
    """
    Month-of-year activity, years collapsed.

    Always 12 entries; empty months have flight_count 0 and
    avg_distance None.
    """
    month = date_part('month').label('month')
    stmt = (
        paraglider_flights(
            month,
            func.count(Flight.id).label('flight_count'),
            func.avg(Flight.distance_km).label('avg_distance'),
            scope=scope,
        )
        .group_by(month)
    )
    rows = session.execute(stmt).all()
    counts = zero_filled(((row.month, row.flight_count) for row in rows), 1, MONTHS)
    averages = {row.month: round_half_up(row.avg_distance, 1) for row in rows}

    return [
        {
            'month': m,
            'flight_count': int(counts[m - 1]),
            'avg_distance': averages.get(m),
        }
        for m in range(1, MONTHS + 1)
    ]


def hourly_distribution(session: Session, scope: Scope = GLOBAL) -> List[dict]:
    """
    Launch hour of cross-country flights (> 20 km), 24 entries.
    """
    hour = date_part('hour').label('hour')
    stmt = (
        paraglider_flights(hour, func.count(Flight.id).label('flight_count'), scope=scope)
        .where(Flight.distance_km > HOURLY_MIN_DISTANCE_KM)
        .group_by(hour)
    )
    counts = zero_filled(session.execute(stmt).tuples(), 0, HOURS)
    return [{'hour': h, 'flight_count': int(counts[h])} for h in range(HOURS)]


def day_of_week_distribution(session: Session, scope: Scope = GLOBAL) -> List[dict]:
    """
    Flights per weekday, 7 entries, dow 0=Sunday .. 6=Saturday.
    """
    dow = date_part('dow').label('dow')
    stmt = (
        paraglider_flights(dow, func.count(Flight.id).label('flight_count'), scope=scope)
        .group_by(dow)
    )
    counts = zero_filled(session.execute(stmt).tuples(), 0, WEEKDAYS)
    return [{'dow': d, 'flight_count': int(counts[d])} for d in range(WEEKDAYS)]


def yearly_stats(session: Session, scope: Scope = GLOBAL) -> List[dict]:
    """
    Per-year totals (sparse), ordered by year.

    pilot_count doubles as the adoption curve of a wing.
    """
    year = date_part('year').label('year')
    stmt = (
        paraglider_flights(
            year,
            func.count(Flight.id).label('flight_count'),
            func.sum(Flight.distance_km).label('total_km'),
            func.avg(Flight.distance_km).label('avg_distance'),
            func.max(Flight.distance_km).label('max_distance'),
            func.count(Flight.pilot_id.distinct()).label('pilot_count'),
            scope=scope,
        )
        .group_by(year)
        .order_by(year)
    )
    result = [
        {
            'year': row.year,
            'flight_count': row.flight_count,
            'total_km': round_half_up(row.total_km, 0),
            'avg_distance': round_half_up(row.avg_distance, 1),
            'max_distance': row.max_distance,
            'pilot_count': row.pilot_count,
        }
        for row in session.execute(stmt)
    ]
    logger.debug(f'Yearly stats for {scope}: {len(result)} years')
    return result
