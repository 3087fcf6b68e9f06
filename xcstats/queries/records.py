"""
Records: the best flight per partition, plus the "fun stats" superlatives.

Partitioned records are an arg-max per group, computed with
row_number() OVER (PARTITION BY key ORDER BY metric DESC, id ASC) and
keeping rank 1. The lowest flight id wins a tie.

Superlatives are each one grouped aggregate followed by a global arg-max.
Every tie-break rule is spelled out in the ORDER BY. Each one returns None
on an empty dataset.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from xcstats.models import Flight, Glider, Pilot
from xcstats.queries.common import (
    GLOBAL,
    FlightSummary,
    Scope,
    as_date,
    date_part,
    flight_day,
    flight_summaries,
    paraglider_flights,
)

logger = logging.getLogger(__name__)

# Airtimes above 10h are logger glitches, not flights
AIRTIME_CAP_MIN = 600

# A day counts as "epic" for each pilot who flew at least this far
EPIC_DISTANCE_KM = 300.0

PARTITION_KEYS = {
    'category': lambda: Glider.category,
    'year': lambda: date_part('year'),
    'takeoff': lambda: Flight.takeoff_id,
}

RECORD_METRICS = {
    'distance': Flight.distance_km,
    'score': Flight.score,
    'airtime': Flight.airtime,
}


@dataclass
class Record:
    """The best flight of one partition."""
    partition: Any
    flight: FlightSummary

    def to_dict(self) -> dict:
        return {'partition': self.partition, **self.flight.to_dict()}


@dataclass
class AllTimeRecords:
    longest: Optional[FlightSummary]
    longest_airtime: Optional[FlightSummary]
    highest_score: Optional[FlightSummary]

    def to_dict(self) -> dict:
        return {
            name: flight.to_dict() if flight else None
            for name, flight in (
                ('longest', self.longest),
                ('longest_airtime', self.longest_airtime),
                ('highest_score', self.highest_score),
            )
        }


def best_per_partition(
    session: Session,
    key: str = 'category',
    metric: str = 'distance',
    scope: Scope = GLOBAL,
) -> List[Record]:
    """
    Best flight by metric within each partition, ordered by partition.

    key is one of PARTITION_KEYS, metric one of RECORD_METRICS. Flights
    without a takeoff do not take part in takeoff records.
    """
    if key not in PARTITION_KEYS:
        raise ValueError(f'Unknown partition key: {key}')
    if metric not in RECORD_METRICS:
        raise ValueError(f'Unknown record metric: {metric}')

    partition_key = PARTITION_KEYS[key]()
    metric_column = RECORD_METRICS[metric]
    rank = func.row_number().over(
        partition_by=partition_key,
        order_by=(metric_column.desc(), Flight.id.asc()),
    )

    ranked_stmt = flight_summaries(
        partition_key.label('partition_key'),
        rank.label('partition_rank'),
        scope=scope,
    )
    if key == 'takeoff':
        ranked_stmt = ranked_stmt.where(Flight.takeoff_id.isnot(None))
    ranked = ranked_stmt.subquery('ranked')

    stmt = (
        select(ranked)
        .where(ranked.c.partition_rank == 1)
        .order_by(ranked.c.partition_key.asc())
    )
    records = [
        Record(partition=row.partition_key, flight=FlightSummary.from_row(row))
        for row in session.execute(stmt)
    ]
    logger.debug(f'{len(records)} {metric} records by {key}')
    return records


def category_records(session: Session, scope: Scope = GLOBAL) -> List[Record]:
    """Longest flight per glider category."""
    return best_per_partition(session, 'category', 'distance', scope)


def annual_records(session: Session, scope: Scope = GLOBAL) -> List[Record]:
    """Longest flight per calendar year."""
    return best_per_partition(session, 'year', 'distance', scope)


def site_records(session: Session, scope: Scope = GLOBAL) -> List[Record]:
    """Longest flight per takeoff."""
    return best_per_partition(session, 'takeoff', 'distance', scope)


def _best_flight(session: Session, metric_column, *conditions) -> Optional[FlightSummary]:
    stmt = (
        flight_summaries()
        .where(*conditions)
        .order_by(metric_column.desc(), Flight.id.asc())
        .limit(1)
    )
    row = session.execute(stmt).first()
    return FlightSummary.from_row(row) if row else None


def all_time_records(session: Session) -> AllTimeRecords:
    """Longest flight, longest plausible airtime and highest score."""
    return AllTimeRecords(
        longest=_best_flight(session, Flight.distance_km),
        longest_airtime=_best_flight(session, Flight.airtime, Flight.airtime <= AIRTIME_CAP_MIN),
        highest_score=_best_flight(session, Flight.score),
    )


# -------------------------------------------------------------------------
# Superlatives
# -------------------------------------------------------------------------

def epic_day(session: Session) -> Optional[dict]:
    """
    The day the most distinct pilots each flew at least 300 km.

    Ties go to the day with more flights, then the earliest day. None if
    no pilot ever reached 300 km.
    """
    day = flight_day().label('day')
    flight_count = func.count(Flight.id).label('flight_count')
    pilots_300k = func.count(
        case((Flight.distance_km >= EPIC_DISTANCE_KM, Flight.pilot_id)).distinct()
    ).label('pilots_300k')
    stmt = (
        paraglider_flights(
            day,
            flight_count,
            func.count(Flight.pilot_id.distinct()).label('pilot_count'),
            pilots_300k,
        )
        .group_by(day)
        .having(pilots_300k > 0)
        .order_by(pilots_300k.desc(), flight_count.desc(), day.asc())
        .limit(1)
    )
    row = session.execute(stmt).first()
    if row is None:
        return None
    return {
        'day': as_date(row.day),
        'flight_count': row.flight_count,
        'pilot_count': row.pilot_count,
        'pilots_300k': row.pilots_300k,
    }


def busiest_day(session: Session) -> Optional[dict]:
    """The day with the most flights; earliest day wins a tie."""
    day = flight_day().label('day')
    flight_count = func.count(Flight.id).label('flight_count')
    stmt = (
        paraglider_flights(
            day,
            flight_count,
            func.count(Flight.pilot_id.distinct()).label('pilot_count'),
        )
        .group_by(day)
        .order_by(flight_count.desc(), day.asc())
        .limit(1)
    )
    row = session.execute(stmt).first()
    if row is None:
        return None
    return {
        'day': as_date(row.day),
        'flight_count': row.flight_count,
        'pilot_count': row.pilot_count,
    }


def _top_pilot_by(session: Session, metric, label: str) -> Optional[dict]:
    value = metric.label(label)
    stmt = (
        paraglider_flights(Pilot.id, Pilot.name, Pilot.username, value)
        .join(Pilot, Flight.pilot_id == Pilot.id)
        .group_by(Pilot.id, Pilot.name, Pilot.username)
        .order_by(value.desc(), Pilot.id.asc())
        .limit(1)
    )
    row = session.execute(stmt).first()
    if row is None:
        return None
    return {
        'pilot_id': row.id,
        'name': row.name,
        'username': row.username,
        label: getattr(row, label),
    }


def most_sites_pilot(session: Session) -> Optional[dict]:
    """The pilot who launched from the most distinct takeoffs."""
    return _top_pilot_by(session, func.count(Flight.takeoff_id.distinct()), 'site_count')


def most_consistent_pilot(session: Session) -> Optional[dict]:
    """The pilot who flew in the most distinct years."""
    return _top_pilot_by(session, func.count(date_part('year').distinct()), 'years_active')


def fun_stats(session: Session) -> dict:
    """All superlatives in one payload."""
    return {
        'epic_day': epic_day(session),
        'busiest_day': busiest_day(session),
        'most_sites_pilot': most_sites_pilot(session),
        'most_consistent_pilot': most_consistent_pilot(session),
    }
