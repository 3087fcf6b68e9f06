"""
Per-site and per-wing summary rollups.

Each row combines whole-population aggregates with the "XC potential",
the average distance of the entity's own ten longest flights. The two
cannot share one GROUP BY: the potential needs a per-entity ranking first.
So the rollup runs as separate grouped passes joined on the entity key:

1. population aggregates grouped by key
2. row_number() per key by distance, rank <= 10, averaged per key
3. month-of-year counts per key, zero-filled to 12 entries
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from xcstats.models import BEGINNER_CATEGORIES, Flight, Glider, Takeoff
from xcstats.queries.common import (
    as_datetime,
    date_part,
    paraglider_flights,
    percent,
    round_half_up,
    zero_filled,
)

logger = logging.getLogger(__name__)

XC_POTENTIAL_TOP_N = 10
LONG_FLIGHT_KM = 100.0
WEEKEND_DAYS = (0, 6)  # Sunday, Saturday


@dataclass
class TakeoffSummary:
    """One row of the takeoffs table."""
    id: int
    name: str
    lat: Optional[float]
    lng: Optional[float]
    flight_count: int = 0
    pilot_count: int = 0
    record_km: Optional[float] = None
    last_activity: Optional[datetime] = None
    xc_potential: Optional[float] = None
    weekend_pct: Optional[int] = None
    flights_100k: int = 0
    avg_distance: Optional[float] = None
    ab_pct: Optional[int] = None
    monthly: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['last_activity'] = self.last_activity.isoformat() if self.last_activity else None
        return data


@dataclass
class WingSummary:
    """One row of the wings table."""
    id: int
    name: str
    category: str
    flight_count: int
    pilot_count: int
    total_km: Optional[float]
    avg_distance: Optional[float]
    max_distance: Optional[float]
    avg_speed: Optional[float]
    first_year: Optional[int]
    last_year: Optional[int]
    last_flight: Optional[datetime]
    xc_potential: Optional[float] = None
    monthly: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['last_flight'] = self.last_flight.isoformat() if self.last_flight else None
        return data


def top_n_average(key_column, n: int = XC_POTENTIAL_TOP_N):
    """
    Subquery (key, xc_potential): average distance of each key's n longest
    flights. Rows with a NULL key are left out.
    """
    rank = func.row_number().over(
        partition_by=key_column,
        order_by=(Flight.distance_km.desc(), Flight.id.asc()),
    )
    ranked = (
        paraglider_flights(
            key_column.label('entity_id'),
            Flight.distance_km.label('distance_km'),
            rank.label('distance_rank'),
        )
        .where(key_column.isnot(None))
        .subquery('ranked')
    )
    return (
        select(ranked.c.entity_id, func.avg(ranked.c.distance_km).label('xc_potential'))
        .where(ranked.c.distance_rank <= n)
        .group_by(ranked.c.entity_id)
        .subquery('top_n')
    )


def monthly_activity(session: Session, key_column) -> Dict[int, List[dict]]:
    """Key -> 12 zero-filled {month, count} entries."""
    month = date_part('month').label('month')
    stmt = (
        paraglider_flights(key_column.label('entity_id'), month, func.count(Flight.id).label('cnt'))
        .where(key_column.isnot(None))
        .group_by(key_column, month)
    )
    per_key = defaultdict(list)
    for row in session.execute(stmt):
        per_key[row.entity_id].append((row.month, row.cnt))

    return {
        key: _month_series(zero_filled(pairs, 1, 12))
        for key, pairs in per_key.items()
    }


def _month_series(counts: np.ndarray) -> List[dict]:
    return [{'month': m + 1, 'count': int(c)} for m, c in enumerate(counts)]


def _empty_months() -> List[dict]:
    return _month_series(np.zeros(12, dtype=np.int64))


def _stat_columns(stats) -> list:
    """Aggregate columns of a stats subquery, without its join key."""
    return [c for c in stats.c if c.name != 'entity_id']


def takeoff_summaries(session: Session) -> List[TakeoffSummary]:
    """
    Rollup of every takeoff, busiest first (ties by id).

    Takeoffs without paraglider flights are included with zero counts.
    """
    weekend = case((date_part('dow').in_(WEEKEND_DAYS), 1), else_=0)
    long_flight = case((Flight.distance_km >= LONG_FLIGHT_KM, 1), else_=0)
    beginner = case((Glider.category.in_(BEGINNER_CATEGORIES), 1), else_=0)

    stats = (
        paraglider_flights(
            Flight.takeoff_id.label('entity_id'),
            func.count(Flight.id).label('flight_count'),
            func.count(Flight.pilot_id.distinct()).label('pilot_count'),
            func.max(Flight.distance_km).label('record_km'),
            func.max(Flight.start_time).label('last_activity'),
            func.sum(weekend).label('weekend_count'),
            func.sum(long_flight).label('flights_100k'),
            func.avg(Flight.distance_km).label('avg_distance'),
            func.sum(beginner).label('beginner_count'),
        )
        .where(Flight.takeoff_id.isnot(None))
        .group_by(Flight.takeoff_id)
        .subquery('takeoff_stats')
    )
    potential = top_n_average(Flight.takeoff_id)

    stmt = (
        select(
            Takeoff.id,
            Takeoff.name,
            Takeoff.latitude,
            Takeoff.longitude,
            *_stat_columns(stats),
            potential.c.xc_potential,
        )
        .select_from(Takeoff)
        .outerjoin(stats, stats.c.entity_id == Takeoff.id)
        .outerjoin(potential, potential.c.entity_id == Takeoff.id)
        .order_by(stats.c.flight_count.desc().nulls_last(), Takeoff.id.asc())
    )
    monthly = monthly_activity(session, Flight.takeoff_id)

    summaries = []
    for row in session.execute(stmt):
        summary = TakeoffSummary(
            id=row.id,
            name=row.name,
            lat=row.latitude,
            lng=row.longitude,
            monthly=monthly.get(row.id) or _empty_months(),
        )
        if row.flight_count:
            summary.flight_count = row.flight_count
            summary.pilot_count = row.pilot_count
            summary.record_km = row.record_km
            summary.last_activity = as_datetime(row.last_activity)
            summary.xc_potential = round_half_up(row.xc_potential, 1)
            summary.weekend_pct = percent(row.weekend_count, row.flight_count)
            summary.flights_100k = int(row.flights_100k or 0)
            summary.avg_distance = round_half_up(row.avg_distance, 1)
            summary.ab_pct = percent(row.beginner_count, row.flight_count)
        summaries.append(summary)

    logger.debug(f'Takeoff rollup: {len(summaries)} takeoffs')
    return summaries


def wing_summaries(session: Session) -> List[WingSummary]:
    """
    Rollup of every paraglider wing with flights, most flown first
    (ties by id).
    """
    year = date_part('year')
    speed = case(
        (Flight.airtime > 0, Flight.distance_km / (Flight.airtime / 60.0)),
        else_=None,
    )

    stats = (
        paraglider_flights(
            Flight.glider_id.label('entity_id'),
            func.count(Flight.id).label('flight_count'),
            func.count(Flight.pilot_id.distinct()).label('pilot_count'),
            func.sum(Flight.distance_km).label('total_km'),
            func.avg(Flight.distance_km).label('avg_distance'),
            func.max(Flight.distance_km).label('max_distance'),
            func.avg(speed).label('avg_speed'),
            func.min(year).label('first_year'),
            func.max(year).label('last_year'),
            func.max(Flight.start_time).label('last_flight'),
        )
        .group_by(Flight.glider_id)
        .subquery('wing_stats')
    )
    potential = top_n_average(Flight.glider_id)

    stmt = (
        select(
            Glider.id,
            Glider.name,
            Glider.category,
            *_stat_columns(stats),
            potential.c.xc_potential,
        )
        .select_from(Glider)
        .join(stats, stats.c.entity_id == Glider.id)
        .outerjoin(potential, potential.c.entity_id == Glider.id)
        .order_by(stats.c.flight_count.desc(), Glider.id.asc())
    )
    monthly = monthly_activity(session, Flight.glider_id)

    summaries = [
        WingSummary(
            id=row.id,
            name=row.name,
            category=row.category,
            flight_count=row.flight_count,
            pilot_count=row.pilot_count,
            total_km=round_half_up(row.total_km, 0),
            avg_distance=round_half_up(row.avg_distance, 1),
            max_distance=row.max_distance,
            avg_speed=round_half_up(row.avg_speed, 1),
            first_year=row.first_year,
            last_year=row.last_year,
            last_flight=as_datetime(row.last_flight),
            xc_potential=round_half_up(row.xc_potential, 1),
            monthly=monthly.get(row.id) or _empty_months(),
        )
        for row in session.execute(stmt)
    ]
    logger.debug(f'Wing rollup: {len(summaries)} wings')
    return summaries
