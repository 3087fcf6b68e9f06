"""
Pilot statistics: the pilots table and the per-pilot dashboard parts
that are specific to pilots. Generic series (heatmap, histogram, top
flights, yearly) take Scope(pilot_id=...) instead.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from xcstats.models import Flight, Glider, Pilot, Takeoff
from xcstats.queries.common import (
    Scope,
    as_datetime,
    date_part,
    paraglider_flights,
    round_half_up,
)

logger = logging.getLogger(__name__)


def _favorite_takeoffs():
    """Subquery: each pilot's most flown takeoff (ties by takeoff id)."""
    flight_count = func.count(Flight.id)
    rank = func.row_number().over(
        partition_by=Flight.pilot_id,
        order_by=(flight_count.desc(), Takeoff.id.asc()),
    )
    per_site = (
        paraglider_flights(
            Flight.pilot_id.label('pilot_id'),
            Takeoff.id.label('takeoff_id'),
            Takeoff.name.label('takeoff_name'),
            rank.label('site_rank'),
        )
        .join(Takeoff, Flight.takeoff_id == Takeoff.id)
        .group_by(Flight.pilot_id, Takeoff.id, Takeoff.name)
        .subquery('per_site')
    )
    return (
        select(per_site.c.pilot_id, per_site.c.takeoff_id, per_site.c.takeoff_name)
        .where(per_site.c.site_rank == 1)
        .subquery('fav_site')
    )


def pilots_list(session: Session) -> List[dict]:
    """Every pilot with paraglider flights, by total distance."""
    total_km = func.sum(Flight.distance_km)
    stats = (
        paraglider_flights(
            Flight.pilot_id.label('pilot_id'),
            func.count(Flight.id).label('flight_count'),
            total_km.label('total_km'),
            func.sum(Flight.score).label('total_score'),
            func.avg(Flight.distance_km).label('avg_distance'),
            func.max(Flight.distance_km).label('max_distance'),
            func.count(date_part('year').distinct()).label('active_years'),
            func.max(Flight.start_time).label('last_flight'),
        )
        .group_by(Flight.pilot_id)
        .subquery('pilot_stats')
    )
    favorite = _favorite_takeoffs()

    stmt = (
        select(
            Pilot.id,
            Pilot.name,
            Pilot.username,
            stats.c.flight_count,
            stats.c.total_km,
            stats.c.total_score,
            stats.c.avg_distance,
            stats.c.max_distance,
            stats.c.active_years,
            stats.c.last_flight,
            favorite.c.takeoff_id,
            favorite.c.takeoff_name,
        )
        .select_from(Pilot)
        .join(stats, stats.c.pilot_id == Pilot.id)
        .outerjoin(favorite, favorite.c.pilot_id == Pilot.id)
        .order_by(stats.c.total_km.desc(), Pilot.id.asc())
    )
    pilots = [
        {
            'id': row.id,
            'name': row.name,
            'username': row.username,
            'flight_count': row.flight_count,
            'total_km': round_half_up(row.total_km, 0),
            'total_score': round_half_up(row.total_score, 0),
            'avg_distance': round_half_up(row.avg_distance, 1),
            'max_distance': row.max_distance,
            'active_years': row.active_years,
            'last_flight': as_datetime(row.last_flight),
            'fav_takeoff_id': row.takeoff_id,
            'fav_takeoff_name': row.takeoff_name,
        }
        for row in session.execute(stmt)
    ]
    logger.debug(f'Pilots list: {len(pilots)} pilots')
    return pilots


def pilot_stats(session: Session, pilot_id: int) -> dict:
    """Career totals of one pilot; zero counts when they have no flights."""
    stmt = paraglider_flights(
        func.count(Flight.id).label('total_flights'),
        func.sum(Flight.distance_km).label('total_km'),
        func.sum(Flight.score).label('total_score'),
        func.max(Flight.distance_km).label('max_distance'),
        func.avg(Flight.distance_km).label('avg_distance'),
        func.min(date_part('year')).label('active_since'),
        func.max(Flight.start_time).label('last_flight'),
        scope=Scope(pilot_id=pilot_id),
    )
    row = session.execute(stmt).one()
    return {
        'total_flights': row.total_flights,
        'total_km': round_half_up(row.total_km, 0),
        'total_score': round_half_up(row.total_score, 0),
        'max_distance': row.max_distance,
        'avg_distance': round_half_up(row.avg_distance, 1),
        'active_since': row.active_since,
        'last_flight': as_datetime(row.last_flight),
    }


def favorite_takeoff(session: Session, pilot_id: int) -> Optional[dict]:
    """The takeoff a pilot launched from most often."""
    flight_count = func.count(Flight.id).label('flight_count')
    stmt = (
        paraglider_flights(Takeoff.id, Takeoff.name, flight_count, scope=Scope(pilot_id=pilot_id))
        .join(Takeoff, Flight.takeoff_id == Takeoff.id)
        .group_by(Takeoff.id, Takeoff.name)
        .order_by(flight_count.desc(), Takeoff.id.asc())
        .limit(1)
    )
    row = session.execute(stmt).first()
    if row is None:
        return None
    return {'id': row.id, 'name': row.name, 'flight_count': row.flight_count}


def pilot_site_map(session: Session, pilot_id: int) -> List[dict]:
    """Takeoffs a pilot used, with coordinates and flight counts."""
    flight_count = func.count(Flight.id).label('flight_count')
    stmt = (
        paraglider_flights(
            Takeoff.id,
            Takeoff.name,
            Takeoff.latitude,
            Takeoff.longitude,
            flight_count,
            scope=Scope(pilot_id=pilot_id),
        )
        .join(Takeoff, Flight.takeoff_id == Takeoff.id)
        .group_by(Takeoff.id, Takeoff.name, Takeoff.latitude, Takeoff.longitude)
        .order_by(flight_count.desc(), Takeoff.id.asc())
    )
    return [
        {
            'id': row.id,
            'name': row.name,
            'lat': row.latitude,
            'lng': row.longitude,
            'flight_count': row.flight_count,
        }
        for row in session.execute(stmt)
    ]


def equipment_timeline(session: Session, pilot_id: int) -> List[dict]:
    """Gliders a pilot flew, in order of first use."""
    first_used = func.min(Flight.start_time).label('first_used')
    stmt = (
        paraglider_flights(
            Glider.id,
            Glider.name,
            Glider.category,
            func.count(Flight.id).label('flight_count'),
            first_used,
            func.max(Flight.start_time).label('last_used'),
            scope=Scope(pilot_id=pilot_id),
        )
        .group_by(Glider.id, Glider.name, Glider.category)
        .order_by(first_used.asc(), Glider.id.asc())
    )
    return [
        {
            'id': row.id,
            'name': row.name,
            'category': row.category,
            'flight_count': row.flight_count,
            'first_used': as_datetime(row.first_used),
            'last_used': as_datetime(row.last_used),
        }
        for row in session.execute(stmt)
    ]
