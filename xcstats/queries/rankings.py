"""
Top-N leaderboards.

Every ranking sorts by its metric descending and caps to N. Ties are
broken by entity id ascending (days: earliest first) so the same data
always yields the same board.
"""

import logging
from datetime import datetime, timedelta
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from xcstats.models import Flight, Glider, Pilot, Takeoff
from xcstats.queries.common import (
    GLOBAL,
    FlightSummary,
    Scope,
    as_date,
    flight_day,
    flight_summaries,
    paraglider_flights,
    round_half_up,
)

logger = logging.getLogger(__name__)


def top_flights(session: Session, scope: Scope = GLOBAL, limit: int = 10) -> List[FlightSummary]:
    """Longest flights within scope."""
    stmt = (
        flight_summaries(scope=scope)
        .order_by(Flight.distance_km.desc(), Flight.id.asc())
        .limit(limit)
    )
    return [FlightSummary.from_row(row) for row in session.execute(stmt)]


def top_takeoffs(session: Session, scope: Scope = GLOBAL, limit: int = 5) -> List[dict]:
    """
    Most used takeoffs within scope (e.g. favourite takeoffs of a wing).

    Flights without a takeoff are not counted.
    """
    flight_count = func.count(Flight.id).label('flight_count')
    stmt = (
        paraglider_flights(Takeoff.id, Takeoff.name, flight_count, scope=scope)
        .join(Takeoff, Flight.takeoff_id == Takeoff.id)
        .group_by(Takeoff.id, Takeoff.name)
        .order_by(flight_count.desc(), Takeoff.id.asc())
        .limit(limit)
    )
    return [
        {'id': row.id, 'name': row.name, 'flight_count': row.flight_count}
        for row in session.execute(stmt)
    ]


def top_gliders(session: Session, scope: Scope = GLOBAL, limit: int = 5) -> List[dict]:
    """Most used glider models within scope (e.g. at one takeoff)."""
    flight_count = func.count(Flight.id).label('flight_count')
    stmt = (
        paraglider_flights(Glider.id, Glider.name, Glider.category, flight_count, scope=scope)
        .group_by(Glider.id, Glider.name, Glider.category)
        .order_by(flight_count.desc(), Glider.id.asc())
        .limit(limit)
    )
    return [
        {
            'id': row.id,
            'name': row.name,
            'category': row.category,
            'flight_count': row.flight_count,
        }
        for row in session.execute(stmt)
    ]


def top_pilots(session: Session, scope: Scope = GLOBAL, limit: int = 5) -> List[dict]:
    """Pilots by total distance flown."""
    total_km = func.sum(Flight.distance_km).label('total_km')
    stmt = (
        paraglider_flights(
            Pilot.id,
            Pilot.name,
            Pilot.username,
            func.count(Flight.id).label('flight_count'),
            total_km,
            scope=scope,
        )
        .join(Pilot, Flight.pilot_id == Pilot.id)
        .group_by(Pilot.id, Pilot.name, Pilot.username)
        .order_by(total_km.desc(), Pilot.id.asc())
        .limit(limit)
    )
    return [
        {
            'id': row.id,
            'name': row.name,
            'username': row.username,
            'flight_count': row.flight_count,
            'total_km': round_half_up(row.total_km, 0),
        }
        for row in session.execute(stmt)
    ]


def wing_classes(session: Session, scope: Scope = GLOBAL) -> List[dict]:
    """Flights per glider category within scope, most used first."""
    flight_count = func.count(Flight.id).label('flight_count')
    stmt = (
        paraglider_flights(Glider.category, flight_count, scope=scope)
        .group_by(Glider.category)
        .order_by(flight_count.desc(), Glider.category.asc())
    )
    return [
        {'category': row.category, 'flight_count': row.flight_count}
        for row in session.execute(stmt)
    ]


def busiest_days(session: Session, scope: Scope = GLOBAL, limit: int = 5) -> List[dict]:
    """Days with the most distinct pilots in the air within scope."""
    day = flight_day().label('day')
    flight_count = func.count(Flight.id).label('flight_count')
    pilot_count = func.count(Flight.pilot_id.distinct()).label('pilot_count')
    stmt = (
        paraglider_flights(
            day,
            flight_count,
            pilot_count,
            func.max(Flight.distance_km).label('max_distance'),
            scope=scope,
        )
        .group_by(day)
        .order_by(pilot_count.desc(), flight_count.desc(), day.asc())
        .limit(limit)
    )
    return [
        {
            'day': as_date(row.day),
            'flight_count': row.flight_count,
            'pilot_count': row.pilot_count,
            'max_distance': round_half_up(row.max_distance, 1),
        }
        for row in session.execute(stmt)
    ]


def recent_notable_flights(
    session: Session,
    limit: int = 20,
    min_distance_km: float = 50.0,
    days: int = 30,
    now: datetime = None,
) -> List[FlightSummary]:
    """Longest flights over min_distance_km launched in the last `days` days."""
    now = now or datetime.now()
    stmt = (
        flight_summaries()
        .where(Flight.distance_km > min_distance_km)
        .where(Flight.start_time > now - timedelta(days=days))
        .order_by(Flight.distance_km.desc(), Flight.id.asc())
        .limit(limit)
    )
    flights = [FlightSummary.from_row(row) for row in session.execute(stmt)]
    logger.debug(f'{len(flights)} notable flights in the last {days} days')
    return flights
