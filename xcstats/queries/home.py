"""Headline numbers for the landing page."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from xcstats.models import Flight
from xcstats.queries.common import paraglider_flights, round_half_up

logger = logging.getLogger(__name__)

ACTIVE_TAKEOFF_WINDOW = timedelta(days=365)


def home_stats(session: Session, now: datetime = None) -> dict:
    """
    Total flights, pilots and distance, plus the takeoffs used in the last
    year. Pilots who only ever flew hang gliders are not counted.
    """
    now = now or datetime.now()
    totals = session.execute(
        paraglider_flights(
            func.count(Flight.id).label('total_flights'),
            func.count(Flight.pilot_id.distinct()).label('total_pilots'),
            func.sum(Flight.distance_km).label('total_km'),
        )
    ).one()

    active_takeoffs = session.execute(
        paraglider_flights(func.count(Flight.takeoff_id.distinct()))
        .where(Flight.start_time >= now - ACTIVE_TAKEOFF_WINDOW)
    ).scalar_one()

    stats = {
        'total_flights': totals.total_flights,
        'total_pilots': totals.total_pilots,
        'active_takeoffs': active_takeoffs,
        'total_km': round_half_up(totals.total_km or 0, 0),
    }
    logger.debug(f'Home stats: {stats}')
    return stats
