"""
Database models for XC Stats.

Schema for a read-mostly flight log:
1. Flights as the single fact table
2. Pilots, takeoffs and gliders as dimensions
3. Indexes for per-entity dashboards and leaderboards
"""

from xcstats.models.base import (
    Base,
    engine,
    SessionLocal,
    create_db_engine,
    init_db,
    read_session,
    strip_accents,
)
from xcstats.models.glider import (
    Glider,
    GliderCategory,
    HANG_GLIDER_CATEGORIES,
    BEGINNER_CATEGORIES,
)
from xcstats.models.pilot import Pilot, Takeoff
from xcstats.models.flight import Flight

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'create_db_engine',
    'init_db',
    'read_session',
    'strip_accents',
    'Glider',
    'GliderCategory',
    'HANG_GLIDER_CATEGORIES',
    'BEGINNER_CATEGORIES',
    'Pilot',
    'Takeoff',
    'Flight',
]
