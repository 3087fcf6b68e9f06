"""
API module for XC Stats.

Provides REST endpoints for:
- Flight explorer and landing page
- Records and superlatives
- Takeoff, wing and pilot dashboards
"""

from xcstats.api.flights import flights_bp, home_bp
from xcstats.api.pilots import pilots_bp
from xcstats.api.records import records_bp
from xcstats.api.takeoffs import takeoffs_bp
from xcstats.api.wings import wings_bp

__all__ = ['flights_bp', 'home_bp', 'pilots_bp', 'records_bp', 'takeoffs_bp', 'wings_bp']
