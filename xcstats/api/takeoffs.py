"""
Takeoff (site) endpoints.

- GET /api/takeoffs - Rollup of every takeoff
- GET /api/takeoffs/<slug> - Site dashboard, slug is '<id>-<name>'
"""

import logging

from flask import Blueprint, jsonify

from xcstats.api.base import Timer, api_session
from xcstats.queries import Scope
from xcstats.queries.entities import get_takeoff, parse_entity_slug, takeoff_to_dict
from xcstats.queries.histogram import distance_histogram
from xcstats.queries.rankings import busiest_days, top_flights, top_gliders, top_pilots, wing_classes
from xcstats.queries.rollups import takeoff_summaries
from xcstats.queries.timeseries import (
    calendar_heatmap,
    day_of_week_distribution,
    hourly_distribution,
    monthly_stats,
    yearly_stats,
)

logger = logging.getLogger(__name__)

takeoffs_bp = Blueprint('takeoffs', __name__, url_prefix='/api/takeoffs')


@takeoffs_bp.route('', methods=['GET'])
def list_takeoffs():
    timer = Timer()
    with api_session() as session:
        takeoffs = [summary.to_dict() for summary in takeoff_summaries(session)]

    return jsonify({
        'takeoffs': takeoffs,
        'count': len(takeoffs),
        'query_time_ms': timer.elapsed_ms,
    })


@takeoffs_bp.route('/<slug>', methods=['GET'])
def get_takeoff_dashboard(slug: str):
    """
    Everything the site page shows: activity series, distance histogram,
    leaderboards and the wings flown there.
    """
    timer = Timer()
    takeoff_id = parse_entity_slug(slug)

    with api_session() as session:
        takeoff = get_takeoff(session, takeoff_id)
        if takeoff is None:
            return jsonify({'error': 'Takeoff not found'}), 404

        scope = Scope(takeoff_id=takeoff.id)
        result = {
            'takeoff': takeoff_to_dict(takeoff),
            'heatmap': calendar_heatmap(session, scope),
            'monthly': monthly_stats(session, scope),
            'hourly': hourly_distribution(session, scope),
            'day_of_week': day_of_week_distribution(session, scope),
            'yearly': yearly_stats(session, scope),
            'histogram': distance_histogram(session, scope),
            'top_flights': [f.to_dict() for f in top_flights(session, scope)],
            'top_pilots': top_pilots(session, scope),
            'top_gliders': top_gliders(session, scope),
            'wing_classes': wing_classes(session, scope),
            'busiest_days': busiest_days(session, scope),
        }

    result['query_time_ms'] = timer.elapsed_ms
    return jsonify(result)
