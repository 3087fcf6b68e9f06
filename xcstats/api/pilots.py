"""
Pilot endpoints.

- GET /api/pilots - All pilots with paraglider flights, by total distance
- GET /api/pilots/<username> - Pilot dashboard
"""

import logging

from flask import Blueprint, jsonify

from xcstats.api.base import Timer, api_session
from xcstats.queries import Scope
from xcstats.queries.entities import get_pilot_by_username, pilot_to_dict
from xcstats.queries.histogram import distance_histogram
from xcstats.queries.pilots import (
    equipment_timeline,
    favorite_takeoff,
    pilot_site_map,
    pilot_stats,
    pilots_list,
)
from xcstats.queries.rankings import top_flights
from xcstats.queries.records import annual_records
from xcstats.queries.timeseries import calendar_heatmap, monthly_stats, yearly_stats

logger = logging.getLogger(__name__)

pilots_bp = Blueprint('pilots', __name__, url_prefix='/api/pilots')


@pilots_bp.route('', methods=['GET'])
def list_pilots():
    timer = Timer()
    with api_session() as session:
        pilots = pilots_list(session)

    return jsonify({
        'pilots': pilots,
        'count': len(pilots),
        'query_time_ms': timer.elapsed_ms,
    })


@pilots_bp.route('/<username>', methods=['GET'])
def get_pilot_dashboard(username: str):
    timer = Timer()
    with api_session() as session:
        pilot = get_pilot_by_username(session, username)
        if pilot is None:
            return jsonify({'error': 'Pilot not found'}), 404

        scope = Scope(pilot_id=pilot.id)
        result = {
            'pilot': pilot_to_dict(pilot),
            'stats': pilot_stats(session, pilot.id),
            'favorite_takeoff': favorite_takeoff(session, pilot.id),
            'sites': pilot_site_map(session, pilot.id),
            'equipment': equipment_timeline(session, pilot.id),
            'heatmap': calendar_heatmap(session, scope),
            'monthly': monthly_stats(session, scope),
            'yearly': yearly_stats(session, scope),
            'histogram': distance_histogram(session, scope),
            'top_flights': [f.to_dict() for f in top_flights(session, scope)],
            'best_per_year': [r.to_dict() for r in annual_records(session, scope)],
        }

    result['query_time_ms'] = timer.elapsed_ms
    return jsonify(result)
