"""
Wing (glider model) endpoints.

- GET /api/wings - Rollup of every paraglider wing with flights
- GET /api/wings/<slug> - Wing dashboard, slug is '<id>-<name>'
"""

import logging

from flask import Blueprint, jsonify

from xcstats.api.base import Timer, api_session
from xcstats.queries import Scope
from xcstats.queries.entities import get_wing, parse_entity_slug, wing_to_dict
from xcstats.queries.histogram import distance_histogram
from xcstats.queries.rankings import top_flights, top_pilots, top_takeoffs
from xcstats.queries.rollups import wing_summaries
from xcstats.queries.timeseries import calendar_heatmap, monthly_stats, yearly_stats

logger = logging.getLogger(__name__)

wings_bp = Blueprint('wings', __name__, url_prefix='/api/wings')


@wings_bp.route('', methods=['GET'])
def list_wings():
    timer = Timer()
    with api_session() as session:
        wings = [summary.to_dict() for summary in wing_summaries(session)]

    return jsonify({
        'wings': wings,
        'count': len(wings),
        'query_time_ms': timer.elapsed_ms,
    })


@wings_bp.route('/<slug>', methods=['GET'])
def get_wing_dashboard(slug: str):
    """Wing page. Hang gliders have no dashboard and answer 404."""
    timer = Timer()
    glider_id = parse_entity_slug(slug)

    with api_session() as session:
        glider = get_wing(session, glider_id)
        if glider is None or not glider.is_paraglider:
            return jsonify({'error': 'Wing not found'}), 404

        scope = Scope(glider_id=glider.id)
        result = {
            'wing': wing_to_dict(glider),
            'heatmap': calendar_heatmap(session, scope),
            'yearly': yearly_stats(session, scope),
            'monthly': monthly_stats(session, scope),
            'histogram': distance_histogram(session, scope),
            'top_flights': [f.to_dict() for f in top_flights(session, scope)],
            'top_pilots': top_pilots(session, scope),
            'top_takeoffs': top_takeoffs(session, scope),
        }

    result['query_time_ms'] = timer.elapsed_ms
    return jsonify(result)
