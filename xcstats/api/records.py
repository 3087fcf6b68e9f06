"""
Record endpoints.

- GET /api/records - All-time records plus best flight per category, year and takeoff
- GET /api/records/best - Best flight per partition (?by=category|year|takeoff&metric=distance|score|airtime)
- GET /api/records/fun - Superlatives (epic day, busiest day, ...)
"""

import logging

from flask import Blueprint, jsonify, request

from xcstats.api.base import Timer, api_session
from xcstats.errors import InvalidFilterError
from xcstats.queries.records import (
    PARTITION_KEYS,
    RECORD_METRICS,
    all_time_records,
    annual_records,
    best_per_partition,
    category_records,
    fun_stats,
    site_records,
)

logger = logging.getLogger(__name__)

records_bp = Blueprint('records', __name__, url_prefix='/api/records')


def _records_to_list(records) -> list:
    return [record.to_dict() for record in records]


@records_bp.route('', methods=['GET'])
def get_records():
    timer = Timer()
    with api_session() as session:
        result = {
            'all_time': all_time_records(session).to_dict(),
            'by_category': _records_to_list(category_records(session)),
            'by_year': _records_to_list(annual_records(session)),
            'by_takeoff': _records_to_list(site_records(session)),
        }

    result['query_time_ms'] = timer.elapsed_ms
    return jsonify(result)


@records_bp.route('/best', methods=['GET'])
def get_best_per_partition():
    """Best flight per partition for an arbitrary key/metric pair."""
    key = request.args.get('by', 'category')
    metric = request.args.get('metric', 'distance')
    if key not in PARTITION_KEYS:
        raise InvalidFilterError('by', key, f'expected one of {", ".join(PARTITION_KEYS)}')
    if metric not in RECORD_METRICS:
        raise InvalidFilterError('metric', metric, f'expected one of {", ".join(RECORD_METRICS)}')

    with api_session() as session:
        records = best_per_partition(session, key, metric)

    return jsonify({'by': key, 'metric': metric, 'records': _records_to_list(records)})


@records_bp.route('/fun', methods=['GET'])
def get_fun_stats():
    with api_session() as session:
        return jsonify(fun_stats(session))
