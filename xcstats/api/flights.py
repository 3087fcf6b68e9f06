"""
Flight explorer and landing page endpoints.

- GET /api/flights - Filtered, sorted, paginated flight list
- GET /api/home - Headline stats, season heatmap and leaderboards
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from xcstats.api.base import Timer, api_session
from xcstats.queries import list_flights, parse_flight_query
from xcstats.queries.home import home_stats
from xcstats.queries.rankings import recent_notable_flights, top_pilots, top_takeoffs
from xcstats.queries.timeseries import calendar_heatmap

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')
home_bp = Blueprint('home', __name__, url_prefix='/api/home')


@flights_bp.route('', methods=['GET'])
def get_flights():
    """
    List paraglider flights.

    Query parameters:
    - pilot, takeoff: substring search, case and accent insensitive
      (also pilot_search, takeoff_search)
    - date_from, date_to: inclusive ISO dates (also dateFrom, dateTo)
    - dist_min, dist_max: inclusive kilometres (also distMin, distMax)
    - type: flight type substring (also flight_type)
    - category: glider category A, B, C, D, CCC or TANDEM (also glider_category)
    - sort_by or sort: date|distance|score|airtime|pilot|takeoff (default date)
    - sort_dir or dir: asc|desc (default desc)
    - page, page_size: 1-based page, size capped at MAX_PAGE_SIZE
    - preset: today|bestMonth|top100|club100k, overrides what it sets

    Malformed values answer 400 via the InvalidFilterError handler.
    """
    timer = Timer()
    query = parse_flight_query(request.args, current_app.config['XCSTATS'].query)

    with api_session() as session:
        page = list_flights(session, query)

    result = page.to_dict()
    result['sort_by'] = query.sort_by
    result['sort_dir'] = query.sort_dir
    result['query_time_ms'] = timer.elapsed_ms
    return jsonify(result)


@home_bp.route('', methods=['GET'])
def get_home():
    """Everything the landing page shows in one payload."""
    timer = Timer()
    with api_session() as session:
        result = {
            'stats': home_stats(session),
            'heatmap': calendar_heatmap(session),
            'top_pilots': top_pilots(session),
            'top_takeoffs': top_takeoffs(session),
            'recent_flights': [f.to_dict() for f in recent_notable_flights(session)],
        }

    result['query_time_ms'] = timer.elapsed_ms
    return jsonify(result)
