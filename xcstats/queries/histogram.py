"""
Distance distribution over fixed, non-uniform buckets.

Buckets are [0,1) [1,5) [5,20) [20,50) [50,100) [100,inf). All six are
always returned so chart axes stay stable across scopes.
"""

import logging
from typing import List

import numpy as np
from sqlalchemy.orm import Session

from xcstats.models import Flight
from xcstats.queries.common import GLOBAL, Scope, paraglider_flights

logger = logging.getLogger(__name__)

# (label, lower bound inclusive, upper bound exclusive)
DISTANCE_BUCKETS = (
    ('0-1', 0.0, 1.0),
    ('1-5', 1.0, 5.0),
    ('5-20', 5.0, 20.0),
    ('20-50', 20.0, 50.0),
    ('50-100', 50.0, 100.0),
    ('100+', 100.0, None),
)

_UPPER_BOUNDS = np.array([upper for _, _, upper in DISTANCE_BUCKETS[:-1]], dtype=np.float64)


def bucket_index(distances: np.ndarray) -> np.ndarray:
    """Index of the first bucket whose upper bound exceeds each distance."""
    return np.searchsorted(_UPPER_BOUNDS, distances, side='right')


def histogram_counts(distances) -> np.ndarray:
    """Count distances per bucket; always len(DISTANCE_BUCKETS) entries."""
    values = np.asarray(distances, dtype=np.float64)
    return np.bincount(bucket_index(values), minlength=len(DISTANCE_BUCKETS))


def distance_histogram(session: Session, scope: Scope = GLOBAL) -> List[dict]:
    """
    Flight count per distance bucket within scope.

    Returns [{bucket, min_km, max_km, flight_count}] in ascending order;
    counts sum to the number of flights in scope.
    """
    stmt = paraglider_flights(Flight.distance_km, scope=scope)
    distances = np.fromiter(session.execute(stmt).scalars(), dtype=np.float64)
    counts = histogram_counts(distances)

    logger.debug(f'Distance histogram for {scope}: {len(distances)} flights')
    return [
        {
            'bucket': label,
            'min_km': lower,
            'max_km': upper,
            'flight_count': int(count),
        }
        for (label, lower, upper), count in zip(DISTANCE_BUCKETS, counts)
    ]
