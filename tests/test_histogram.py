"""Tests for the distance histogram."""

import numpy as np

from xcstats.queries import Scope
from xcstats.queries.histogram import DISTANCE_BUCKETS, bucket_index, distance_histogram, histogram_counts

from conftest import PARAGLIDER_FLIGHT_COUNT


def test_bucket_bounds_are_lower_inclusive():
    distances = np.array([0.0, 0.99, 1.0, 4.99, 5.0, 20.0, 50.0, 99.9, 100.0, 1000.0])
    assert bucket_index(distances).tolist() == [0, 0, 1, 1, 2, 3, 4, 4, 5, 5]


def test_counts_always_have_every_bucket():
    assert histogram_counts([]).tolist() == [0] * len(DISTANCE_BUCKETS)
    assert histogram_counts([150.0]).tolist() == [0, 0, 0, 0, 0, 1]


def test_global_histogram(session):
    histogram = distance_histogram(session)
    assert [b['bucket'] for b in histogram] == ['0-1', '1-5', '5-20', '20-50', '50-100', '100+']
    assert [b['flight_count'] for b in histogram] == [0, 1, 2, 1, 2, 3]
    assert histogram[-1]['max_km'] is None


def test_counts_sum_to_scope_size(session):
    for scope in (Scope(), Scope(pilot_id=1), Scope(takeoff_id=1), Scope(glider_id=2)):
        histogram = distance_histogram(session, scope)
        total = sum(b['flight_count'] for b in histogram)
        if scope.is_global:
            assert total == PARAGLIDER_FLIGHT_COUNT
        assert len(histogram) == 6

    assert sum(b['flight_count'] for b in distance_histogram(session, Scope(pilot_id=1))) == 5
    assert sum(b['flight_count'] for b in distance_histogram(session, Scope(takeoff_id=1))) == 5
    assert sum(b['flight_count'] for b in distance_histogram(session, Scope(glider_id=2))) == 4


def test_hang_glider_scope_is_empty(session):
    histogram = distance_histogram(session, Scope(glider_id=4))
    assert all(b['flight_count'] == 0 for b in histogram)


def test_pilot_histogram(session):
    # Alice: 3.2, 10, 65, 80.5 and 120 km
    counts = {b['bucket']: b['flight_count'] for b in distance_histogram(session, Scope(pilot_id=1))}
    assert counts == {'0-1': 0, '1-5': 1, '5-20': 1, '20-50': 0, '50-100': 2, '100+': 1}
