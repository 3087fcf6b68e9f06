"""Tests for pilot dashboards, entity lookups and home stats."""

from datetime import datetime

import pytest

from xcstats.models import Flight, Pilot
from xcstats.queries.entities import (
    entity_slug,
    get_pilot_by_username,
    get_takeoff,
    get_wing,
    parse_entity_slug,
    slugify,
)
from xcstats.queries.home import home_stats
from xcstats.queries.pilots import (
    equipment_timeline,
    favorite_takeoff,
    pilot_site_map,
    pilot_stats,
    pilots_list,
)


class TestPilotsList:

    def test_ordered_by_total_distance(self, session):
        pilots = pilots_list(session)
        assert [p['username'] for p in pilots] == ['bob.popescu', 'alice.ionescu', 'charlie.m']

    def test_bob(self, session):
        bob = pilots_list(session)[0]
        assert bob['flight_count'] == 3
        assert bob['total_km'] == 605.0
        assert bob['total_score'] == 515.0
        assert bob['max_distance'] == 310.0
        assert bob['active_years'] == 2
        assert bob['last_flight'] == datetime(2024, 3, 20, 12, 0)
        assert bob['fav_takeoff_id'] == 1

    def test_favorite_ignores_hang_glider_flights(self, session):
        charlie = pilots_list(session)[-1]
        assert charlie['flight_count'] == 1
        assert charlie['fav_takeoff_name'] == 'Brașov Nord'

    def test_pilot_without_paraglider_flights_is_not_listed(self, session):
        session.add(Pilot(id=4, name='Dana Hang', username='dana.h'))
        session.add(Flight(
            id=600, pilot_id=4, takeoff_id=1, glider_id=4,
            start_time=datetime(2023, 5, 5, 12, 0), type='free flight',
            distance_km=50.0, score=40.0, airtime=120, url='',
        ))
        session.commit()
        assert 'dana.h' not in [p['username'] for p in pilots_list(session)]
        assert home_stats(session)['total_pilots'] == 3


class TestPilotDashboard:

    def test_pilot_stats(self, session):
        stats = pilot_stats(session, 1)
        assert stats['total_flights'] == 5
        assert stats['total_km'] == 279.0
        assert stats['max_distance'] == 120.0
        assert stats['avg_distance'] == 55.7
        assert stats['active_since'] == 2023

    def test_pilot_stats_without_flights(self, session):
        session.add(Pilot(id=5, name='New Pilot', username='new.pilot'))
        session.commit()
        stats = pilot_stats(session, 5)
        assert stats['total_flights'] == 0
        assert stats['total_km'] is None
        assert stats['last_flight'] is None

    def test_favorite_takeoff(self, session):
        assert favorite_takeoff(session, 1) == {'id': 1, 'name': 'Bunloc Launch', 'flight_count': 3}
        assert favorite_takeoff(session, 99) is None

    def test_site_map(self, session):
        sites = pilot_site_map(session, 1)
        assert [(s['id'], s['flight_count']) for s in sites] == [(1, 3), (2, 1)]
        assert sites[0]['lat'] == 45.6
        assert sites[0]['lng'] == 25.5

    def test_equipment_timeline(self, session):
        timeline = equipment_timeline(session, 1)
        assert [g['id'] for g in timeline] == [1, 2, 3]
        assert timeline[0]['first_used'] == datetime(2023, 6, 1, 13, 0)
        assert timeline[0]['last_used'] == datetime(2023, 7, 16, 11, 0)
        assert timeline[1]['flight_count'] == 2


class TestEntities:

    @pytest.mark.parametrize('text, expected', [
        ('Sticlăria Peak', 'sticlaria-peak'),
        ('Brașov Nord', 'brasov-nord'),
        ('  Ozone Enzo 3 ', 'ozone-enzo-3'),
    ])
    def test_slugify(self, text, expected):
        assert slugify(text) == expected

    def test_entity_slug(self):
        assert entity_slug(2, 'Sticlăria Peak') == '2-sticlaria-peak'

    @pytest.mark.parametrize('slug, expected', [
        ('12-bunloc', 12),
        ('12', 12),
        ('3-brasov-nord', 3),
        ('bunloc', None),
        ('12abc', None),
        ('', None),
        (None, None),
    ])
    def test_parse_entity_slug(self, slug, expected):
        assert parse_entity_slug(slug) == expected

    def test_lookups(self, session):
        assert get_pilot_by_username(session, 'bob.popescu').name == 'Bob Popescu'
        assert get_pilot_by_username(session, 'nobody') is None
        assert get_takeoff(session, 2).name == 'Sticlăria Peak'
        assert get_takeoff(session, 99) is None
        assert get_takeoff(session, None) is None
        assert get_wing(session, 4).category == 'HG'
        assert get_wing(session, 99) is None


class TestHomeStats:

    def test_totals(self, session, now):
        stats = home_stats(session, now=now)
        assert stats == {
            'total_flights': 9,
            'total_pilots': 3,
            'active_takeoffs': 1,
            'total_km': 899.0,
        }

    def test_empty_store(self, empty_session):
        assert home_stats(empty_session) == {
            'total_flights': 0,
            'total_pilots': 0,
            'active_takeoffs': 0,
            'total_km': 0.0,
        }
