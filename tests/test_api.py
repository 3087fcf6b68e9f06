"""Tests for the HTTP endpoints."""

import pytest
from sqlalchemy.orm import sessionmaker

from xcstats.app import create_app
from xcstats.config import AppConfig
from xcstats.models import create_db_engine

from conftest import PARAGLIDER_FLIGHT_COUNT, RECENT_FLIGHT_ID


@pytest.fixture
def unreachable_client(tmp_path):
    engine = create_db_engine(f'sqlite:///{tmp_path}/missing/dir/flights.db')
    app = create_app(AppConfig(), session_factory=sessionmaker(bind=engine))
    yield app.test_client()
    engine.dispose()


class TestFlightsEndpoint:

    def test_default_listing(self, client):
        response = client.get('/api/flights')
        assert response.status_code == 200
        data = response.get_json()
        assert data['total'] == PARAGLIDER_FLIGHT_COUNT
        assert data['page'] == 1
        assert data['sort_by'] == 'date'
        assert data['sort_dir'] == 'desc'
        assert data['items'][0]['id'] == RECENT_FLIGHT_ID
        assert 'query_time_ms' in data

    def test_filters_from_query_string(self, client):
        response = client.get('/api/flights?pilot_search=Bob&glider_category=D&dist_min=200&sort_by=distance')
        data = response.get_json()
        assert data['total'] == 2
        assert [item['id'] for item in data['items']] == [203, 201]

    def test_accent_insensitive_search(self, client):
        data = client.get('/api/flights?takeoff_search=Sticlaria').get_json()
        assert data['total'] == 2

    def test_unknown_sort_falls_back(self, client):
        data = client.get('/api/flights?sort_by=altitude').get_json()
        assert data['sort_by'] == 'date'

    def test_paging(self, client):
        data = client.get('/api/flights?page=2&page_size=4').get_json()
        assert len(data['items']) == 4
        assert data['page_count'] == 3

    @pytest.mark.parametrize('query', ['dist_min=far', 'date_from=yesterday', 'glider_category=Z', 'page=x'])
    def test_malformed_parameters_are_rejected(self, client, query):
        response = client.get(f'/api/flights?{query}')
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_short_parameter_names(self, client):
        assert client.get('/api/flights?pilot=Bob').get_json()['total'] == 3
        assert client.get('/api/flights?category=D').get_json()['total'] == 4
        assert client.get('/api/flights?type=triangle').get_json()['total'] == 2
        assert client.get('/api/flights?takeoff=sticlaria').get_json()['total'] == 2

    def test_short_sort_names(self, client):
        data = client.get('/api/flights?pilot=Bob&sort=distance&dir=asc').get_json()
        assert data['sort_by'] == 'distance'
        assert data['sort_dir'] == 'asc'
        assert [item['id'] for item in data['items']] == [202, 201, 203]

    def test_club100k_preset(self, client):
        data = client.get('/api/flights?preset=club100k&dist_min=5').get_json()
        assert data['total'] == 3
        assert data['sort_by'] == 'distance'
        assert [item['id'] for item in data['items']] == [203, 201, 101]

    def test_unknown_preset_is_rejected(self, client):
        response = client.get('/api/flights?preset=everything')
        assert response.status_code == 400

    def test_cors_headers(self, client):
        response = client.get('/api/flights', headers={'Origin': 'http://example.com'})
        assert response.headers.get('Access-Control-Allow-Origin') in ('*', 'http://example.com')


class TestDashboards:

    def test_home(self, client):
        data = client.get('/api/home').get_json()
        assert data['stats']['total_flights'] == PARAGLIDER_FLIGHT_COUNT
        assert [f['id'] for f in data['recent_flights']] == [RECENT_FLIGHT_ID]
        assert data['top_pilots'][0]['username'] == 'bob.popescu'

    def test_records(self, client):
        data = client.get('/api/records').get_json()
        assert data['all_time']['longest']['id'] == 203
        assert [r['partition'] for r in data['by_category']] == ['B', 'C', 'D']

    def test_best_per_partition(self, client):
        data = client.get('/api/records/best?by=takeoff&metric=score').get_json()
        assert [r['id'] for r in data['records']] == [203, 202, 301]

    def test_best_per_partition_rejects_unknown_metric(self, client):
        assert client.get('/api/records/best?metric=altitude').status_code == 400

    def test_fun_stats_dates_are_iso(self, client):
        data = client.get('/api/records/fun').get_json()
        assert data['epic_day']['day'] == '2022-07-08'
        assert data['busiest_day']['day'] == '2022-06-10'

    def test_takeoffs(self, client):
        data = client.get('/api/takeoffs').get_json()
        assert data['count'] == 3
        assert data['takeoffs'][0]['name'] == 'Bunloc Launch'

    def test_takeoff_dashboard(self, client):
        data = client.get('/api/takeoffs/2-sticlaria-peak').get_json()
        assert data['takeoff']['slug'] == '2-sticlaria-peak'
        assert len(data['monthly']) == 12
        assert len(data['hourly']) == 24
        assert len(data['day_of_week']) == 7
        assert sum(b['flight_count'] for b in data['histogram']) == 2
        assert [f['id'] for f in data['top_flights']] == [202, 103]

    @pytest.mark.parametrize('slug', ['99-nowhere', 'not-a-slug'])
    def test_unknown_takeoff(self, client, slug):
        response = client.get(f'/api/takeoffs/{slug}')
        assert response.status_code == 404

    def test_wings(self, client):
        data = client.get('/api/wings').get_json()
        assert [w['id'] for w in data['wings']] == [2, 1, 3, 5]

    def test_wing_dashboard(self, client):
        data = client.get('/api/wings/2-ozone-enzo-3').get_json()
        assert data['wing']['category'] == 'D'
        assert data['top_flights'][0]['id'] == 203
        assert [(cell['year'], cell['month']) for cell in data['heatmap']][:3] == [(2022, 6), (2022, 7), (2023, 7)]
        assert sum(cell['flight_count'] for cell in data['heatmap']) == 4

    def test_hang_glider_has_no_dashboard(self, client):
        assert client.get('/api/wings/4-moyes-litespeed').status_code == 404

    def test_pilots(self, client):
        data = client.get('/api/pilots').get_json()
        assert data['count'] == 3

    def test_pilot_dashboard(self, client):
        data = client.get('/api/pilots/alice.ionescu').get_json()
        assert data['pilot']['name'] == 'Alice Ionescu'
        assert data['stats']['total_flights'] == 5
        assert data['favorite_takeoff']['id'] == 1
        assert [g['id'] for g in data['equipment']] == [1, 2, 3]

    def test_unknown_pilot(self, client):
        response = client.get('/api/pilots/nobody')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Pilot not found'}

    def test_unknown_route(self, client):
        assert client.get('/api/nothing-here').status_code == 404


class TestHealthEndpoint:

    def test_ok(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok', 'empty': False}

    def test_unreachable_store(self, unreachable_client):
        response = unreachable_client.get('/health')
        assert response.status_code == 503
        assert response.get_json() == {'status': 'error'}

    def test_api_answers_503_when_store_is_down(self, unreachable_client):
        response = unreachable_client.get('/api/flights')
        assert response.status_code == 503
