"""
Shared fixtures: an in-memory SQLite database seeded with a small flight log.

Seeded paraglider flights (302 is a hang-glider flight and is never counted):

    id   pilot    takeoff    start               type           km     glider
    101  Alice    Bunloc     2023-07-15 10:00    free flight    120.0  Enzo 3 (D)
    102  Alice    Bunloc     2023-07-16 11:00    FAI triangle    80.5  Sigma 11 (B)
    103  Alice    Sticlaria  2023-08-01 09:30    free flight      3.2  Atlas 2 (B)
    104  Alice    Bunloc     now - 5 days        free flight     65.0  Enzo 3 (D)
    105  Alice    -          2023-06-01 13:00    free flight     10.0  Sigma 11 (B)
    201  Bob      Bunloc     2022-06-10 14:00    free flight    250.0  Enzo 3 (D)
    202  Bob      Sticlaria  2024-03-20 12:00    flat triangle   45.0  Mentor 7 (C)
    203  Bob      Bunloc     2022-07-08 10:00    free flight    310.0  Enzo 3 (D)
    301  Charlie  Brasov     2023-09-05 08:00    free flight     15.0  Sigma 11 (B)
    302  Charlie  Bunloc     2023-09-06 08:00    free flight     30.0  Litespeed (HG)
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from xcstats.config import AppConfig
from xcstats.models import Flight, Glider, Pilot, Takeoff, create_db_engine, init_db

PARAGLIDER_FLIGHT_COUNT = 9
HANG_GLIDER_FLIGHT_ID = 302
RECENT_FLIGHT_ID = 104


def seed_standard_data(session, now: datetime) -> None:
    session.add_all([
        Pilot(id=1, name='Alice Ionescu', username='alice.ionescu'),
        Pilot(id=2, name='Bob Popescu', username='bob.popescu'),
        Pilot(id=3, name='Charlie Marinescu', username='charlie.m'),
    ])
    session.add_all([
        Takeoff(id=1, name='Bunloc Launch', latitude=45.6, longitude=25.5),
        Takeoff(id=2, name='Sticlăria Peak', latitude=46.1, longitude=24.8),
        Takeoff(id=3, name='Brașov Nord', latitude=45.7, longitude=25.6),
    ])
    session.add_all([
        Glider(id=1, name='Advance Sigma 11', category='B'),
        Glider(id=2, name='Ozone Enzo 3', category='D'),
        Glider(id=3, name='Gin Atlas 2', category='B'),
        Glider(id=4, name='Moyes Litespeed', category='HG'),
        Glider(id=5, name='Nova Mentor 7', category='C'),
    ])
    session.flush()

    recent = (now - timedelta(days=5)).replace(microsecond=0)
    rows = [
        (101, 1, 1, datetime(2023, 7, 15, 10, 0), 'free flight', 120.0, 100.0, 300, 2),
        (102, 1, 1, datetime(2023, 7, 16, 11, 0), 'FAI triangle', 80.5, 70.0, 240, 1),
        (103, 1, 2, datetime(2023, 8, 1, 9, 30), 'free flight', 3.2, 2.0, 30, 3),
        (201, 2, 1, datetime(2022, 6, 10, 14, 0), 'free flight', 250.0, 200.0, 480, 2),
        (202, 2, 2, datetime(2024, 3, 20, 12, 0), 'flat triangle', 45.0, 35.0, 120, 5),
        (301, 3, 3, datetime(2023, 9, 5, 8, 0), 'free flight', 15.0, 10.0, 60, 1),
        (302, 3, 1, datetime(2023, 9, 6, 8, 0), 'free flight', 30.0, 20.0, 90, 4),
        (104, 1, 1, recent, 'free flight', 65.0, 55.0, 200, 2),
        (203, 2, 1, datetime(2022, 7, 8, 10, 0), 'free flight', 310.0, 280.0, 540, 2),
        (105, 1, None, datetime(2023, 6, 1, 13, 0), 'free flight', 10.0, 8.0, 45, 1),
    ]
    session.add_all([
        Flight(
            id=flight_id,
            pilot_id=pilot_id,
            takeoff_id=takeoff_id,
            start_time=start_time,
            type=flight_type,
            distance_km=distance_km,
            score=score,
            airtime=airtime,
            glider_id=glider_id,
            url=f'https://xcontest.org/{flight_id}',
        )
        for flight_id, pilot_id, takeoff_id, start_time, flight_type, distance_km, score, airtime, glider_id in rows
    ])
    session.commit()


@pytest.fixture
def engine():
    """Fresh in-memory database shared by every connection of the test."""
    engine = create_db_engine('sqlite://', poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def now():
    return datetime.now()


@pytest.fixture
def seeded_factory(session_factory, now):
    with session_factory() as session:
        seed_standard_data(session, now)
    return session_factory


@pytest.fixture
def session(seeded_factory):
    """Session over the seeded flight log."""
    with seeded_factory() as session:
        yield session


@pytest.fixture
def empty_session(session_factory):
    """Session over an empty schema."""
    with session_factory() as session:
        yield session


@pytest.fixture
def app(seeded_factory):
    from xcstats.app import create_app

    app = create_app(AppConfig(), session_factory=seeded_factory)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
