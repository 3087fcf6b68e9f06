"""
XC Stats Backend Package.

Analytics over a paragliding flight log, built with Flask, SQLAlchemy, and NumPy.

Modules:
    api/         REST endpoints for flights, records and site/wing/pilot dashboards
    models/      SQLAlchemy ORM models (Flight, Pilot, Takeoff, Glider)
    queries/     Read-only query layer (filters, series, rankings, records, rollups)
    errors.py    Exceptions raised across the query and API layers
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
