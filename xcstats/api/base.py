"""
Helpers shared by the API blueprints.
"""

import time
from contextlib import contextmanager

from flask import current_app

from xcstats.models import read_session


@contextmanager
def api_session():
    """Read-only session from the app's configured session factory."""
    with read_session(current_app.config['SESSION_FACTORY']) as session:
        yield session


class Timer:
    """Measures request time for the query_time_ms response field."""

    def __init__(self):
        self.start = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.start) * 1000, 2)
