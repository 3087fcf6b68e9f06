"""
Liveness probe for the data store.

Reports "reachable" and "has data" separately: an empty flights table is
healthy, an unreachable store is not.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from xcstats.models import Flight

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthStatus:
    ok: bool
    empty: bool = False

    def to_dict(self) -> dict:
        if not self.ok:
            return {'status': 'error'}
        return {'status': 'ok', 'empty': self.empty}


def check_health(session: Session) -> HealthStatus:
    """Round-trip SELECT 1, then check whether any flight exists."""
    try:
        session.execute(text('SELECT 1'))
        has_flights = session.execute(select(Flight.id).limit(1)).first() is not None
    except SQLAlchemyError as e:
        logger.error(f'Health check failed: {e}')
        return HealthStatus(ok=False)
    return HealthStatus(ok=True, empty=not has_flights)
