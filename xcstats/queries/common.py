"""
Building blocks shared by every query module.

- Scope: restricts a query to one pilot, takeoff or wing
- paraglider_flights(): the base SELECT with the standing hang-glider
  exclusion applied
- FlightSummary: the row shape used by listings, leaderboards and records
- Rounding and zero-fill helpers
"""

from dataclasses import dataclass, asdict
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

import numpy as np
from sqlalchemy import Integer, Select, cast, extract, func, select
from sqlalchemy.sql.elements import ColumnElement

from xcstats.models import Flight, Glider, Pilot, Takeoff, HANG_GLIDER_CATEGORIES


@dataclass(frozen=True)
class Scope:
    """
    Restriction of a dashboard query to a subset of flights.

    All fields None is the global scope. Set fields are AND-combined.
    """
    pilot_id: Optional[int] = None
    takeoff_id: Optional[int] = None
    glider_id: Optional[int] = None

    def conditions(self) -> List[ColumnElement]:
        conditions = []
        if self.pilot_id is not None:
            conditions.append(Flight.pilot_id == self.pilot_id)
        if self.takeoff_id is not None:
            conditions.append(Flight.takeoff_id == self.takeoff_id)
        if self.glider_id is not None:
            conditions.append(Flight.glider_id == self.glider_id)
        return conditions

    @property
    def is_global(self) -> bool:
        return not self.conditions()

    def __str__(self) -> str:
        if self.is_global:
            return 'all flights'
        parts = [
            f'{name}={value}'
            for name, value in (
                ('pilot', self.pilot_id),
                ('takeoff', self.takeoff_id),
                ('glider', self.glider_id),
            )
            if value is not None
        ]
        return ', '.join(parts)


GLOBAL = Scope()


def paraglider_only() -> ColumnElement:
    """The standing filter: hang-glider flights never reach the statistics."""
    return Glider.category.notin_(HANG_GLIDER_CATEGORIES)


def paraglider_flights(*columns, scope: Scope = GLOBAL) -> Select:
    """
    SELECT <columns> FROM flights JOIN gliders, restricted to paragliders
    and to the given scope.
    """
    stmt = (
        select(*columns)
        .select_from(Flight)
        .join(Glider, Flight.glider_id == Glider.id)
        .where(paraglider_only())
    )
    for condition in scope.conditions():
        stmt = stmt.where(condition)
    return stmt


def flights_with_details(*columns, scope: Scope = GLOBAL) -> Select:
    """Same as paraglider_flights() with pilot and (optional) takeoff joined."""
    return (
        paraglider_flights(*columns, scope=scope)
        .join(Pilot, Flight.pilot_id == Pilot.id)
        .outerjoin(Takeoff, Flight.takeoff_id == Takeoff.id)
    )


SUMMARY_COLUMNS = (
    Flight.id.label('id'),
    Flight.start_time.label('start_time'),
    Flight.distance_km.label('distance_km'),
    Flight.score.label('score'),
    Flight.airtime.label('airtime'),
    Flight.type.label('type'),
    Flight.url.label('url'),
    Pilot.id.label('pilot_id'),
    Pilot.name.label('pilot_name'),
    Pilot.username.label('pilot_username'),
    Flight.takeoff_id.label('takeoff_id'),
    Takeoff.name.label('takeoff_name'),
    Glider.id.label('glider_id'),
    Glider.name.label('glider_name'),
    Glider.category.label('glider_category'),
)


def flight_summaries(*extra_columns, scope: Scope = GLOBAL) -> Select:
    """SELECT of FlightSummary rows, optionally with extra trailing columns."""
    return flights_with_details(*SUMMARY_COLUMNS, *extra_columns, scope=scope)


@dataclass
class FlightSummary:
    """One flight with its pilot, takeoff and glider denormalized."""
    id: int
    start_time: datetime
    distance_km: float
    score: float
    airtime: int
    type: str
    url: str
    pilot_id: int
    pilot_name: str
    pilot_username: str
    takeoff_id: Optional[int]
    takeoff_name: Optional[str]
    glider_id: int
    glider_name: str
    glider_category: str

    @classmethod
    def from_row(cls, row) -> 'FlightSummary':
        m = row._mapping
        return cls(**{name: m[name] for name in cls.__dataclass_fields__})

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        data = asdict(self)
        data['start_time'] = self.start_time.isoformat() if self.start_time else None
        return data


# -------------------------------------------------------------------------
# Expression helpers
# -------------------------------------------------------------------------

def date_part(field: str, column=None) -> ColumnElement:
    """
    Integer calendar component of the launch time.

    field is one of 'year', 'month', 'hour', 'dow' (0=Sunday..6=Saturday).
    """
    column = Flight.start_time if column is None else column
    return cast(extract(field, column), Integer)


def flight_day() -> ColumnElement:
    """Calendar day of the launch time."""
    return func.date(Flight.start_time)


def as_date(value) -> Optional[date]:
    """Normalise a DATE result (SQLite hands back ISO strings)."""
    if value is None or type(value) is date:
        return value
    if isinstance(value, datetime):
        return value.date()
    return date.fromisoformat(str(value))


def as_datetime(value) -> Optional[datetime]:
    """Normalise an aggregated timestamp (MAX() over SQLite loses the type)."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


# -------------------------------------------------------------------------
# Numeric helpers
# -------------------------------------------------------------------------

def round_half_up(value, digits: int = 1) -> Optional[float]:
    """Round like SQL NUMERIC rounding (half away from zero)."""
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(part, whole) -> Optional[int]:
    """Integer percentage, None for an empty population."""
    if not whole:
        return None
    ratio = Decimal(100) * Decimal(int(part or 0)) / Decimal(int(whole))
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def zero_filled(rows: Iterable[Tuple[int, int]], start: int, size: int) -> np.ndarray:
    """
    Materialize a fixed domain [start, start + size) and overlay counts.

    rows are (key, count) pairs; keys outside the domain are ignored.
    """
    counts = np.zeros(size, dtype=np.int64)
    pairs = [(key, count) for key, count in rows if key is not None]
    if pairs:
        keys = np.array([key for key, _ in pairs], dtype=np.int64) - start
        values = np.array([count for _, count in pairs], dtype=np.int64)
        in_domain = (keys >= 0) & (keys < size)
        counts[keys[in_domain]] = values[in_domain]
    return counts
