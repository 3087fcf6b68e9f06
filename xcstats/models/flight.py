"""
Flight model - one logged cross-country flight.

This is the fact table every statistic is computed from. Rows are written
by the out-of-band import and never modified here.

Design notes:
- Takeoff is optional (some tracks have no recognised launch)
- Indexed for the per-pilot, per-site and per-wing dashboards
- start_time is the local launch time, naive
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from xcstats.models.base import Base
from xcstats.models.glider import Glider
from xcstats.models.pilot import Pilot, Takeoff


class Flight(Base):
    """
    A recorded flight.

    Distance, score and airtime are non-negative; score comes from the
    external scoring formula and is only ever used for ranking.
    """

    __tablename__ = 'flights'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        comment='Flight id from the source flight log'
    )

    pilot_id: Mapped[int] = mapped_column(
        ForeignKey('pilots.id'),
        nullable=False,
        index=True,
    )

    takeoff_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey('takeoffs.id'),
        nullable=True,
        index=True,
        comment='Launch site, NULL when not recognised'
    )

    glider_id: Mapped[int] = mapped_column(
        ForeignKey('gliders.id'),
        nullable=False,
        index=True,
    )

    start_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
        comment='Launch time'
    )

    type: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        default='',
        comment='Flight type label (e.g., free flight, FAI triangle)'
    )

    distance_km: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment='Scored distance in km'
    )

    score: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment='Points from the scoring formula'
    )

    airtime: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment='Flight duration in minutes'
    )

    url: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        default='',
        comment='Link to the flight on the source site'
    )

    pilot: Mapped[Pilot] = relationship(back_populates='flights')
    takeoff: Mapped[Optional[Takeoff]] = relationship(back_populates='flights')
    glider: Mapped[Glider] = relationship(back_populates='flights')

    __table_args__ = (
        # Leaderboards per site and per wing
        Index('ix_flights_takeoff_distance', 'takeoff_id', 'distance_km'),
        Index('ix_flights_glider_distance', 'glider_id', 'distance_km'),
    )

    def __repr__(self) -> str:
        return f'<Flight {self.id} {self.distance_km:.1f}km @ {self.start_time:%Y-%m-%d}>'
