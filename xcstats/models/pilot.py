"""
Pilot and Takeoff models - the people and places flights refer to.
"""

from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import String, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from xcstats.models.base import Base

if TYPE_CHECKING:
    from xcstats.models.flight import Flight


class Pilot(Base):
    """A pilot, addressed publicly by username."""

    __tablename__ = 'pilots'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment='Surrogate key'
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment='Display name'
    )

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment='Unique username used in URLs and search'
    )

    flights: Mapped[List['Flight']] = relationship(back_populates='pilot')

    def __repr__(self) -> str:
        return f'<Pilot {self.id} {self.username}>'


class Takeoff(Base):
    """
    A launch site.

    The position is the centroid of recorded launch points, WGS84.
    """

    __tablename__ = 'takeoffs'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment='Surrogate key'
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment='Site name'
    )

    latitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment='Latitude in decimal degrees'
    )

    longitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment='Longitude in decimal degrees'
    )

    flights: Mapped[List['Flight']] = relationship(back_populates='takeoff')

    def __repr__(self) -> str:
        return f'<Takeoff {self.id} {self.name}>'
