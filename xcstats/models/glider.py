"""
Glider model - wing reference data with its performance category.

Gliders are identified by their unique model name (e.g. 'Ozone Enzo 3').
The category partitions gliders for category-scoped aggregates and records,
and also decides whether a flight counts towards the paraglider statistics.
"""

from enum import Enum
from typing import List, TYPE_CHECKING

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from xcstats.models.base import Base

if TYPE_CHECKING:
    from xcstats.models.flight import Flight


class GliderCategory(str, Enum):
    """
    Skill/performance class of a glider.

    Paragliders follow the EN certification classes (A easiest to D),
    plus CCC competition wings and tandems. Hang gliders are split into
    flex-wing (HG) and rigid-wing (RIGID) classes.
    """
    A = 'A'
    B = 'B'
    C = 'C'
    D = 'D'
    CCC = 'CCC'
    TANDEM = 'TANDEM'
    HG = 'HG'
    RIGID = 'RIGID'


# Excluded from every headline statistic
HANG_GLIDER_CATEGORIES = (GliderCategory.HG.value, GliderCategory.RIGID.value)

# Low-performance wings counted by the "beginner share" metrics
BEGINNER_CATEGORIES = (GliderCategory.A.value, GliderCategory.B.value)


class Glider(Base):
    """
    A wing model as declared by pilots in their flight logs.

    Fields:
        id: Surrogate key
        name: Unique model name
        category: GliderCategory value, stored as its string
    """

    __tablename__ = 'gliders'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment='Surrogate key'
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment='Wing model name (e.g., Ozone Enzo 3)'
    )

    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment='Performance class (A, B, C, D, CCC, TANDEM, HG, RIGID)'
    )

    flights: Mapped[List['Flight']] = relationship(back_populates='glider')

    def __repr__(self) -> str:
        return f'<Glider {self.id} {self.name} ({self.category})>'

    @property
    def is_paraglider(self) -> bool:
        return self.category not in HANG_GLIDER_CATEGORIES
