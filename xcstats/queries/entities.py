"""
Entity lookups by username, id or URL slug.

A miss returns None; deciding what a missing entity means is up to the
caller.
"""

import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from xcstats.models import Glider, Pilot, Takeoff, strip_accents

_SLUG_ID = re.compile(r'^(\d+)(?:-[a-z0-9-]*)?$')
_NON_ALNUM = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """'Sticlăria Peak' -> 'sticlaria-peak'."""
    return _NON_ALNUM.sub('-', strip_accents(text).lower()).strip('-')


def entity_slug(entity_id: int, name: str) -> str:
    """URL slug used for takeoffs and wings: '<id>-<slugified name>'."""
    return f'{entity_id}-{slugify(name)}'


def parse_entity_slug(slug: str) -> Optional[int]:
    """Id from '12-bunloc-launch' (or a bare '12'); None if malformed."""
    match = _SLUG_ID.match((slug or '').strip().lower())
    if not match:
        return None
    return int(match.group(1))


def get_pilot_by_username(session: Session, username: str) -> Optional[Pilot]:
    if not username:
        return None
    stmt = select(Pilot).where(Pilot.username == username)
    return session.execute(stmt).scalar_one_or_none()


def get_takeoff(session: Session, takeoff_id: Optional[int]) -> Optional[Takeoff]:
    if takeoff_id is None:
        return None
    return session.get(Takeoff, takeoff_id)


def get_wing(session: Session, glider_id: Optional[int]) -> Optional[Glider]:
    if glider_id is None:
        return None
    return session.get(Glider, glider_id)


def pilot_to_dict(pilot: Pilot) -> dict:
    return {'id': pilot.id, 'name': pilot.name, 'username': pilot.username}


def takeoff_to_dict(takeoff: Takeoff) -> dict:
    return {
        'id': takeoff.id,
        'name': takeoff.name,
        'slug': entity_slug(takeoff.id, takeoff.name),
        'lat': takeoff.latitude,
        'lng': takeoff.longitude,
    }


def wing_to_dict(glider: Glider) -> dict:
    return {
        'id': glider.id,
        'name': glider.name,
        'slug': entity_slug(glider.id, glider.name),
        'category': glider.category,
    }
