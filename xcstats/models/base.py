"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Designed to be portable between SQLite (dev, tests) and PostgreSQL (prod).
The query layer only ever reads through these sessions.
"""

import logging
import unicodedata
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, exc, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from xcstats.config import config, DatabaseConfig
from xcstats.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def strip_accents(value: Optional[str]) -> Optional[str]:
    """Remove combining diacritics ('Sticlăria' -> 'Sticlaria')."""
    if value is None:
        return None
    decomposed = unicodedata.normalize('NFD', value)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Configure each SQLite connection.

    Registers an ``unaccent()`` SQL function so accent-insensitive search
    compiles to the same SQL as on PostgreSQL's unaccent extension.
    """
    dbapi_connection.create_function('unaccent', 1, strip_accents, deterministic=True)
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.execute('PRAGMA cache_size=-64000')  # 64MB
    cursor.close()


def create_db_engine(url: str, db_config: DatabaseConfig = None, **kwargs) -> Engine:
    """
    Create an engine with a bounded connection pool.

    Server databases get a small fixed pool (no overflow), a short
    checkout/connect timeout and idle recycling. SQLite gets the connect
    hook above instead.
    """
    db_config = db_config or config.database
    engine_kwargs = {
        'echo': config.debug,  # Log SQL in debug mode
    }

    is_sqlite = url.startswith('sqlite')
    if is_sqlite:
        engine_kwargs['connect_args'] = {'check_same_thread': False}
    else:
        engine_kwargs.update(
            pool_size=db_config.pool_size,
            max_overflow=0,
            pool_timeout=db_config.pool_timeout,
            pool_recycle=db_config.pool_recycle,
            pool_pre_ping=True,
            connect_args={'connect_timeout': db_config.pool_timeout},
        )
    engine_kwargs.update(kwargs)

    engine = create_engine(url, **engine_kwargs)
    if is_sqlite:
        event.listen(engine, 'connect', _set_sqlite_pragma)
    return engine


engine = create_db_engine(config.database.url)


# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Avoid lazy loading issues
)


@contextmanager
def read_session(factory: sessionmaker = None) -> Generator[Session, None, None]:
    """
    Context manager for read-only database sessions.

    Usage:
        with read_session() as session:
            session.execute(...)

    Nothing is ever committed. Connectivity failures are re-raised as
    StoreUnavailableError so callers can tell them apart from empty results.
    """
    session = (factory or SessionLocal)()
    try:
        yield session
    except (exc.OperationalError, exc.InterfaceError, exc.TimeoutError) as e:
        logger.error(f'Data store unavailable: {e}')
        raise StoreUnavailableError(str(e)) from e
    finally:
        session.rollback()
        session.close()


def init_db(bind: Engine = None) -> None:
    """
    Initialize database schema.

    Creates all tables if they don't exist. Used by development setups and
    the test suite; production schemas are owned by the ingestion side.
    """
    bind = bind or engine
    if bind.dialect.name == 'postgresql':
        with bind.begin() as conn:
            conn.execute(text('CREATE EXTENSION IF NOT EXISTS unaccent'))
    Base.metadata.create_all(bind=bind)
