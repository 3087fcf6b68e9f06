"""
Configuration management for XC Stats.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///xcstats.db')

    # Bounded pool: the flight log is read by a handful of concurrent requests
    pool_size: int = int(os.getenv('DB_POOL_SIZE', '5'))
    pool_timeout: int = int(os.getenv('DB_POOL_TIMEOUT', '2'))  # seconds
    pool_recycle: int = int(os.getenv('DB_POOL_RECYCLE', '20'))  # seconds

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')


@dataclass(frozen=True)
class QueryConfig:
    """Listing defaults for the flights explorer."""
    default_page_size: int = int(os.getenv('DEFAULT_PAGE_SIZE', '50'))
    max_page_size: int = int(os.getenv('MAX_PAGE_SIZE', '500'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    query: QueryConfig = field(default_factory=QueryConfig)

    # Flask settings
    secret_key: str = 'dev-key-change-in-prod'
    debug: bool = False


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        database=DatabaseConfig(),
        query=QueryConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
