"""Database connection module for InvestEd."""

from invested.core.database.base import Base, UTCDateTime, utcnow
from invested.core.database.engine import (
    DatabaseConnection,
    build_async_url,
    create_engine_from_settings,
    create_sessionmaker,
    create_tables,
    get_sessionmaker,
    init_database,
    shutdown_database,
)


__all__ = [
    "Base",
    "DatabaseConnection",
    "UTCDateTime",
    "build_async_url",
    "create_engine_from_settings",
    "create_sessionmaker",
    "create_tables",
    "get_sessionmaker",
    "init_database",
    "shutdown_database",
    "utcnow",
]
