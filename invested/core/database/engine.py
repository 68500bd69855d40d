"""Async database engine and session factory (SQLAlchemy 2.x).

Provides:
- Engine/session-factory lifecycle management
- Async driver URL normalisation (asyncpg, aiosqlite)
- Table creation from the declarative metadata
"""

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from invested.config.settings import Settings, get_settings
from invested.core.database.base import Base


logger = structlog.get_logger(__name__)


def build_async_url(url: str) -> str:
    """Rewrite synchronous driver URLs to their async equivalents."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create an async engine configured from settings."""
    url = build_async_url(settings.database_url)
    options: dict = {"echo": settings.database_echo}

    if make_url(url).get_backend_name() == "sqlite":
        # SQLite holds the write lock for the whole transaction; wait for it
        options["connect_args"] = {"timeout": settings.database_pool_timeout}
    else:
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_pre_ping=True,
        )

    return create_async_engine(url, **options)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by every service."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create every module's tables."""
    # Model modules register their tables on Base.metadata when imported
    from invested.courses import models as _courses  # noqa: F401
    from invested.forums import models as _forums  # noqa: F401
    from invested.progress import models as _progress  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_created", tables=sorted(Base.metadata.tables))


class DatabaseConnection:
    """Process-wide async engine manager."""

    _engine: AsyncEngine | None = None
    _sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def connect(cls) -> async_sessionmaker[AsyncSession]:
        """Create the engine and session factory if not created yet."""
        if cls._sessionmaker is not None:
            return cls._sessionmaker

        settings = get_settings()
        cls._engine = create_engine_from_settings(settings)
        cls._sessionmaker = create_sessionmaker(cls._engine)
        logger.info(
            "database_engine_created",
            backend=cls._engine.url.get_backend_name(),
            driver=cls._engine.url.get_driver_name(),
            database=cls._engine.url.database,
        )
        return cls._sessionmaker

    @classmethod
    def get_engine(cls) -> AsyncEngine:
        """Get the active engine, connecting if necessary."""
        if cls._engine is None:
            cls.connect()
        return cls._engine

    @classmethod
    async def disconnect(cls) -> None:
        """Dispose of the engine and its pooled connections."""
        if cls._engine is not None:
            await cls._engine.dispose()
            logger.info("database_engine_disposed")
        cls._engine = None
        cls._sessionmaker = None

    @classmethod
    def is_connected(cls) -> bool:
        return cls._engine is not None


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory (dependency injection helper)."""
    return DatabaseConnection.connect()


async def init_database() -> async_sessionmaker[AsyncSession]:
    """Initialize the engine and, when enabled, the schema.

    Returns:
        Session factory bound to the engine
    """
    settings = get_settings()
    session_factory = DatabaseConnection.connect()

    if settings.database_create_tables:
        await create_tables(DatabaseConnection.get_engine())

    logger.info("database_initialized")
    return session_factory


async def shutdown_database() -> None:
    """Shutdown database engine."""
    await DatabaseConnection.disconnect()
