"""
Database connection management using SQLAlchemy with async support.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from shared.utils.config import settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

# Base class for all models
Base = declarative_base()

# Global engine and session maker
_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """
    Get the database URL for async connections.

    Returns:
        Database URL with an async driver (asyncpg for PostgreSQL)
    """
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif db_url.startswith("sqlite://"):
        db_url = db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return db_url


def build_engine(db_url: str) -> AsyncEngine:
    """
    Create an async engine for a URL.

    Pool sizing only applies to server databases; SQLite uses the
    dialect's default pool.

    Args:
        db_url: Async database URL

    Returns:
        AsyncEngine instance
    """
    if db_url.startswith("sqlite"):
        return create_async_engine(
            db_url,
            echo=settings.DATABASE_ECHO,
            connect_args={"timeout": 30},
        )

    return create_async_engine(
        db_url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=settings.DATABASE_POOL_PRE_PING,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        echo=settings.DATABASE_ECHO,
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create a session maker bound to an engine.

    Returns:
        Session maker instance
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """
    Get or create the async database engine.

    Returns:
        AsyncEngine instance
    """
    global _engine

    if _engine is None:
        db_url = get_database_url()
        logger.info(f"Creating database engine: {db_url.split('@')[-1]}")  # Log without credentials
        _engine = build_engine(db_url)

    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Get or create the session maker.

    Returns:
        Session maker instance
    """
    global _session_maker

    if _session_maker is None:
        _session_maker = build_session_maker(get_engine())

    return _session_maker


@asynccontextmanager
async def get_session(
    session_maker: Optional[async_sessionmaker[AsyncSession]] = None
) -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session with automatic cleanup.

    The session is committed when the block exits normally and rolled
    back when it raises, so each block is one unit of work.

    Yields:
        AsyncSession instance

    Example:
        async with get_session() as session:
            result = await session.execute(query)
    """
    session_maker = session_maker or get_session_maker()
    session = session_maker()

    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.debug(f"Database session rolled back: {type(e).__name__}: {e}")
        raise
    finally:
        await session.close()


async def create_tables(engine: Optional[AsyncEngine] = None):
    """
    Create all database tables.
    Used for testing or local SQLite setups.
    In production, use Alembic migrations instead.
    """
    # Import models so they register on Base.metadata
    from src.database import schema  # noqa: F401

    engine = engine or get_engine()

    logger.info("Creating database tables...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created successfully")


async def close_connections():
    """
    Close all database connections.
    Call this on application shutdown.
    """
    global _engine, _session_maker

    if _engine:
        logger.info("Closing database connections...")
        await _engine.dispose()
        _engine = None
        _session_maker = None

    logger.info("Database connections closed")

