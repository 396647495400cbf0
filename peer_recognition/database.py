"""
peer_recognition/database.py
Async SQLAlchemy engine configuration for the SQL document store
"""
import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker

from peer_recognition.orm.base import Base
import peer_recognition.orm  # ensures all models are registered

logger = logging.getLogger(__name__)


def create_engine_for(database_url: str) -> AsyncEngine:
    """
    Build an async engine.

    SQLite gets a busy timeout and the dialect's default pool; other
    databases get a sized, pre-pinged pool.
    """
    if not database_url:
        raise ValueError("DATABASE_URL environment variable is not set")

    if "sqlite" in database_url.lower():
        return create_async_engine(
            database_url,
            echo=False,
            future=True,
            connect_args={
                "timeout": 30.0,   # SQLite busy timeout in seconds
            }
        )

    return create_async_engine(
        database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,      # Recycle connections after 1 hour
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create missing tables."""
    logger.info("Initializing database...")
    logger.info(f"Database dialect: {engine.url.get_backend_name()}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✓ Database initialization complete")


async def close_db(engine: AsyncEngine) -> None:
    """Close database connection"""
    await engine.dispose()
    logger.info("Database connection closed")
