from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.pool import StaticPool
from fastapi import Request
from typing import AsyncGenerator
import logging

from twex.config import Settings
from twex.db.base import Base

logger = logging.getLogger(__name__)

def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database"""
    database_url = settings.DATABASE_URL

    if database_url.startswith("sqlite"):
        # SQLite configuration for tests and local development
        return create_async_engine(
            database_url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    # PostgreSQL configuration for production/development
    return create_async_engine(
        database_url,
        echo=settings.DEBUG,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
    )

def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

async def init_db(engine: AsyncEngine) -> None:
    """Create all tables"""
    import twex.models  # noqa: F401  registers every table on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized successfully")

async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise

def dialect_insert(db: AsyncSession, model):
    """INSERT construct of the bound dialect, which supports ON CONFLICT"""
    if db.bind.dialect.name == "postgresql":
        return postgresql.insert(model)
    return sqlite.insert(model)
