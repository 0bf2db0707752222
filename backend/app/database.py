"""
Database connection using SQLAlchemy's async engine.

The only table is the navigation menu, so the default is a local SQLite file
through aiosqlite. Point DATABASE_URL at postgresql+asyncpg://... in
production; nothing else changes.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings

# Load configuration (database URL) from environment variables
settings = get_settings()

# Connection pool
# - Reuses connections instead of opening a new one per query
# - echo stays off; SQL logging is noisy next to the debate stream logs
engine = create_async_engine(settings.database_url, echo=False)

# Factory that creates database sessions
# expire_on_commit=False keeps objects usable after commit (needed for async)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncSession:
    """Dependency that yields a database session."""
    async with async_session() as session:
        yield session
