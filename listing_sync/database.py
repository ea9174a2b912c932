# listing_sync/database.py

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def normalize_database_url(database_url: str) -> str:
    """Convert postgresql:// to postgresql+asyncpg:// for async support"""
    if not database_url:
        raise ValueError("DATABASE_URL is not set in environment variables")
    if database_url.startswith('postgresql://'):
        database_url = database_url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    return database_url


def create_engine(database_url: str, **kwargs) -> AsyncEngine:
    database_url = normalize_database_url(database_url)
    if database_url.startswith('postgresql+asyncpg://'):
        kwargs.setdefault('pool_size', 10)
        kwargs.setdefault('max_overflow', 20)
        kwargs.setdefault('pool_timeout', 30)
        kwargs.setdefault('pool_recycle', 1800)
    return create_async_engine(database_url, echo=False, future=True, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
