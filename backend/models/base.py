"""SQLAlchemy declarative base and async engine setup."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

# Plain driver URLs mapped to their async drivers
_ASYNC_SCHEMES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


class Base(DeclarativeBase):
    pass


def async_database_url(url: str) -> str:
    """Rewrite ``postgresql://`` / ``sqlite://`` URLs to their async drivers."""
    for prefix, replacement in _ASYNC_SCHEMES.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


def create_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Build an engine and session factory for ``database_url``."""
    engine = create_async_engine(async_database_url(database_url), echo=False, pool_pre_ping=True)
    return engine, async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
