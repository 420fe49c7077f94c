"""Async engine, session factory and table bootstrap for the Negosyo datastore."""

import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from negosyo.config import settings

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict:
    """Keyword arguments for ``create_async_engine`` on ``database_url``.

    SQLite runs without a connection pool to size; PostgreSQL takes its pool
    limits from settings.
    """
    options: dict = {"echo": settings.database_echo}
    if not database_url.startswith("sqlite"):
        options.update({
            "pool_size": settings.database_pool_size,
            "max_overflow": settings.database_max_overflow,
            "pool_timeout": settings.database_pool_timeout_seconds,
            "pool_recycle": settings.database_pool_recycle_seconds,
            "pool_pre_ping": True,
        })
    return options


def sqlite_file(database_url: str) -> Path | None:
    """The on-disk file behind a SQLite URL, or None for memory and non-SQLite URLs."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return None
    if not url.database or url.database == ":memory:":
        return None
    return Path(url.database)


_is_sqlite = settings.database_url.startswith("sqlite")

engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# SQLite-only: WAL mode and busy_timeout for concurrent writers.
if _is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={settings.sqlite_busy_timeout_ms}")
        cursor.close()


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """FastAPI dependency that yields a database session."""
    async with async_session() as session:
        yield session


async def init_db():
    """Create the data directory for a SQLite file, then all tables."""
    path = sqlite_file(settings.database_url)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Using SQLite database at %s", path)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    """Drop all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def dispose_engine():
    """Dispose of the engine connection pool. Call on shutdown."""
    await engine.dispose()
