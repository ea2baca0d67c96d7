"""SQLite engine, sessions and schema versioning."""

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()

SCHEMA_VERSION = 1


def make_engine(db_path: Path) -> AsyncEngine:
    """Create an async engine for the SQLite file at db_path (parent dirs created)."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    # SQLAlchemy async needs sqlite+aiosqlite and path as URL
    return create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=False)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; objects stay readable after commit."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def _migrate(conn) -> None:
    """Bring an existing database up to SCHEMA_VERSION (migration)."""
    version = conn.execute(text("PRAGMA user_version")).scalar() or 0
    if version >= SCHEMA_VERSION:
        return
    # Version 0 -> 1: tables are created by create_all; only record the version.
    conn.execute(text(f"PRAGMA user_version = {SCHEMA_VERSION}"))


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if they do not exist, then run migrations."""
    # Register models with Base before create_all
    from editorstore.changelog import models as _changelog  # noqa: F401
    from editorstore.files import models as _files  # noqa: F401
    from editorstore.projects import models as _projects  # noqa: F401
    from editorstore.settings import models as _settings  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(_migrate)


async def get_schema_version(engine: AsyncEngine) -> int:
    """Return the stored PRAGMA user_version."""
    async with engine.connect() as conn:
        result = await conn.execute(text("PRAGMA user_version"))
        return result.scalar() or 0


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite does not store the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
