"""SQLAlchemy async engine & session for the SQLite metadata store (WAL mode)."""

from __future__ import annotations

import logging
from pathlib import Path
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mdshelf.config import settings
from mdshelf.models import Base

logger = logging.getLogger(__name__)


def _configure_sqlite(dbapi_conn, _connection_record):
    """Apply SQLite PRAGMAs for a small single-node store."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA cache_size=-8000")  # 8 MB
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(database_path: str | Path, pool_size: int = 5) -> AsyncEngine:
    """Create an async engine for a SQLite file, creating its directory."""
    db_path = Path(database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    new_engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=settings.debug and settings.log_level == "DEBUG",
        pool_size=pool_size,
        max_overflow=0,
    )
    # Apply SQLite PRAGMAs on each new connection
    event.listen(new_engine.sync_engine, "connect", _configure_sqlite)
    return new_engine


engine = build_engine(settings.database_path, settings.max_db_connections)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create all tables if missing."""
    target = target or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created/verified at %s", target.url.database)
