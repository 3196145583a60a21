"""
Async database engine, session factory and declarative base.

Every store opens its own short-lived session from `SessionLocal`,
so independent reads can run concurrently.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from shortlink_app.config import settings


# Base class for models
Base = declarative_base()


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement for SQLite so ON DELETE CASCADE works"""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to an engine (objects stay usable after commit)"""
    return async_sessionmaker(bind=engine, expire_on_commit=False)


engine = create_async_engine(settings.database_url, pool_pre_ping=True)
enable_sqlite_foreign_keys(engine)

SessionLocal = create_session_factory(engine)


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create all tables (models must be imported first)"""
    import shortlink_app.models  # noqa: F401  registers models on Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
