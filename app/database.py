"""Async SQLAlchemy engine, sessions and store error classification."""

from functools import lru_cache

from sqlalchemy import event
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from app.config import get_settings

Base = declarative_base()

STORE_UNAVAILABLE_DETAIL = "Payment tracking is temporarily unavailable. Please try again shortly."
STORE_NOT_CONFIGURED_DETAIL = "Payment store is not configured."


def is_store_configured() -> bool:
    return bool((get_settings().DATABASE_URL or "").strip())


@lru_cache
def get_engine() -> AsyncEngine:
    settings = get_settings()
    url = (settings.DATABASE_URL or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set")

    if not url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.DEBUG, pool_pre_ping=True)

    # aiosqlite connections are bound to the loop that opened them
    engine = create_async_engine(url, echo=settings.DEBUG, poolclass=NullPool)

    # Take the write lock at BEGIN so concurrent writers queue instead of deadlocking
    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_connect(dbapi_connection, _):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


@lru_cache
def get_sessionmaker() -> async_sessionmaker:
    return async_sessionmaker(bind=get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_models() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    get_sessionmaker.cache_clear()
    get_engine.cache_clear()


def is_store_connection_error(exc: BaseException) -> bool:
    """True when exc means the store could not be reached, as opposed to a failed statement."""
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    # Drivers report lost or refused connections as OperationalError,
    # so every OperationalError is treated as the store being unavailable.
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    return isinstance(exc, OSError)
