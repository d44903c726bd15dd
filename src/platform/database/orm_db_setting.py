"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: event-loop-aware engine / session maker holder
2. Base: declarative base shared by every ORM model
3. Database: DI-friendly facade handing out session factories

Drivers:
- PostgreSQL (asyncpg): production; READ COMMITTED + conditional UPDATE
- SQLite (aiosqlite): tests and local runs; every transaction starts with
  BEGIN IMMEDIATE so concurrent writers serialize and SAVEPOINTs work
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


SQLITE_BUSY_TIMEOUT_SECONDS = 30


# =============================================================================
# SQLite transaction behaviour
# =============================================================================


def _install_sqlite_immediate_transactions(engine: AsyncEngine) -> None:
    """
    Take over transaction control from the sqlite3 driver.

    https://docs.sqlalchemy.org/en/20/dialects/sqlite.html#serializable-isolation-savepoints-transactional-ddl
    """

    @event.listens_for(engine.sync_engine, 'connect')
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    @event.listens_for(engine.sync_engine, 'begin')
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql('BEGIN IMMEDIATE')


# =============================================================================
# Event-loop-aware Engine Manager
# =============================================================================


class AsyncEngineManager:
    """
    Holds the async engine for one database URL.

    Engines are bound to the event loop that created them; when the running
    loop changes (TestClient portal, per-test loops) a fresh engine is built to
    avoid "Future attached to a different loop" errors.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self._url = url
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self._url).get_backend_name() == 'sqlite'

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

        engine = self._engine
        if engine is None or self._loop is not current_loop:
            if engine is not None and self._loop is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, replacing engine')
            self._session_maker = None
            Logger.base.info(f'🔗 [DB] Creating engine for event loop {id(current_loop)}')
            engine = self._engine = self._create_engine()
            self._loop = current_loop

        return engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        self._loop = None

    def _create_engine(self) -> AsyncEngine:
        if self.is_sqlite:
            engine = create_async_engine(
                self._url,
                echo=self._echo,
                connect_args={'timeout': SQLITE_BUSY_TIMEOUT_SECONDS},
            )
            _install_sqlite_immediate_transactions(engine)
            return engine

        return create_async_engine(
            self._url,
            echo=self._echo,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


# =============================================================================
# Base Model
# =============================================================================


class Base(DeclarativeBase):
    pass


# =============================================================================
# Database Class (for DI)
# =============================================================================


class Database:
    """
    Database facade for the dependency-injection container.

    `session_factory` is what units of work and query repos receive; every call
    opens a new AsyncSession on the engine of the current event loop.
    """

    def __init__(self, *, url: str | None = None, echo: bool = False) -> None:
        self._engine_manager = AsyncEngineManager(url or settings.DATABASE_URL_ASYNC, echo=echo)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine_manager.get_engine()

    @property
    def is_sqlite(self) -> bool:
        return self._engine_manager.is_sqlite

    def session_factory(self) -> AsyncSession:
        return self._engine_manager.get_session_maker()()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            yield session

    async def create_tables(self) -> None:
        """Create tables that do not exist yet (tests / local SQLite)."""
        # Import models so they register on Base.metadata
        import src.service.surprise_box.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️ [DB] Tables ensured')

    async def drop_tables(self) -> None:
        import src.service.surprise_box.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
