"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: event-loop-aware engine + session maker for one database URL
2. Database: the injectable store client (engine manager + schema namespace)

Namespace:
- ``schema`` is applied through ``schema_translate_map`` so every table of
  ``Base.metadata`` (declared without a schema) lands in that namespace.
  Tests and isolated runs pass their own schema instead of renaming tables.

SQLite:
- Used for local runs and the test-suite via ``sqlite+aiosqlite``.
- pysqlite's implicit transaction handling is disabled and every transaction
  starts with ``BEGIN IMMEDIATE`` so SAVEPOINTs work and writers serialise
  the same way row locks serialise them on PostgreSQL.
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


class Base(DeclarativeBase):
    pass


def _configure_sqlite(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, 'connect')
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.execute('PRAGMA busy_timeout=10000')
        cursor.close()

    @event.listens_for(engine.sync_engine, 'begin')
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql('BEGIN IMMEDIATE')


class AsyncEngineManager:
    """
    Manages a SQLAlchemy async engine with event loop awareness.

    Ensures the engine is always bound to the current event loop to prevent
    "Task got Future attached to a different loop" errors (pytest-asyncio
    runs every test on a fresh loop; the API runs on a single one).
    """

    def __init__(self, *, url: str, schema: Optional[str] = None, echo: bool = False) -> None:
        self.url = url
        self.schema = schema
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == 'sqlite'

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running, create engine without loop tracking
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

        if self._loop is not current_loop:
            if self._engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, recreating engine')
                # dispose() is async; the orphaned pool is garbage collected
                self._engine = None
                self._session_maker = None

            Logger.base.info(f'🔗 [DB] Creating engine for event loop {id(current_loop)}')
            self._engine = self._create_engine()
            self._loop = current_loop

        assert self._engine is not None
        return self._engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None or self._session_maker.kw.get('bind') is not engine:
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
            engine = create_async_engine(self.url, echo=self.echo)
            _configure_sqlite(engine)
        else:
            engine = create_async_engine(
                self.url,
                echo=self.echo,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_POOL_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=settings.DB_POOL_RECYCLE,
                pool_pre_ping=settings.DB_POOL_PRE_PING,
            )

        if self.schema:
            engine = engine.execution_options(schema_translate_map={None: self.schema})
        return engine


class Database:
    """
    Store client for dependency injection

    Wraps AsyncEngineManager; constructed by the DI container from settings,
    or directly by tests with their own URL / schema.
    """

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        schema: Optional[str] = None,
        echo: Optional[bool] = None,
    ) -> None:
        self._engine_manager = AsyncEngineManager(
            url=url or settings.DATABASE_URL_ASYNC,
            schema=schema if schema is not None else settings.DB_SCHEMA,
            echo=settings.DB_ECHO if echo is None else echo,
        )

    @property
    def schema(self) -> Optional[str]:
        return self._engine_manager.schema

    @property
    def engine(self) -> AsyncEngine:
        return self._engine_manager.get_engine()

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        return self._engine_manager.get_session_maker()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions

        Note: Automatically handles rollback on exception
        """
        async with self.session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        """Create tables if they don't exist (local runs and tests; production uses alembic)"""
        # Import models so they register with Base.metadata
        import src.service.inventory.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def drop_tables(self) -> None:
        import src.service.inventory.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all, checkfirst=True)

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
