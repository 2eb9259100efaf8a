"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- SQLite (aiosqlite) test database migrated with alembic once per session
- Table cleanup around every non-unit test
- Session-scoped FastAPI TestClient

Architecture:
- Unit tests (@pytest.mark.unit): AsyncMock repositories, no database
- Integration tests: real repositories against the temporary database
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read once at import time (src.platform.config.core_setting)
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    db_path = Path(tempfile.gettempdir()) / f'ticket_inventory_test_{worker_id}.db'
    if db_path.exists():
        db_path.unlink()
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{db_path}'

    os.environ['STRIPE_WEBHOOK_SECRET'] = 'whsec_test_secret'
    os.environ['STORE_RETRY_BASE_DELAY'] = '0'
    os.environ['STORE_RETRY_MAX_DELAY'] = '0'


_early_setup_test_environment()

import asyncio  # noqa: E402
from collections.abc import Generator  # noqa: E402
from typing import Any  # noqa: E402

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from src.platform.config.core_setting import settings  # noqa: E402


# =============================================================================
# Pytest Hooks
# =============================================================================
def pytest_sessionstart(session: pytest.Session) -> None:
    alembic_cfg = Config(str(Path(__file__).parent.parent / 'alembic.ini'))
    command.upgrade(alembic_cfg, 'head')


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        markers = [m.name for m in item.iter_markers()]
        if 'unit' not in markers:
            item.fixturenames.append('clean_database')


# =============================================================================
# Database Cleanup
# =============================================================================
_TABLES_IN_DELETE_ORDER = ('orders', 'event')


async def _clean_all_tables() -> None:
    engine = create_async_engine(settings.DATABASE_URL_ASYNC)
    try:
        async with engine.begin() as conn:
            for table in _TABLES_IN_DELETE_ORDER:
                await conn.execute(text(f'DELETE FROM "{table}"'))
    finally:
        await engine.dispose()


@pytest.fixture(scope='function')
def clean_database() -> Generator[None, None, None]:
    asyncio.run(_clean_all_tables())
    yield


# =============================================================================
# Session-scoped Fixtures
# =============================================================================
@pytest.fixture(scope='session')
def client() -> Generator[TestClient, None, None]:
    from test.test_main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def execute_sql_statement() -> Any:
    def _execute(
        statement: str, params: dict[str, Any] | None = None, fetch: bool = False
    ) -> list[dict[str, Any]] | None:
        async def _run() -> list[dict[str, Any]] | None:
            engine = create_async_engine(settings.DATABASE_URL_ASYNC)
            try:
                async with engine.begin() as conn:
                    result = await conn.execute(text(statement), params or {})
                    if fetch:
                        return [dict(row._mapping) for row in result]
                return None
            finally:
                await engine.dispose()

        return asyncio.run(_run())

    return _execute
