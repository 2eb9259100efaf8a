"""
Production FastAPI Application

Inventory service: event counters, order ledger, payment webhooks and
reconciliation endpoints.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Inventory Service] Starting up...')

    tracing = TracingConfig(service_name=settings.OTEL_SERVICE_NAME)
    tracing.setup()
    if tracing.is_exporting:
        Logger.base.info('📊 [Inventory Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    setup()
    Logger.base.info('🔌 [Inventory Service] Dependency injection wired')

    database = container.database()
    if tracing.is_exporting:
        tracing.instrument_sqlalchemy(engine=database.engine)
        Logger.base.info('🗄️  [Inventory Service] Database engine instrumented')

    if settings.DB_CREATE_TABLES:
        await database.create_tables()
        Logger.base.info('🏗️  [Inventory Service] Tables ensured')

    Logger.base.info('✅ [Inventory Service] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Inventory Service] Shutting down...')

    await cleanup()
    Logger.base.info('🗄️  [Inventory Service] Database engine disposed')

    # Flush remaining spans
    tracing.shutdown()

    container.unwire()

    Logger.base.info('👋 [Inventory Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
