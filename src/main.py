"""
Surprise Box Service - Main Application

Reservations, order creation and counter pickup over HTTP.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Surprise Box] Starting up...')

    setup()

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Surprise Box] Dependency injection wired')

    database = container.database()
    if database.is_sqlite:
        # Local runs have no migration step; Postgres is migrated by alembic
        await database.create_tables()
    Logger.base.info('🗄️  [Surprise Box] Database engine ready')

    Logger.base.info('✅ [Surprise Box] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Surprise Box] Shutting down...')

    await database.dispose()
    Logger.base.info('🗄️  [Surprise Box] Database engine disposed')

    container.unwire()
    cleanup()

    Logger.base.info('👋 [Surprise Box] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
