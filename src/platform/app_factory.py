"""
Shared FastAPI App Factory

Provides common app setup for production and test environments.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from src.platform.config.core_setting import settings
from src.platform.constant.route_constant import BOX_BASE, ORDER_BASE, STORE_ORDER_BASE
from src.platform.exception.exception_handlers import register_exception_handlers
from src.service.surprise_box.driving_adapter.http_controller.box_controller import (
    router as box_router,
)
from src.service.surprise_box.driving_adapter.http_controller.order_controller import (
    router as order_router,
)
from src.service.surprise_box.driving_adapter.http_controller.store_order_controller import (
    router as store_order_router,
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'Surprise box reservations, orders and counter pickup',
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    register_exception_handlers(app)

    app.include_router(box_router, prefix=BOX_BASE, tags=['box'])
    app.include_router(order_router, prefix=ORDER_BASE, tags=['order'])
    app.include_router(store_order_router, prefix=STORE_ORDER_BASE, tags=['store order'])

    _register_common_endpoints(app)

    return app


def _register_common_endpoints(app: FastAPI) -> None:
    @app.get('/health')
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {'status': 'healthy', 'service': settings.PROJECT_NAME}
