# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from relay.exceptions import AppException
from relay.logging import logger
from relay.managers.broadcaster import Broadcaster
from relay.managers.connection_registry import ConnectionRegistry
from relay.middlewares.correlation_id import CorrelationIDMiddleware
from relay.routing import collect_subrouters
from relay.settings import app_settings
from relay.utils.error_handler import (
    app_exception_handler,
    http_exception_handler,
)
from relay.utils.metrics import app_info

__version__ = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application startup and shutdown handler.

    Shutdown only logs: uvicorn has already stopped accepting connections
    and closed the listening socket, and open relay connections are left to
    close on their own.
    """
    logger.info("Application startup initiated")

    app_info.labels(
        version=__version__,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        environment=app_settings.ENV.value,
    ).set(1)
    logger.info(f"Relay is ready for connections on port {app_settings.PORT}")

    yield

    logger.info(
        f"Application shutdown initiated with "
        f"{app.state.registry.size()} connection(s) still open"
    )
    logger.info("Application shutdown complete")


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Each call builds an independent application that owns its own
    connection registry and broadcaster, exposed on ``app.state`` for the
    WebSocket endpoint and the health check.

    Routers are collected from ``relay.api.http`` (static files, health,
    metrics) and ``relay.api.ws.consumers`` (the relay socket at ``/``).
    """
    app = FastAPI(
        title="Broadcast relay",
        description="WebSocket echo and broadcast relay",
        version=__version__,
        lifespan=lifespan,
    )

    registry = ConnectionRegistry()
    app.state.registry = registry
    app.state.broadcaster = Broadcaster(registry)

    app.include_router(collect_subrouters())

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_middleware(CorrelationIDMiddleware)

    return app


