"""
AURA Server Application

Builds the FastAPI application: exception handlers, the chat and health
routers, and the lifecycle hooks that own the rate-limit cleanup task.

Run with ``uvicorn aura_server.main:app``. Tests import ``app`` (or call
``create_app()``) and replace ``get_service`` through
``app.dependency_overrides``.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI

from .api import chat_routes, health_routes
from .api.dependencies import get_service
from .config import settings
from .core.errors import (
    CompletionError,
    completion_error_handler,
    unhandled_exception_handler,
)

logger = logging.getLogger("aura.app")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Application with handlers, routers and lifecycle hooks registered.
    """
    app = FastAPI(
        title="aura-server",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # --------------------------------------------------------------
    # Exception Handlers
    # --------------------------------------------------------------

    app.add_exception_handler(CompletionError, completion_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Routers
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(chat_routes.router)

    # --------------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------------

    @app.on_event("startup")
    async def _start_background_work() -> None:
        """
        Fail fast on a missing API key, build the service and start the
        periodic sweep of idle rate-limit entries.
        """
        _ = settings.openai_api_key.get_secret_value()

        service = app.dependency_overrides.get(get_service, get_service)()
        app.state.cleanup_task = asyncio.create_task(
            service.limiter.run_cleanup(settings.rate_limit_cleanup_interval)
        )

        stats = service.stats()
        logger.info(
            "aura-server ready: %d policy documents, %d indexed chunks",
            stats["documents"],
            stats["chunks"],
        )

    @app.on_event("shutdown")
    async def _stop_background_work() -> None:
        logger.info("Shutting down aura-server")

        task = getattr(app.state, "cleanup_task", None)
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    return app


app = create_app()
