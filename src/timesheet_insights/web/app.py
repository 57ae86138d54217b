"""
FastAPI application for the Timesheet Insights dashboard.

PURPOSE: Main application factory and server runner.
AI CONTEXT: Creates app with all routes registered.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..config import Config
from .routes import router

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """
    Manage application lifecycle with startup/shutdown hooks.

    Business context: Startup logging records which snapshot directory the
    dashboard is reading, the first thing to check when numbers look wrong.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None. Control returns to FastAPI to handle requests.
    """
    # Startup
    logger.info(
        "Timesheet Insights dashboard starting (v%s, data: %s)",
        __version__,
        Config.get_storage_dir(),
    )
    yield
    # Shutdown
    logger.info("Timesheet Insights dashboard shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI dashboard application.

    Factory function so tests and uvicorn's factory mode each get a fresh
    instance.

    Returns:
        Configured FastAPI application with:
        - Dashboard routes (/, /charts/*, /api/*)
        - OpenAPI documentation at /docs

    Example:
        >>> from fastapi.testclient import TestClient
        >>> client = TestClient(create_app())
        >>> client.get('/api/users').status_code
        200
    """
    app = FastAPI(
        title="Timesheet Insights",
        description="Productivity analytics and timesheet review for tracked work sessions",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(router)

    return app


def run_dashboard(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Launch the Timesheet Insights web dashboard server.

    Starts a uvicorn ASGI server hosting the FastAPI application. Blocks
    until the server is stopped (Ctrl+C).

    Args:
        host: Interface to bind. '127.0.0.1' for local only (default),
            '0.0.0.0' for network access.
        port: TCP port. Default 8000.
        reload: Auto-reload on code changes (development only).
        log_level: Uvicorn verbosity ('critical' .. 'trace').

    Raises:
        OSError: If the port is already in use or host is invalid.

    Example:
        >>> run_dashboard(host='127.0.0.1', port=8000, reload=True)
    """
    uvicorn.run(
        "timesheet_insights.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# For direct execution
if __name__ == "__main__":
    run_dashboard()
