"""FastAPI application factory for the screener JSON API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from screener.api import routes


def create_api_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic and to
                  place the AutoScanner on app.state.

    Returns:
        Configured FastAPI application with the /api routes registered.
    """
    app = FastAPI(
        title="Futures Signal Screener",
        lifespan=lifespan,
    )
    app.include_router(routes.router, prefix="/api")
    return app
