"""FastAPI application factory for the rate intelligence API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from remitiq.api.routes import alerts, rates


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to wire the service, store, and sources.

    Returns:
        Configured FastAPI application. Route handlers read
        ``app.state.service`` and ``app.state.settings``.
    """
    app = FastAPI(
        title="RemitIQ Rate Intelligence API",
        lifespan=lifespan,
    )

    # Wired by main.py lifespan, or directly by tests
    app.state.service = None
    app.state.settings = None

    app.include_router(rates.health_router)
    app.include_router(rates.router, prefix="/api")
    app.include_router(alerts.router, prefix="/api")

    return app
