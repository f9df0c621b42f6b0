"""FastAPI status application."""

from fastapi import FastAPI

from netpoll.api.routes import health, status


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="netpoll",
        description="Network device telemetry collector status",
        version="0.1.0",
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(status.router, prefix="/api/v1", tags=["Status"])

    return app
