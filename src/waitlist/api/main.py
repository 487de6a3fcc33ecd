"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.

Run with:
    uvicorn waitlist.api.main:create_app --factory
"""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from waitlist.adapters.repository.postgres import run_migrations
from waitlist.api.errors import install_error_handlers
from waitlist.api.gateway import CorsHeadersMiddleware, InternalErrorMiddleware
from waitlist.api.v1 import cors_policies
from waitlist.api.v1 import router as v1_router
from waitlist.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

API_PREFIX = "/v1"

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Waitlist API v1 - Join the waitlist, view referrals and the leaderboard",
    },
]


def configure_logging(level: str) -> None:
    """Send application logs to stdout at the configured level."""
    logging.basicConfig(
        stream=sys.stdout,
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and outbound HTTP client on startup
    - Runs migrations on startup
    - Closes both on shutdown
    """
    settings: Settings = app.state.settings

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=True,
    )

    # Run migrations
    logger.info("Running database migrations...")
    run_migrations(pool)

    http_client = httpx.Client(timeout=settings.http_timeout_seconds)

    # Store shared resources in app state for dependency injection
    app.state.pool = pool
    app.state.http_client = http_client

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    http_client.close()
    pool.close()
    logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Settings are resolved here rather than at import time, so a missing
    required environment variable stops the process before it serves traffic.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="waitlist",
        description="Waitlist signup API with referral codes, a referral dashboard and a leaderboard",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings

    install_error_handlers(app)

    # Added first so it sits inside CorsHeadersMiddleware
    app.add_middleware(InternalErrorMiddleware)
    app.add_middleware(
        CorsHeadersMiddleware,
        policies=cors_policies(
            API_PREFIX,
            allow_origin=settings.cors_allow_origin,
            allow_headers=settings.cors_allow_headers,
        ),
    )

    app.include_router(v1_router, prefix=API_PREFIX)

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        pool = request.app.state.pool
        with pool.connection() as conn:
            conn.execute("SELECT 1")

        return {"status": "healthy"}

    return app
