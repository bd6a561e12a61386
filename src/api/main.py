"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository import InMemoryUserRepository, PostgresUserRepository, run_migrations
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

API_PREFIX = "/api/1.0"

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Account registration, activation and self-service profile API",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the user repository for the configured storage backend
    - Creates database connection pool and runs migrations (postgres backend)
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage - data is lost on restart")
        app.state.repository = InMemoryUserRepository()
    else:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.pool = pool
        app.state.repository = PostgresUserRepository(pool)

    logger.info("Email backend: %s", settings.email_backend)
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Build the application with routes and the error boundary installed."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    application = FastAPI(
        title="accounts",
        description="Identity lifecycle API - registration, e-mail activation "
        "and owner-scoped profile updates",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    register_exception_handlers(application)
    application.include_router(v1_router, prefix=API_PREFIX)

    @application.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        pool = getattr(request.app.state, "pool", None)
        if pool is not None:
            with pool.connection() as conn:
                conn.execute("SELECT 1")

        return {"status": "healthy"}

    return application


app = create_app()
