# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the EduRecords API.

Run with:
    uvicorn edurecords.api.app:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from edurecords import __version__
from edurecords.api.middleware.auth import AuthMiddleware
from edurecords.api.middleware.rate_limit import create_limiter
from edurecords.api.middleware.request_context import RequestContextMiddleware
from edurecords.api.routes import health
from edurecords.api.v1 import router as v1_router
from edurecords.core.config import get_settings
from edurecords.domains.ledger.errors import LedgerError, LedgerErrorKind
from edurecords.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    init_database,
)
from edurecords.utils.logging import setup_logging

logger = logging.getLogger(__name__)

LEDGER_ERROR_STATUS: dict[LedgerErrorKind, int] = {
    LedgerErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LedgerErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    LedgerErrorKind.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    LedgerErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    LedgerErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    LedgerErrorKind.INCONSISTENT: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and opens the records database pool on startup;
    closes the pool on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting EduRecords API (environment=%s, debug=%s)",
        settings.environment,
        settings.debug,
    )

    try:
        await init_database(settings)
        logger.info("Database connection initialized")
    except DatabaseError as e:
        logger.warning("Failed to initialize database connection: %s", str(e))

    yield

    await close_database()
    logger.info("Shutting down EduRecords API")


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Map a ledger error to its HTTP status.

    Args:
        request: HTTP request.
        exc: Raised ledger error.

    Returns:
        JSON response with ``error`` (kind) and ``detail`` (message).
    """
    status_code = LEDGER_ERROR_STATUS.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if status_code >= 500:
        logger.error("Ledger error on %s: %s", request.url.path, exc.message)
    else:
        logger.info("Ledger error on %s: %s (%s)", request.url.path, exc.message, exc.kind.value)

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind.value, "detail": exc.message},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Report database failures as service unavailable."""
    logger.error("Database error on %s: %s", request.url.path, str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "unavailable", "detail": exc.message},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="EduRecords API",
        description="Academic progress and credit ledger",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Disable automatic redirects from /path to /path/
        # This prevents 307 redirects that lose Authorization headers
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.limiter = create_limiter()

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    # Rate limiting - runs after auth so limits are keyed per user
    app.add_middleware(SlowAPIMiddleware)

    # Request context - binds request id and user to log context
    app.add_middleware(RequestContextMiddleware)

    # Auth middleware - validates JWT tokens
    app.add_middleware(AuthMiddleware)

    # CORS middleware (should be last to execute first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
