"""
Wanderlust Backend - FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) validates configuration, builds
       the engine and services once, stores them on `app.state`, and wires
       middleware, exception handlers and routers.
Who:   `main()` (the `wanderlust` console script) for production; tests call
       create_app() directly with their own Settings.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware Chain (outermost first):                         │
    │  CORS → Request ID → Access Log → Body Limit → Bearer Auth   │
    │                                                              │
    │  Routes:                                                     │
    │  POST /api/auth/signup   POST /api/auth/login   (public)     │
    │  POST /api/itinerary     GET /api/itinerary/{email}          │
    │  POST /api/search        GET /api/health        (public)     │
    │                                                              │
    │  Exception Handlers:                                         │
    │  Validation/Credentials→400 │ Auth→401 │ Storage/other→500   │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  log banner, optionally create tables (DB_AUTO_CREATE)
    Shutdown: dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from wanderlust import __version__
from wanderlust.config import Settings, get_settings
from wanderlust.database import (
    build_engine,
    build_session_factory,
    create_tables,
    dispose_engine,
)
from wanderlust.dependencies import ServiceContainer
from wanderlust.exceptions import (
    ConfigurationError,
    DuplicateAccountError,
    InvalidCredentialsError,
    LegacyAccountNotUpgradedError,
    PayloadTooLargeError,
    StorageError,
    UnauthenticatedError,
    ValidationFailedError,
    WanderlustError,
)
from wanderlust.middleware.auth import BearerAuthMiddleware
from wanderlust.middleware.body_limit import BodySizeLimitMiddleware
from wanderlust.middleware.logging import RequestLoggingMiddleware
from wanderlust.middleware.request_id import RequestIDMiddleware
from wanderlust.responses import error_response
from wanderlust.routes import auth, health, itinerary, search

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: 2026-01-15T12:00:00 [INFO] wanderlust.services.auth_service: [AUTH] Login successful: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's; SQL echo is controlled by LOG_LEVEL=DEBUG.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    logger.info("-" * 40)
    logger.info("Wanderlust Backend starting (v%s)", __version__)

    if settings.db_auto_create:
        await create_tables(app.state.engine)
        logger.info("Database tables ensured (DB_AUTO_CREATE=true)")

    logger.info("Port: %d", settings.backend_port)
    logger.info("-" * 40)

    yield

    logger.info("Wanderlust Backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        ValidationFailedError          → 400 (lists every bad field)
        RequestValidationError         → 400 (malformed JSON body)
        DuplicateAccountError          → 400
        InvalidCredentialsError        → 400
        LegacyAccountNotUpgradedError  → 400
        UnauthenticatedError           → 401
        PayloadTooLargeError           → 413
        StorageError                   → 500 (generic message, details logged)
        WanderlustError (base)         → 500
        Exception (fallback)           → 500

    Error bodies never contain stack traces or driver messages.
    """

    @app.exception_handler(ValidationFailedError)
    async def handle_validation_failed(request: Request, exc: ValidationFailedError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.message)
        return error_response(
            request, 400, "validation_error", exc.message, missingFields=exc.fields
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        fields = []
        for error in exc.errors():
            location = [str(part) for part in error.get("loc", ()) if part != "body"]
            fields.append(".".join(location) or "body")
        return error_response(
            request,
            400,
            "validation_error",
            "Invalid request data. Missing or invalid fields: " + ", ".join(fields),
            missingFields=fields,
        )

    @app.exception_handler(DuplicateAccountError)
    async def handle_duplicate_account(request: Request, exc: DuplicateAccountError):
        return error_response(request, 400, "duplicate_account", exc.message)

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return error_response(request, 400, "invalid_credentials", exc.message)

    @app.exception_handler(LegacyAccountNotUpgradedError)
    async def handle_legacy_account(request: Request, exc: LegacyAccountNotUpgradedError):
        return error_response(request, 400, "legacy_account", exc.message)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return error_response(
            request,
            401,
            "unauthenticated",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PayloadTooLargeError)
    async def handle_payload_too_large(request: Request, exc: PayloadTooLargeError):
        return error_response(request, 413, "payload_too_large", exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error("Storage error on %s: %s | Context: %s", request.url.path, exc.message, exc.context)
        return error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(WanderlustError)
    async def handle_app_error(request: Request, exc: WanderlustError):
        logger.error("Unhandled application error on %s: %s", request.url.path, exc.message)
        return error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[SERVER ERROR] %s %s: %s",
            request.method,
            request.url.path,
            str(exc),
            exc_info=True,
        )
        return error_response(
            request,
            500,
            "internal_server_error",
            "Internal Server Error",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        ConfigurationError: DATABASE_URL or JWT_SECRET is missing.
    """
    settings = settings or get_settings()
    settings.validate_required()

    app = FastAPI(
        title="Wanderlust API",
        description="Accounts, saved AI itineraries and search history for the Wanderlust travel planner.",
        version=__version__,
        lifespan=lifespan,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.services = ServiceContainer.from_settings(settings)

    # ── Middleware (last added = outermost) ───────────────────────────────
    app.add_middleware(BearerAuthMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    # Requests without an Origin header (mobile apps, curl) are unaffected;
    # other origins simply get no CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(itinerary.router)
    app.include_router(search.router)

    return app


def main() -> None:
    """Console entry point: validate configuration, then serve with uvicorn."""
    settings = get_settings()
    setup_logging(settings)
    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical("FATAL ERROR: %s", e.message)
        sys.exit(1)

    uvicorn.run(
        app,
        host=settings.backend_host,
        port=settings.backend_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
