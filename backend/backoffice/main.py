"""
Back-Office Backend: FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Who:   uvicorn (`uvicorn backoffice.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware: Request ID → Logging → Rate Limit → GZip →  │
    │              CORS                                        │
    │                                                          │
    │  Routes:  /api/auth  /api/clients  /api/services         │
    │           /api/appointments  /api/invoices  /api/profile │
    │           /api/dashboard  /api/messages  /api/admin      │
    │           /health                                        │
    │                                                          │
    │  Exception Handlers (BackofficeError subclasses):        │
    │    Validation→400  Auth→401  Authz→403  NotFound→404     │
    │    Conflict→409  RateLimit→429  Cascade/DB→500           │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate settings (warn only), log banner
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from backoffice import __version__
from backoffice.config import settings
from backoffice.database import dispose_engine
from backoffice.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackofficeError,
    CascadeDeletionError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from backoffice.middleware.logging import RequestLoggingMiddleware
from backoffice.middleware.rate_limit import RateLimitMiddleware
from backoffice.middleware.request_id import RequestIDMiddleware, request_id_var
from backoffice.routes import (
    admin,
    appointments,
    auth,
    catalog,
    clients,
    dashboard,
    health,
    invoices,
    messages,
    profile,
)

logger = logging.getLogger(__name__)

# Headers a browser client may send on cross-origin calls
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once, at startup, before anything logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s to stdout
    (Docker captures it). Level comes from LOG_LEVEL.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Back-office backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: development setups run with the default secret
        logger.warning("Configuration warning: %s", str(e))

    if settings.scheduling_ignore_cancelled:
        logger.info("Scheduling pre-check ignores cancelled appointments")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Back-office backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Builds the standard error envelope (see schemas.common.ErrorResponse)."""
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps the BackofficeError hierarchy onto HTTP responses.

    Client errors (4xx) return the exception context as `details`. Server
    errors (5xx) never expose internals; the context is logged instead.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(
            401, "authentication_error", exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        logger.warning(
            "[%s] Forbidden %s %s", request_id_var.get(""), request.method, request.url.path
        )
        return error_response(403, "authorization_error", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return error_response(409, "conflict", exc.message, exc.context)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return error_response(
            429, "rate_limit_exceeded", exc.message, exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(CascadeDeletionError)
    async def handle_cascade_deletion(request: Request, exc: CascadeDeletionError):
        # The message names the failed step only ("Failed to delete user clients")
        logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "deletion_failed", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(BackofficeError)
    async def handle_backoffice_error(request: Request, exc: BackofficeError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return error_response(500, "internal_server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Last resort: stack trace goes to the log, never to the client."""
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Back-Office API",
        description=(
            "Small-business back office: clients, services, appointment scheduling "
            "with conflict detection, invoices, and an admin panel."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition: the last added
    # (RequestID) sees the request first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,  # bearer tokens, no cookies
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    for module in (auth, clients, catalog, appointments, invoices, profile, dashboard, messages, admin, health):
        app.include_router(module.router)

    return app


# uvicorn expects `backoffice.main:app` to be importable
app = create_app()
