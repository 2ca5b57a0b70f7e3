"""
MoveMate Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn movemate.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware (outermost first):                           │
    │    Request ID → Access Log → Rate Limit → GZip → CORS    │
    │                                                          │
    │  Routes:                                                 │
    │    /api/requests/driver/...            GET /health       │
    │                                                          │
    │  Exception Handlers:                                     │
    │    BadRequest→400  Auth→401  Forbidden→403  NotFound→404 │
    │    RateLimit→429   Database→500  anything else→500       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, validate production settings
    Shutdown:  dispose the database engine
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from movemate import __version__
from movemate.config import settings
from movemate.database import dispose_engine
from movemate.exceptions import (
    AuthenticationError,
    BadRequestError,
    DatabaseError,
    ForbiddenError,
    MoveMateError,
    NotFoundError,
    RateLimitExceededError,
)
from movemate.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    request_id_var,
)
from movemate.routes import driver_requests, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2026-01-15T12:00:00 [INFO] movemate.services.estimate_decision: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access log middleware replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("MoveMate Backend %s starting up (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report; the operator sees this line
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("MoveMate Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The ContextVar is already reset when the catch-all handler runs
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    exc: Exception,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the standard error body; adds `stack` in development only."""
    content: Dict[str, Any] = {
        "error": error,
        "message": message,
        "details": details or None,
        "request_id": _request_id(request),
    }
    if settings.expose_stack_traces:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the MoveMateError hierarchy to HTTP responses.

    Client-caused errors echo their context as `details`. Server-side
    errors log the context and return a generic message.
    """

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(request: Request, exc: BadRequestError):
        logger.info("[%s] Bad request: %s", _request_id(request), exc.message)
        return error_response(request, 400, "bad_request", exc.message, exc, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(request: Request, exc: AuthenticationError):
        return error_response(
            request,
            401,
            exc.code,
            exc.message,
            exc,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning("[%s] Forbidden: %s", _request_id(request), exc.message)
        return error_response(request, 403, "forbidden", exc.message, exc, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, "not_found", exc.message, exc)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return error_response(
            request,
            429,
            "rate_limit_exceeded",
            exc.message,
            exc,
            exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            _request_id(request),
            exc.message,
            exc.context,
        )
        return error_response(
            request,
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
            exc,
        )

    @app.exception_handler(MoveMateError)
    async def handle_application_error(request: Request, exc: MoveMateError):
        logger.error("[%s] Unhandled application error: %s", _request_id(request), exc.message)
        return error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
            exc,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", _request_id(request), str(exc), exc_info=True
        )
        return error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
            exc,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="MoveMate API",
        description=(
            "Driver-side request matching and estimate decisions for the "
            "MoveMate moving marketplace."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition (last added = outermost).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(driver_requests.router)
    app.include_router(health.router)

    return app


app = create_app()
