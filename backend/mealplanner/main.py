"""
Meal Planner Backend - FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application (the HTTP front door).
How:   create_app() registers middleware, exception handlers, and routers;
       lifespan() handles startup and shutdown.
Who:   uvicorn (`uvicorn mealplanner.main:app`) or `python -m mealplanner`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐ ┌───────┐  │
    │  │ Body Limit │→│ Req ID   │→│ Logging │→│ CORS  │  │
    │  └────────────┘ └──────────┘ └─────────┘ └───────┘  │
    │                                                     │
    │  Routes:                                            │
    │  POST /generate-plan     POST /upload-cookbook      │
    │  POST /favorites         GET  /cookbooks            │
    │  GET  /favorites         GET  /health               │
    │                                                     │
    │  Exception Handlers → {"success": false, "message"} │
    │  ClientInput→400 │ TooLarge→413 │ Upstream→500      │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → (optional) create tables →
              (optional) orphan blob reconciliation
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mealplanner import __version__
from mealplanner.config import settings
from mealplanner.database import async_session_factory, create_tables, dispose_engine
from mealplanner.exceptions import (
    ClientInputError,
    MealPlannerError,
    UpstreamServiceError,
)
from mealplanner.middleware.body_size import BodySizeLimitMiddleware
from mealplanner.middleware.logging import RequestLoggingMiddleware
from mealplanner.middleware.request_id import RequestIDMiddleware, request_id_var
from mealplanner.routes import cookbooks, favorites, generate, health
from mealplanner.services.cookbook_service import cookbook_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] mealplanner.services.favorite_service: ...
    Called once, first thing in the lifespan.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

async def reconcile_on_startup() -> None:
    """Remove cookbook blobs left without a metadata record by earlier failures."""
    try:
        async with async_session_factory() as session:
            deleted = await cookbook_service.reconcile_orphaned_blobs(session)
        if deleted:
            logger.warning("Removed %d orphaned cookbook blobs: %s", len(deleted), deleted)
    except MealPlannerError as e:
        # Startup continues; the next restart retries the pass
        logger.error("Orphan reconciliation failed: %s | Context: %s", e.message, e.context)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Meal Planner Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health and the store endpoints still work
        logger.error("Configuration error: %s", str(e))

    if settings.db_create_tables:
        await create_tables()
        logger.info("Document store collections ensured")

    if settings.reconcile_on_startup:
        await reconcile_on_startup()

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    logger.info("Meal Planner Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _envelope(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the failure envelope.

        ClientInputError         → 400
        RequestValidationError   → 400 (instead of FastAPI's 422)
        PayloadTooLargeError     → 413
        UpstreamServiceError     → 500, per-operation message
        HTTPException            → its own status (404, 405, ...)
        Exception                → 500, generic message

    Response bodies never include tracebacks or driver errors; those are
    logged with the request ID.
    """

    @app.exception_handler(ClientInputError)
    async def handle_client_input_error(request: Request, exc: ClientInputError):
        rid = request_id_var.get("")
        logger.warning("[%s] Client input error: %s", rid, exc.message)
        return _envelope(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = exc.errors()
        # Malformed JSON reports ("body", <char offset>); only named fields count
        fields = [
            err["loc"][-1]
            for err in errors
            if err.get("loc")
            and err["loc"][0] == "body"
            and len(err["loc"]) > 1
            and isinstance(err["loc"][-1], str)
        ]
        if fields:
            message = "Missing or invalid field(s): " + ", ".join(fields) + "."
        else:
            message = "Invalid request body."
        logger.warning("[%s] Request validation failed: %s", rid, errors)
        return _envelope(400, message)

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _envelope(500, exc.message)

    @app.exception_handler(MealPlannerError)
    async def handle_app_error(request: Request, exc: MealPlannerError):
        # PayloadTooLargeError and any other subclass carrying its own status
        rid = request_id_var.get("")
        logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        headers = {"Connection": "close"} if exc.status_code == 413 else None
        return _envelope(exc.status_code, exc.message, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _envelope(500, "An unexpected error occurred.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, handlers, and routes into a FastAPI instance."""
    app = FastAPI(
        title="Meal Planner API",
        description=(
            "Generates one-week meal plans with Google Gemini, stores favorite "
            "plans, and keeps uploaded cookbook files."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition (last added = outermost)
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentialed responses with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(BodySizeLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(generate.router)
    app.include_router(favorites.router)
    app.include_router(cookbooks.router)
    app.include_router(health.router)

    return app


app = create_app()
