"""
Backoffice API: FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app), or by
       the `backoffice-api` console script (run()).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Layout:
    Middleware chain (outermost first):
        RequestID → RequestLogging (+ unhandled error trap) → CORS → routes

    Routes:
        /employees, /clients, /suppliers   generic CRUD (one router per resource)
        /health                            database probe
        /                                  static landing page and assets

    Exception handlers:
        ValidationError → 400 │ NotFoundError → 404 │ StorageError → 500

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate database configuration (fatal on failure)
    3. Create the connection pool and verify connectivity (fatal on failure)
    4. Publish the Database handle on app.state

    Shutdown:
    1. Dispose the connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app import __version__
from app.config import Settings, settings
from app.database import Database
from app.exceptions import BackofficeError, NotFoundError, StorageError, ValidationError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.resources import RESOURCES
from app.routes import health
from app.routes.resources import build_resource_router
from app.services.resource_service import resource_services

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] backoffice.access: REQUEST: GET /employees
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Statement logging is done by the gateway; the engine's own echo is noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage the process-scoped Database handle.

    Storage is the only thing this service does, so a bad configuration or
    an unreachable database aborts startup: the exception propagates and
    the server process exits before accepting requests.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Backoffice API %s starting up...", __version__)

    try:
        app_settings.validate_database_config()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    database = Database(app_settings)
    try:
        await database.connect(
            expected_tables=[descriptor.table.name for descriptor in RESOURCES.values()]
        )
    except StorageError as e:
        logger.error("Database unavailable (%s): %s", database.display_url, e.message)
        await database.dispose()
        raise

    app.state.database = database
    logger.info(
        "Server ready at http://%s:%d",
        app_settings.backend_host,
        app_settings.backend_port,
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Backoffice API shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the application exceptions to HTTP status codes and JSON bodies.

    Handler hierarchy:
        ValidationError   → 400 Bad Request
        NotFoundError     → 404 Not Found
        StorageError      → 500, raw storage message
        BackofficeError   → 500 (any other application error)

    Every body uses the ErrorResponse envelope. Exceptions outside this
    hierarchy are handled by RequestLoggingMiddleware's trap.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "storage_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(BackofficeError)
    async def handle_application_error(request: Request, exc: BackofficeError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded singleton.

    Returns:
        Configured FastAPI instance. The Database handle is attached by the
        lifespan when the server starts.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Backoffice API",
        description="CRUD backend for employees, clients and suppliers.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → RequestLogging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    for service in resource_services.values():
        app.include_router(build_resource_router(service))

    # Static landing page and assets; mounted last so API routes match first
    static_dir = Path(app_settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning("Static directory not found, landing page disabled: %s", static_dir)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `app.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured host/port."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
