"""
Visit Counter Backend: FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
       Settings, storage and metrics can be injected; anything not injected
       is built from configuration.
Who:   uvicorn (`uvicorn visitcount.main:app`) or the `visitcount` console
       script, which wraps uvicorn with the configured shutdown grace period.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain (outermost first):                     │
    │  ┌─────────┐ ┌─────────┐ ┌──────┐ ┌───────────────────┐  │
    │  │ Metrics │→│ Logging │→│ CORS │→│ Origin Check(prod)│  │
    │  └─────────┘ └─────────┘ └──────┘ └───────────────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  ┌────────────────┐ ┌──────────────────┐ ┌───────────┐   │
    │  │ GET/POST       │ │ GET /healthz     │ │ GET       │   │
    │  │   /api/count   │ │ GET /readyz      │ │  /metrics │   │
    │  └────────────────┘ └──────────────────┘ └───────────┘   │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ StorageError→500 │ SerializationError→500 │ *→500  │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (ConfigurationError aborts startup)
    3. Build the storage backend unless one was injected
       (reachability check + table provisioning; failure aborts startup)

    Shutdown (SIGINT/SIGTERM, handled by uvicorn):
    1. Stop accepting new connections
    2. Wait up to SHUTDOWN_GRACE_PERIOD seconds for in-flight requests
    3. Close the storage pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware import Middleware

from visitcount import __version__
from visitcount.config import Settings
from visitcount.config import settings as default_settings
from visitcount.exceptions import (
    ConfigurationError,
    SerializationError,
    StorageError,
    VisitCounterError,
)
from visitcount.metrics import PrometheusRequestMetrics
from visitcount.middleware.logging import RequestLoggingMiddleware
from visitcount.middleware.metrics import MetricsMiddleware
from visitcount.middleware.origin_check import OriginCheckMiddleware
from visitcount.routes import health, metrics, visits
from visitcount.storage import VisitStorage, create_storage

logger = logging.getLogger(__name__)

# Methods and headers of the permissive development CORS policy
DEV_CORS_METHODS = ["GET", "POST", "HEAD"]
DEV_CORS_HEADERS = ["Origin", "Accept", "Content-Type", "X-Requested-With"]


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Called once during startup, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access log comes from RequestLoggingMiddleware instead
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: configuration check, storage, shutdown.

    Any exception raised before `yield` makes uvicorn abort startup and exit,
    which is the intended outcome for bad configuration or an unreachable
    database.
    """
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Visit counter backend starting up (env=%s)...", settings.app_env)

    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.critical("Configuration error: %s", e.message)
        raise

    if app.state.storage is None:
        try:
            app.state.storage = await create_storage(settings)
        except StorageError as e:
            logger.critical("Storage initialization failed: %s | Context: %s", e.message, e.context)
            raise

    logger.info(
        "Origin check %s; allowed origins: %s",
        "enabled" if settings.is_production else "disabled",
        ", ".join(settings.allowed_origins_list),
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Visit counter backend shutting down...")
    await app.state.storage.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to JSON error responses.

    Handler hierarchy:
        StorageConnectionError  → 500 storage_unavailable
        StorageQueryError       → 500 storage_error
        SerializationError      → 500 serialization_error
        VisitCounterError       → 500 server_error
        Exception (fallback)    → 500 internal_server_error

    Context (driver error text, offending values) is logged, never returned.
    """

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "%s %s storage error: %s | Context: %s",
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content={"error": exc.error_code, "message": exc.message},
        )

    @app.exception_handler(SerializationError)
    async def handle_serialization_error(request: Request, exc: SerializationError):
        logger.error(
            "%s %s response encoding failed: %s | Context: %s",
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "serialization_error", "message": exc.message},
        )

    @app.exception_handler(VisitCounterError)
    async def handle_app_error(request: Request, exc: VisitCounterError):
        logger.error("Application error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"error": "server_error", "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Middleware Chain
# ══════════════════════════════════════════════════════════════════════════

def build_middleware(
    settings: Settings, request_metrics: PrometheusRequestMetrics
) -> List[Middleware]:
    """
    Compose the middleware chain, outermost first.

    Starlette wraps the list so that its first entry sees the request first
    and the response last:

        dev:   Metrics → Logging → CORS(any origin) → handler
        prod:  Metrics → Logging → CORS(allow-list) → OriginCheck → handler

    In production CORS uses the same allow-list as the origin check, so an
    accepted request carries `Access-Control-Allow-Origin: <its origin>`.
    """
    chain = [
        Middleware(MetricsMiddleware, metrics=request_metrics),
        Middleware(RequestLoggingMiddleware),
    ]

    if settings.is_production:
        origins = settings.allowed_origins_list
        chain.append(
            Middleware(
                CORSMiddleware,
                allow_origins=origins,
                allow_methods=["GET", "POST"],
                allow_headers=["*"],
            )
        )
        chain.append(Middleware(OriginCheckMiddleware, allowed_origins=origins))
    else:
        chain.append(
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=DEV_CORS_METHODS,
                allow_headers=DEV_CORS_HEADERS,
            )
        )

    return chain


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[VisitStorage] = None,
    request_metrics: Optional[PrometheusRequestMetrics] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment-loaded settings
        storage: Pre-built backend; when omitted the lifespan builds one
        request_metrics: Metrics registry; a fresh one is created if omitted

    The three collaborators are kept on app.state, which is where the
    route dependencies (get_storage, get_metrics) look for them.
    """
    settings = settings or default_settings
    request_metrics = request_metrics or PrometheusRequestMetrics()

    app = FastAPI(
        title="Visit Counter API",
        description="Records and reports a visit counter backed by SQLite or PostgreSQL.",
        version=__version__,
        lifespan=lifespan,
        middleware=build_middleware(settings, request_metrics),
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.metrics = request_metrics

    register_exception_handlers(app)

    app.include_router(visits.router)
    app.include_router(health.router)
    app.include_router(metrics.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` with the configured graceful shutdown."""
    uvicorn.run(
        "visitcount.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
        timeout_graceful_shutdown=default_settings.shutdown_grace_period,
    )


if __name__ == "__main__":
    run()
