"""
Mistake Book Backend: FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the FileStore and MistakeBookService,
       registers middleware, exception handlers and routes.
Who:   uvicorn (`uvicorn mistakebook.main:app --port 3000`); tests call
       create_app() with their own Settings and store.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────┐ ┌─────────┐ ┌────────┐ ┌───────────────┐     │
    │  │ Req ID │→│ Logging │→│  CORS  │→│ Body ≤ 5 MB   │     │
    │  └────────┘ └─────────┘ └────────┘ └───────────────┘     │
    │                                                          │
    │  Routes:                                                 │
    │  ┌──────────────┐ ┌────────────────────┐ ┌────────────┐  │
    │  │ POST /push   │ │ GET /stats/{subj}  │ │ GET /health│  │
    │  └──────────────┘ └────────────────────┘ └────────────┘  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Config→500 │ Store→provider status│  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mistakebook import __version__
from mistakebook.config import Settings, settings as default_settings
from mistakebook.dependencies import build_store
from mistakebook.exceptions import (
    ConfigurationError,
    StoreError,
    ValidationError,
)
from mistakebook.middleware.body_limit import BodySizeLimitMiddleware
from mistakebook.middleware.logging import RequestLoggingMiddleware
from mistakebook.middleware.request_id import RequestIDMiddleware, request_id_var
from mistakebook.models.book import SUBJECTS
from mistakebook.routes import health, push, stats
from mistakebook.services.book_service import MistakeBookService
from mistakebook.services.store_base import FileStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # httpx logs every request URL at INFO, and the URL carries access_token
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, banner.
    Shutdown: close the store's HTTP client.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Mistake Book backend starting up...")
    logger.info("Append mode for %d subjects, auto numbering + timestamps", len(SUBJECTS))
    for key, subject in SUBJECTS.items():
        logger.info("  %s: %s", key, subject.file_name)
    logger.info("Entry heading format: 题目 #N | date time")

    # The server still starts unconfigured so health and stats stay reachable
    try:
        app_settings.validate_required_for_production()
        logger.info("Configuration complete, ready.")
    except ValueError as e:
        logger.warning("Configuration error: %s", str(e))
        logger.warning("Pushes will fail until the .env file is fixed.")

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Mistake Book backend shutting down...")
    await app.state.book_service.store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "requestId": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and `{"success": false, ...}` bodies.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        RequestValidationError  → 400 Bad Request (malformed JSON body)
        ConfigurationError      → 500 Internal Server Error
        StoreError              → provider status (500 when there is none)
        Exception (fallback)    → 500 "操作失败"

    Provider payloads and stack traces go to the log only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request body: %s", request_id_var.get(""), exc.errors())
        return _error_response(400, "请求格式无效")

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error, missing: %s", request_id_var.get(""), exc.missing)
        return _error_response(500, exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(
            "[%s] Store operation failed (%s): %s | payload: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.payload,
        )
        return _error_response(exc.http_status, exc.message)

    # Starlette runs this one in ServerErrorMiddleware, outside the
    # middleware chain: the 500 carries no CORS or X-Request-ID header
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(500, "操作失败")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[FileStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Defaults to the process-wide Settings loaded from env.
        store:        Defaults to build_store(app_settings).
    """
    app_settings = app_settings or default_settings
    store = store or build_store(app_settings)

    app = FastAPI(
        title="Mistake Book API",
        description="Append study mistake entries to Markdown books kept in a Gitee repository.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.book_service = MistakeBookService(store=store, settings=app_settings)

    # Last added executes first: RequestID → Logging → CORS → BodySizeLimit
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=app_settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(push.router)
    app.include_router(stats.router)
    app.include_router(health.router)

    return app


app = create_app()
