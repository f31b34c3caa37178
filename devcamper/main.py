"""
DevCamper API — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app(settings)` wires middleware, exception handlers, routers
       and the static upload mount; the lifespan builds the AppContext
       (engine, geocoder, mailer, services) and tears it down.
Who:   uvicorn (`uvicorn devcamper.main:app`) and the test suite, which
       passes its own Settings and a prebuilt context.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌────────┐ ┌─────────┐ ┌──────────────┐ │
    │  │ Rate Limit │→│ Req ID │→│ Logging │→│ Sec. Headers │ │
    │  └────────────┘ └────────┘ └─────────┘ └──────────────┘ │
    │                                                          │
    │  Routes (under /api/v1):                                 │
    │  bootcamps · courses · reviews · auth · users            │
    │  plus /health and static /uploads                        │
    │                                                          │
    │  Exception Handlers:                                     │
    │  DevCamperError→status · validation→400 · integrity→400  │
    │  unexpected→500                                          │
    └──────────────────────────────────────────────────────────┘

Every error body is `{"success": false, "error": "<message>"}`.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from devcamper import __version__
from devcamper.config import Settings, get_settings
from devcamper.context import AppContext
from devcamper.exceptions import DatabaseError, DevCamperError, DuplicateFieldError
from devcamper.middleware.logging import RequestLoggingMiddleware
from devcamper.middleware.rate_limit import RateLimitMiddleware
from devcamper.middleware.request_id import RequestIDMiddleware, request_id_var
from devcamper.middleware.security_headers import SecurityHeadersMiddleware
from devcamper.routes import auth, bootcamps, courses, health, reviews, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configures the root logger once per process.

    Format: 2024-01-15T12:00:00 [INFO] devcamper.access: GET /api/v1/bootcamps 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, AppContext (unless one was
              injected by the caller).
    Shutdown: closes the context it built (geocoder client, engine pool).
    """
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("DevCamper API %s starting up (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report; the problem is in the log
        logger.error("Configuration error: %s", e)

    owned = getattr(app.state, "context", None) is None
    if owned:
        app.state.context = AppContext.build(settings)
    logger.info("Uploads directory: %s", app.state.context.photos.upload_dir)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("DevCamper API shutting down...")
    if owned:
        await app.state.context.aclose()
        app.state.context = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        msg = err.get("msg", "Invalid value")
        if err.get("type") == "value_error":
            # Custom validator messages are already user-facing
            messages.append(msg.removeprefix("Value error, "))
            continue
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return ", ".join(messages) or "Invalid request"


def _is_malformed_path_id(exc: RequestValidationError) -> bool:
    errors = exc.errors()
    return bool(errors) and all(
        err.get("loc", ("",))[0] == "path" and err.get("type") == "uuid_parsing"
        for err in errors
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Handler hierarchy:
        DevCamperError          → exc.status_code
        RequestValidationError  → 400 (404 for a malformed path id)
        IntegrityError          → 400 "Duplicate field value entered"
        SQLAlchemyError         → 500 (DatabaseError)
        HTTPException           → its status (unknown route, bad method)
        Exception               → 500 "Server Error"

    Internal details (context, SQL, tracebacks) are logged, never returned.
    """

    @app.exception_handler(DevCamperError)
    async def handle_app_error(request: Request, exc: DevCamperError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        if _is_malformed_path_id(exc):
            return _error(404, "Resource not found")
        message = _validation_message(exc)
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), message)
        return _error(400, message)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        logger.warning("[%s] Integrity error: %s", request_id_var.get(""), exc.orig)
        return _error(400, DuplicateFieldError().message)

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        error = DatabaseError(context={"error": str(exc)})
        logger.error("[%s] Database error: %s", request_id_var.get(""), exc, exc_info=True)
        return _error(error.status_code, error.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return _error(500, "Server Error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Args:
        settings: Defaults to the environment (`get_settings()`)
        context:  Prebuilt AppContext; when given the lifespan neither
                  builds nor closes one
    """
    settings = settings or (context.settings if context else get_settings())

    app = FastAPI(
        title="DevCamper API",
        description="Bootcamp directory: bootcamps, courses, reviews, users and authentication.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context = context

    # Last added runs first: RateLimit → RequestID → Logging → SecurityHeaders → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )

    register_exception_handlers(app)

    for module in (bootcamps, courses, reviews, auth, users):
        app.include_router(module.router, prefix=settings.api_prefix)
    app.include_router(health.router)

    upload_dir = Path(settings.file_upload_path)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    return app


app = create_app()
