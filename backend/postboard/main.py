"""
Postboard Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn postboard.main:app, or the `postboard`
       console script) and by the test suite with per-test settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Raw Body    │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌───────────────┐ ┌────────────┐  │
    │  │ /api/posts   │ │ /posts (v1)   │ │ GET /health│  │
    │  └──────────────┘ └───────────────┘ └────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation/Parse→400 │ NotFound→404 │ →500   │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the Database from settings
    3. Apply pending migrations
    4. Store the Database on app.state

    Shutdown:
    1. Dispose the database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from postboard import __version__
from postboard.config import Settings, settings as default_settings
from postboard.database import Database
from postboard.exceptions import (
    InternalError,
    NotFoundError,
    ParseError,
    PostboardError,
    ValidationError,
)
from postboard.middleware.logging import RequestLoggingMiddleware
from postboard.middleware.raw_body import RawBodyMiddleware, get_raw_body
from postboard.middleware.request_id import RequestIDMiddleware, request_id_var
from postboard.routes import health, posts
from postboard.services.post_service import REQUIRED_FIELDS

logger = logging.getLogger(__name__)

# Longest slice of a malformed body written to the log
RAW_BODY_LOG_LIMIT = 2048

# Detail FastAPI attaches to a 400 when the body cannot be decoded at all
BODY_PARSE_DETAIL = "There was an error parsing the body"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Acquire the database at startup and release it at shutdown.

    The Database is the only process-wide resource; it lives on
    app.state.database for exactly the lifetime of this context.
    """
    config: Settings = app.state.settings
    if app.state.configure_logging:
        setup_logging(config.log_level)

    logger.info("=" * 60)
    logger.info("Postboard Backend starting up...")

    database = Database.from_settings(config)
    try:
        await database.run_migrations()
    except Exception:
        logger.error("Database migration failed; aborting startup", exc_info=True)
        await database.dispose()
        raise
    app.state.database = database

    logger.info("Posts API mounted at %s/posts", config.api_prefix)
    logger.info("Server ready at http://%s:%d", config.host, config.port)
    logger.info("=" * 60)

    try:
        yield
    finally:
        logger.info("Postboard Backend shutting down...")
        await database.dispose()
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(exc: PostboardError, rid: str, details: Optional[dict] = None) -> dict:
    body = {"error": exc.error, "message": exc.message, "request_id": rid}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the common error body.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        ParseError              → 400 Bad Request (raw body logged)
        RequestValidationError  → translated to one of the above, or 404
                                  for an id in the path that is not a valid integer
        HTTPException           → 400 Invalid JSON for undecodable bodies,
                                  otherwise its own status (404/405 routing)
        NotFoundError           → 404 Not Found
        InternalError           → 500 Internal Server Error (generic message)
        PostboardError (base)   → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error (unexpected errors)

    Error bodies never carry SQL text or stack traces; those go to the log.
    """

    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s | %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=400, content=_error_body(exc, rid, exc.context))

    async def handle_parse_error(request: Request, exc: ParseError):
        rid = request_id_var.get("")
        raw = get_raw_body()
        logger.warning(
            "[%s] Invalid JSON body on %s %s: %s | %d bytes: %r",
            rid,
            request.method,
            request.url.path,
            exc.message,
            len(raw),
            raw[:RAW_BODY_LOG_LIMIT].decode("utf-8", errors="replace"),
        )
        return JSONResponse(status_code=400, content=_error_body(exc, rid))

    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(status_code=404, content=_error_body(exc, rid))

    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Fold FastAPI's 422 into the API's own 400/404 errors."""
        errors = exc.errors()

        for error in errors:
            if error.get("type") == "json_invalid":
                parser_message = (error.get("ctx") or {}).get("error") or error.get("msg")
                return await handle_parse_error(request, ParseError(message=str(parser_message)))

        if any(tuple(error.get("loc", ()))[:1] == ("path",) for error in errors):
            post_id = request.path_params.get("post_id")
            return await handle_not_found(
                request,
                NotFoundError(resource="post", resource_id=None if post_id is None else str(post_id)),
            )

        if all(error.get("type") == "missing" for error in errors):
            # Missing body: report every required field
            return await handle_validation_error(
                request,
                ValidationError(
                    message=f"{', '.join(REQUIRED_FIELDS)} are required and must be non-empty",
                    fields=list(REQUIRED_FIELDS),
                ),
            )

        return await handle_validation_error(
            request,
            ValidationError(
                message="Request body has invalid fields",
                context={
                    "errors": [
                        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg")}
                        for error in errors
                    ]
                },
                error="Invalid fields",
            ),
        )

    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Body decode failures become Invalid JSON; routing errors get the common body."""
        if exc.status_code == 400 and exc.detail == BODY_PARSE_DETAIL:
            cause = exc.__cause__
            return await handle_parse_error(
                request, ParseError(message=str(cause) if cause else BODY_PARSE_DETAIL)
            )

        rid = request_id_var.get("")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": HTTPStatus(exc.status_code).phrase,
                "message": str(exc.detail),
                "request_id": rid,
            },
            headers=getattr(exc, "headers", None),
        )

    async def handle_internal_error(request: Request, exc: PostboardError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        generic = InternalError()
        return JSONResponse(status_code=500, content=_error_body(generic, rid))

    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500 body, full stack trace in the server log."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": InternalError.error,
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(ParseError, handle_parse_error)
    app.add_exception_handler(NotFoundError, handle_not_found)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(PostboardError, handle_internal_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None, configure_logging: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit settings (tests); defaults to the module singleton.
        configure_logging: Install the root logging config at startup. Tests
            turn this off so pytest's log capture stays in place.
    """
    config = settings or default_settings

    app = FastAPI(
        title="Postboard API",
        description="Blog post store: create, list, delete and mark posts as read.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.configure_logging = configure_logging

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RawBody → RequestID → Logging → CORS → routes

    origins = config.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RawBodyMiddleware, max_body_size=config.max_body_size)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(posts.router, prefix=config.api_prefix)
    app.include_router(posts.read_state_router, prefix=config.api_prefix)
    if config.legacy_routes and config.api_prefix:
        # v1 clients call /posts without the prefix
        app.include_router(posts.router, include_in_schema=False)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console-script entry point: serve the app with uvicorn."""
    uvicorn.run(
        "postboard.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `postboard.main:app` to be importable
app = create_app()
