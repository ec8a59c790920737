"""
api/main.py -- FastAPI application entry point for the CV registry.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. log_requests     -- one access-log line per request
  2. answer_preflight -- OPTIONS on any path -> 200, CORS headers, empty body, no auth
  3. CORSMiddleware   -- adds CORS headers to non-OPTIONS browser requests

Lifespan handles startup (settings, engine, stores) and shutdown (dispose the
engine) symmetrically. Settings are resolved when this module is imported, so
a missing JWT_SECRET or DATABASE_URL stops the process before it serves.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.records import router as records_router
from auth.store import UserStore
from core.config import get_settings
from core.database import create_store_engine, ping
from core.errors import CvRegistryError, NotAllowedError, NotFoundError, StoreError
from records.store import RecordStore

__version__ = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("cvregistry.api")

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the engine and stores on startup; dispose the pool on shutdown.

    The engine is the only shared mutable state between requests. Stores hold
    a reference to it and check connections out per call.
    """
    settings = get_settings()
    logger.info("CV registry API starting up")
    engine = create_store_engine(
        settings.database_url,
        timeout_seconds=settings.store_timeout_seconds,
        echo=settings.debug,
    )
    app.state.engine = engine
    app.state.user_store = UserStore(engine)
    app.state.record_store = RecordStore(engine)
    logger.info("Stores initialized (%s)", engine.url.get_backend_name())

    yield

    engine.dispose()
    logger.info("CV registry API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="CV Registry API",
    description="Staff authentication and read access to submitted CV records.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# add_middleware() and @app.middleware wrap the app, so the LAST one registered
# is the outermost. Registration order below is innermost first.
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def answer_preflight(request: Request, call_next):
    """Answer every OPTIONS request with 200, CORS headers and an empty body.

    Registered outside CORSMiddleware so browser preflights never reach its
    allow-list checks (which would answer 400 for an unlisted method or
    header) and plain OPTIONS never falls through to the router as a 405.
    Runs before routing and before the session guard.
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=_CORS_HEADERS)
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(records_router, tags=["CV Records"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope ({"message": ...}) so
# clients can parse errors uniformly without inspecting status codes.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, error=error).model_dump(exclude_none=True),
        headers={"Access-Control-Allow-Origin": "*"},
    )


@app.exception_handler(CvRegistryError)
async def registry_error_handler(request: Request, exc: CvRegistryError) -> JSONResponse:
    """Render ValidationError/AuthenticationError/NotFoundError/NotAllowedError/StoreError.

    StoreError includes the driver error text when EXPOSE_STORE_ERRORS is on.
    That text can reveal table names or hosts; turn the setting off where
    clients are not trusted.
    """
    error = None
    if isinstance(exc, StoreError) and get_settings().expose_store_errors:
        error = exc.detail
    return _error_response(exc.status_code, exc.message, error)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the body, path or query parameters fail validation."""
    logger.debug("Request validation failed on %s: %s", request.url.path, exc.errors())
    return _error_response(400, "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (404 unknown path, 405 wrong verb) in the common envelope."""
    if exc.status_code == 405:
        err: CvRegistryError = NotAllowedError("Method not allowed")
    elif exc.status_code == 404:
        err = NotFoundError("Not found")
    else:
        return _error_response(exc.status_code, str(exc.detail))
    return _error_response(err.status_code, err.message)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "Internal server error")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No auth: load balancers call it.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability."""
    engine = getattr(request.app.state, "engine", None)
    database = "ok" if engine is not None and ping(engine) else "error"
    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        version=__version__,
        components={"app": "ok", "database": database},
    )
