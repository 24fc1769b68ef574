"""
api/main.py -- FastAPI application entry point for SaltGate.

Run with:  uvicorn api.main:app --reload
           python main.py serve

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- browser clients do the hashing, so they call us cross-origin;
                           outermost so every response, 429s included, carries CORS headers
  2. log_requests       -- one log line per request with latency
  3. SlowAPIMiddleware  -- finds app.state.limiter; the login limit itself is
                           enforced by @limiter.limit on the route

Lifespan opens the user store selected by DATABASE_URL and builds the
AuthService on startup; shutdown closes the store.

Error boundary: every AuthError raised below the routes is translated here,
and only here, into {success: false, message, code} with its status code.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from auth.service import AuthService
from auth.store import open_user_store
from core.config import get_settings
from core.errors import AuthError

API_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("saltgate.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the user store on startup and close it on shutdown.

    The store is chosen once here from DATABASE_URL and injected into the
    service. Nothing else in the process holds a reference to it.
    """
    logger.info("SaltGate API starting up")
    app.state.user_store = open_user_store(_settings.database_url)
    app.state.auth_service = AuthService(app.state.user_store, pepper=_settings.salt_pepper)
    logger.info("User store initialized (%d users)", app.state.user_store.count_users())

    yield

    app.state.user_store.close()
    logger.info("SaltGate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="SaltGate API",
    description="Salted challenge-response password login with signed session tokens.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

# Starlette makes the last registered middleware the outermost, so they are
# registered innermost-first: SlowAPI, request logging, then CORS.

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


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


app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origin_list,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so clients can parse
# errors uniformly.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=code).model_dump(),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Translate the typed error taxonomy into status + envelope."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=exc.__cause__)
    return _error(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or wrongly-typed fields are a 400, same as missing fields."""
    return _error(400, "validation_error", "Invalid request")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error(429, "rate_limited", "Too many requests")
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown paths and wrong methods get the same envelope as everything else."""
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "server_error", "Server error")


# ---------------------------------------------------------------------------
# Health endpoint
#
# No rate limit -- health checks from load balancers must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and store reachability."""
    store = request.app.state.user_store
    return HealthResponse(
        version=API_VERSION,
        components={"app": "ok", "database": "ok" if store.ping() else "error"},
    )
