"""
api/main.py -- Jobly FastAPI application.

Run with:  uvicorn asgi:app --reload

Request path through the middleware (outermost first; Starlette makes the
most recently added middleware the outermost):
  log_requests              -- one access-log line per request
  TrustedHostMiddleware     -- Host header allow-list
  CORSMiddleware            -- browser origins from Settings.cors_origins
  SlowAPIMiddleware         -- per-route limits registered on api.limiter
  AuthenticationMiddleware  -- bearer token -> request.state.user; never rejects

Route-level authorization is done afterwards by the auth.dependencies gates.
Every error leaves the app as the ErrorResponse envelope built by
_error_response().
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.companies import router as companies_router
from api.routes.v1.jobs import router as jobs_router
from api.routes.v1.users import router as users_router
from auth.middleware import AuthenticationMiddleware
from auth.store import UserStore
from core.config import get_settings
from core.db import Database
from core.errors import AppError
from listings.store import CompanyStore, JobStore

_VERSION = "0.1.0"
_API_PREFIX = "/api/v1"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("jobly.api")

_settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open one Database, hang the stores off app.state, dispose on shutdown."""
    db = Database(_settings.database_url)
    await db.connect()
    app.state.db = db
    app.state.companies = CompanyStore(db)
    app.state.jobs = JobStore(db)
    app.state.users = UserStore(db)
    logger.info("Jobly API %s ready (db=%s)", _VERSION, db.engine.url.render_as_string(hide_password=True))
    try:
        yield
    finally:
        await db.close()
        logger.info("Jobly API stopped")


app = FastAPI(
    title="Jobly API",
    description="Companies, job postings, and the users who apply to them.",
    version=_VERSION,
    lifespan=lifespan,
)
app.state.limiter = limiter

app.add_middleware(AuthenticationMiddleware, secret=_settings.secret_key)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
    max_age=3600,
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    client = request.client.host if request.client else "-"
    logger.info("%s %s -> %d (%.1fms) from %s", request.method, request.url.path, response.status_code, elapsed_ms, client)
    return response


for _router, _tag in (
    (auth_router, "Auth"),
    (companies_router, "Companies"),
    (jobs_router, "Jobs"),
    (users_router, "Users"),
):
    app.include_router(_router, prefix=_API_PREFIX, tags=[_tag])


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Store and gate errors carry their own status and code."""
    if exc.status_code == 401:
        logger.info("Unauthorized %s %s", request.method, request.url.path)
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit hit on %s %s", request.method, request.url.path)
    response = _error_response(429, "rate_limited", "Too many requests.", str(exc.detail))
    response.headers["Retry-After"] = "60"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query strings are a 400, like any other bad input."""
    return _error_response(400, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort. The exception goes to the log only, never into the body."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get(f"{_API_PREFIX}/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Liveness plus a database round trip. No auth, no rate limit."""
    db: Database = request.app.state.db
    db_ok = await db.ping()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=_VERSION,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
