"""
Tubely API - FastAPI Application Entry Point.

Initializes the FastAPI application for the Tubely upload backend:
- Lifespan management for logging, scratch/assets directories and MongoDB
- CORS middleware for the browser client
- Request logging middleware with X-Process-Time and X-Request-ID headers
- Exception handler rendering UploadServiceError subclasses as JSON
- Health check endpoint
- Static serving of thumbnails under /assets
- All API endpoints versioned under /api/v1

Run locally with:
    uvicorn tubely.main:app --reload --port 8091
"""

import logging
import time

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import uvicorn

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tubely.api.v1 import api_router
from tubely.config import get_settings
from tubely.core.database import close_db, init_db
from tubely.core.exceptions import UnauthenticatedError, UploadServiceError
from tubely.utils.logger import setup_logging


logger = logging.getLogger(__name__)

# Status codes at or above this are logged at warning level
HTTP_ERROR_THRESHOLD = 400


# =============================================================================
# Application Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Manage application startup and shutdown.

    Startup configures logging, creates the scratch and assets directories and
    connects to MongoDB. Shutdown closes the MongoDB connection.
    """
    settings = get_settings()

    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    logger.info("Tubely API starting")
    logger.info(
        "Environment: %s, debug: %s, listening on %s:%s",
        settings.app_env,
        settings.debug,
        settings.host,
        settings.port,
    )

    Path(settings.scratch_dir).mkdir(parents=True, exist_ok=True)
    Path(settings.assets_root).mkdir(parents=True, exist_ok=True)
    logger.info("Scratch dir: %s, assets root: %s", settings.scratch_dir, settings.assets_root)

    try:
        await init_db(settings)
    except RuntimeError:
        logger.exception("Failed to initialize MongoDB")
        raise

    logger.info("Tubely API ready to accept requests")

    yield

    logger.info("Tubely API shutting down")
    await close_db()
    logger.info("Tubely API shutdown complete")


# =============================================================================
# FastAPI Application Instance
# =============================================================================

_settings = get_settings()

app = FastAPI(
    title="Tubely API",
    description="Upload pipeline for Tubely videos and thumbnails.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=_settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next) -> Response:
    """
    Log each request with its status and duration.

    Adds X-Process-Time and X-Request-ID headers to every response.
    """
    request_id = f"{time.time_ns()}"
    start_time = time.perf_counter()

    logger.debug("Request started: %s %s [%s]", request.method, request.url.path, request_id)

    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "Request failed: %s %s [%s]", request.method, request.url.path, request_id
        )
        raise

    process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
    response.headers["X-Process-Time"] = f"{process_time_ms}ms"
    response.headers["X-Request-ID"] = request_id

    log_level = logging.DEBUG if response.status_code < HTTP_ERROR_THRESHOLD else logging.WARNING
    logger.log(
        log_level,
        "Request completed: %s %s [Status: %s] [Time: %sms] [%s]",
        request.method,
        request.url.path,
        response.status_code,
        process_time_ms,
        request_id,
    )

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(UploadServiceError)
async def upload_error_handler(request: Request, exc: UploadServiceError) -> JSONResponse:
    """Render pipeline errors as ``{"error", "message", "reason"}`` with their status."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500 without internal details."""
    logger.error(
        "Internal server error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
            "reason": None,
        },
    )


# =============================================================================
# Health Check Endpoint
# =============================================================================


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, Any]:
    """Liveness probe; does not check dependencies."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "Tubely Backend",
    }


# =============================================================================
# Routes and Static Assets
# =============================================================================

app.include_router(api_router, prefix="/api/v1")

# Directory is created by the lifespan
app.mount(
    "/assets",
    StaticFiles(directory=_settings.assets_root, check_dir=False),
    name="assets",
)


if __name__ == "__main__":
    uvicorn.run(
        "tubely.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.debug,
        log_level=_settings.log_level,
    )
