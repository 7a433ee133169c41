"""FastAPI application entry point for webtext-service.

Configures logging, middleware, exception handlers, lifecycle hooks, and
routes. The extraction engine is created once per process and shared by
all requests.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from webtext.core.config import settings
from webtext.routes import api, health
from webtext.routes.extract import router as extract_router
from webtext.routes.health import SERVICE_NAME, SERVICE_VERSION
from webtext.schemas.common import ErrorDetail, ErrorResponse
from webtext.services.extractors import (
    BrowserSession,
    ExtractionConfig,
    WebPageTextExtractor,
)

# ---------------------------------------------------------------------------
# Logging Configuration
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=settings.get_log_level_int(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup / shutdown lifecycle."""
    # --- Startup ---
    logger.info(
        "Starting %s (env=%s, port=%d)",
        SERVICE_NAME,
        settings.service_env,
        settings.port,
    )

    # Browser launches lazily on the first extraction
    config = ExtractionConfig.from_settings(settings)
    app.state.extractor = WebPageTextExtractor(BrowserSession(config), config)

    yield

    # --- Shutdown ---
    logger.info("Shutting down %s", SERVICE_NAME)
    await app.state.extractor.dispose()


# ---------------------------------------------------------------------------
# App instance
# ---------------------------------------------------------------------------

app = FastAPI(
    title="webtext API",
    version=SERVICE_VERSION,
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log every request with method, path, status, and duration."""
    start = time.monotonic()
    response = await call_next(request)
    duration_ms = (time.monotonic() - start) * 1000
    logger.info(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler that returns a structured JSON error."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    body = ErrorResponse(
        error=ErrorDetail(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred.",
        )
    )
    return JSONResponse(status_code=500, content=body.model_dump())


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

# Health check at /health (no prefix)
app.include_router(health.router)

# API v1 routes
app.include_router(api.router, prefix="/api/v1")

# Text extraction (prefixed with /api/v1)
app.include_router(extract_router)


# Additional health endpoint under API prefix for consistency
@app.get("/api/v1/health", tags=["health"])
async def api_health_check():
    """Health check under the /api/v1 prefix."""
    return {
        "status": "ok",
        "name": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.service_env,
    }
