"""Main module for the FastAPI application."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from api.config import get_settings
from api.middleware import (
    limiter,
    rate_limit_exception_handler,
    streaming_unsupported_handler,
    validation_exception_handler,
)
from api.routers import configuration, dependencies, download, health
from core.errors import StreamingUnsupportedError

logger = logging.getLogger(__name__)

# Load settings
settings = get_settings()

# Initialize the FastAPI application
app = FastAPI(
    title="DL Console",
    description="Local control plane for the media downloader: dependency checks and live download progress",
    docs_url=None,
    redoc_url=None,
)
app.state.limiter = limiter

# Register the custom exception handlers
app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StreamingUnsupportedError, streaming_unsupported_handler)


# ---------------------------------------------------------------------------
# Security headers middleware
# ---------------------------------------------------------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:  # noqa: ANN001
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware
allowed_origins = [f"http://{h.strip()}:{settings.port}" for h in settings.allowed_hosts.split(",") if h.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Mount static files
static_dir = Path(__file__).parent.parent.parent / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=static_dir), name="static")


# Include routers for modular endpoints
app.include_router(health)
app.include_router(dependencies)
app.include_router(configuration)
app.include_router(download)
