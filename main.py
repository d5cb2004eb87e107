"""Voice Signage - visitor voice messages, moderated onto a rotating display."""

import logging
import time
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.database import open_session
from app.exceptions import (
    AppError,
    app_error_handler,
    error_response,
    request_validation_handler,
    unhandled_exception_handler,
)
from app.rate_limit import limiter
from app.routers import admin_messages_router, display_messages_router, upload_router

# Logging
logger = logging.getLogger("voice_signage")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
# One scheduler per signage viewer; keep its job bookkeeping out of the log
logging.getLogger("apscheduler").setLevel(logging.WARNING)

APP_VERSION = "0.1.0"

settings = get_settings()
for warning in settings.validate():
    logger.warning("Config: %s", warning)

app = FastAPI(title="Voice Signage", version=APP_VERSION)
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "connect-src 'self'"
        )
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # Slightly above the upload limit to leave room for multipart framing
        max_body_size = (settings.MAX_UPLOAD_SIZE_MB + 1) * 1024 * 1024
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > max_body_size:
            return error_response(413, "Request body too large")
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PREFIXES = ("/upload-audio", "/admin/messages", "/display/messages")

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log state-changing operations
        path = request.url.path
        method = request.method
        if method in ("POST", "PUT", "DELETE") and path.startswith(self.AUDIT_PREFIXES):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(AuditLogMiddleware)

# Templates
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

# API routers
app.include_router(upload_router)
app.include_router(admin_messages_router)
app.include_router(display_messages_router)


# --- Error handlers ---
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(SQLAlchemyError, unhandled_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    return error_response(429, "Too many uploads. Please try again later.")


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint, including a database round-trip."""
    try:
        with open_session() as db:
            db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        database = "unreachable"
    return {"status": "ok", "app": "voice-signage", "version": APP_VERSION, "database": database}


# --- Signage viewer ---
@app.get("/displayscreen", response_class=HTMLResponse)
def display_screen(request: Request) -> HTMLResponse:
    """Render the rotating signage page; it subscribes to /display/stream."""
    return templates.TemplateResponse(
        request,
        "displayscreen.html",
        {
            "stream_url": request.url_for("display_stream"),
            "fade_ms": 500,
        },
    )
