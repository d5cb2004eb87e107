"""Application error taxonomy and the handlers that turn errors into JSON responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("voice_signage")


class AppError(Exception):
    """Base class for errors that map to an HTTP failure response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class NotFound(AppError):
    """Unknown record id."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Message not found."


class UploadError(AppError):
    """Audio payload missing or rejected by the object store."""

    default_message = "An error occurred while uploading the file."

    def __init__(self, message: str | None = None, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.status_code = status_code


class TranscriptionError(AppError):
    """Speech-to-text failure. Only raised inside the background pipeline."""

    default_message = "An error occurred while converting speech to text."


class InternalError(AppError):
    """Unexpected datastore or collaborator fault."""


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Convert an AppError into the JSON failure shape."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__)
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed path ids, query params and bodies become 400s."""
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query"))
    detail = first.get("msg", "Invalid request")
    return error_response(status.HTTP_400_BAD_REQUEST, f"{location}: {detail}" if location else detail)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the detail server-side, return a generic message."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, InternalError.default_message)
