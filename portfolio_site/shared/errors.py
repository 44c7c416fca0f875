"""
Secure Error Handling

Logs full error details server-side, hands sanitized messages to clients and
gives every error response the same {"error", "category"} shape.
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class DataAccessError(RuntimeError):
    """A remote read failed and the caller asked for the failure to propagate."""


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Project upload")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=True
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def error_response(message: str, category: str, status_code: int) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "category": category,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the shared exception handlers to an app."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid {field}: {first.get('msg')}" if field else "Invalid request."
        return error_response(
            message=message,
            category="client_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s", request.url.path)
        return error_response(
            message="A database error occurred while processing the request.",
            category="database",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(DataAccessError)
    async def data_access_exception_handler(request: Request, exc: DataAccessError):
        message, _ = log_and_sanitize_error(exc, f"Loading {request.url.path}")
        return error_response(
            message=message,
            category="database",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail
        message = (
            detail.get("message") if isinstance(detail, dict) else str(detail)
        ) or "Request failed."
        category = (
            detail.get("category") if isinstance(detail, dict) else None
        )

        if not category:
            if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
                category = "security"
            elif exc.status_code == status.HTTP_404_NOT_FOUND:
                category = "not_found"
            elif exc.status_code >= 500:
                category = "server_error"
            else:
                category = "client_error"

        return error_response(
            message=message,
            category=category,
            status_code=exc.status_code,
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s", request.url.path, exc_info=exc)
        return error_response(
            message="An unexpected server error occurred. Please try again later.",
            category="server_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
