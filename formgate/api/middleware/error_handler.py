"""Global exception handlers for the FastAPI application.

Expected failures never reach these handlers: gates and services return
``Err`` values that the pipeline renders itself. What is left are the
framework's own ``HTTPException`` (unknown path, wrong method) and genuine
bugs. Both are rendered as the same error envelope.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from formgate.api.utils.responses import rejection_response
from formgate.core.config import Settings, get_settings
from formgate.core.context import RequestContext
from formgate.core.error_context import sanitize_error_context
from formgate.core.errors import ErrorCode, Rejection, Severity


def _settings_for(request: Request) -> Settings:
    app = request.scope.get("app")
    settings: Settings | None = getattr(app.state, "settings", None) if app else None
    return settings or get_settings()


def rejection_for_status(status_code: int, detail: str) -> Rejection:
    """Map a framework HTTP status onto a rejection.

    Args:
        status_code: Status carried by the ``HTTPException``.
        detail: The exception's detail text.

    Returns:
        Rejection: NOT_FOUND and METHOD_NOT_ALLOWED get their own codes;
        other client errors are BAD_REQUEST, server errors INTERNAL_ERROR.
    """
    if status_code == status.HTTP_404_NOT_FOUND:
        return Rejection.not_found()
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return Rejection.method_not_allowed()
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return Rejection(
            status_code,
            ErrorCode.INTERNAL_ERROR.value,
            detail,
            severity=Severity.CRITICAL,
        )
    return Rejection(status_code, ErrorCode.BAD_REQUEST.value, detail)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException.

    Args:
        request: The request that caused the exception
        exc: The HTTPException to handle

    Returns:
        Response: Error envelope with the exception's status

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    # Type narrowing - this handler only receives HTTPException
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    rejection = rejection_for_status(exc.status_code, str(exc.detail))
    error_context = sanitize_error_context(
        exc,
        {
            "status": exc.status_code,
            "method": request.method,
            "path": str(request.url.path),
            "detail": exc.detail,
        },
    )
    logger.info(
        "HTTP exception",
        **RequestContext.current().as_fields(),
        **error_context,
    )

    if exc.headers:
        rejection = rejection.with_headers(exc.headers)
    return rejection_response(rejection)


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle generic exceptions.

    Catches all unhandled exceptions and converts them to a safe error
    envelope. In production, internal error details are hidden from clients.

    Args:
        request: The request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: 500 error envelope
    """
    settings = _settings_for(request)
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        **RequestContext.current().as_fields(),
        **error_context,
    )

    if settings.environment == "production":
        return rejection_response(Rejection.internal())

    details = {
        "type": type(exc).__name__,
        "error": str(exc),
        "stack_trace": traceback.format_tb(exc.__traceback__),
    }
    return rejection_response(
        Rejection.internal(f"Internal server error: {type(exc).__name__}"), details
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
