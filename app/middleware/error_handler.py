"""Error handling middleware."""

import structlog
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException, ServerErrorException

logger = structlog.get_logger(__name__)


def error_body(request: Request, error: str, message: object) -> dict:
    """Uniform error payload returned by every handler."""
    return {"error": error, "message": message, "path": str(request.url)}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Args:
        request: Request object
        exc: Application exception

    Returns:
        JSON error response
    """
    if isinstance(exc, ServerErrorException):
        logger.error("server_error", path=request.url.path, message=exc.message)
    elif exc.status_code >= status.HTTP_400_BAD_REQUEST:
        logger.info(
            "request_rejected",
            path=request.url.path,
            error=exc.__class__.__name__,
            status_code=exc.status_code,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.__class__.__name__, exc.message),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions raised by the framework (404 routes, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, "HTTPException", exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle validation errors.

    Args:
        request: Request object
        exc: Validation exception

    Returns:
        JSON error response with validation details
    """
    content = error_body(request, "ValidationError", "Request validation failed")
    content["details"] = jsonable_encoder(exc.errors())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    The exception is logged with its traceback; the client only sees a
    generic message.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error_type=exc.__class__.__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(request, "InternalServerError", "An unexpected error occurred"),
    )
