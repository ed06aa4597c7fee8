"""
Custom exceptions and error handlers.
"""
import logging
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from signengine.errors import EngineError
from signengine.utils.logging import get_request_id

logger = logging.getLogger(__name__)

# Engine error code -> HTTP status
ENGINE_STATUS_CODES = {
    "NOT_FOUND": 404,
    "DECODE_ERROR": 422,
    "CONFIGURATION_ERROR": 400,
    "INTEGRITY_ERROR": 500,
    "STORAGE_ERROR": 503,
}


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(status_code=status_code, detail=message)


class PayloadTooLargeException(AppException):
    """Uploaded document exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            status_code=413,
            code="PAYLOAD_TOO_LARGE",
            message=f"Document is {size} bytes; the limit is {limit} bytes",
            details={"size": size, "limit": limit},
        )


def request_id_for(request: Request) -> Optional[str]:
    """
    Request id for an error body.

    The middleware context is already reset when Starlette's outermost error
    handler runs, so the id stored on request.state is preferred.
    """
    return getattr(request.state, "request_id", None) or get_request_id()


def build_error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict] = None,
    request_id: Optional[str] = None,
) -> dict:
    """Build standardized error response."""
    response = {
        "error": True,
        "code": code,
        "message": message,
        "request_id": request_id or get_request_id(),
    }
    if details:
        response["details"] = details
    return response


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handle application exceptions."""
    logger.warning(f"AppException: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_response(
            exc.status_code,
            exc.code,
            exc.message,
            exc.details,
            request_id_for(request),
        ),
    )


async def engine_exception_handler(
    request: Request,
    exc: EngineError,
) -> JSONResponse:
    """Handle errors raised by the mapping, compositing, storage and audit layers."""
    status_code = ENGINE_STATUS_CODES.get(exc.code, 500)
    if status_code >= 500:
        logger.error(f"EngineError: {exc.code} - {exc.message}")
    else:
        logger.warning(f"EngineError: {exc.code} - {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=build_error_response(
            status_code,
            exc.code,
            exc.message,
            getattr(exc, "details", None),
            request_id_for(request),
        ),
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(f"HTTPException: {exc.status_code} - {exc.detail}")

    # Extract code and message from detail if structured
    if isinstance(exc.detail, dict):
        code = exc.detail.get("code", "HTTP_ERROR")
        message = exc.detail.get("message", str(exc.detail))
    else:
        code = "HTTP_ERROR"
        message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_response(
            exc.status_code, code, message, request_id=request_id_for(request)
        ),
    )


async def validation_exception_handler(
    request: Request,
    exc: ValidationError,
) -> JSONResponse:
    """Handle request body and Pydantic validation errors."""
    logger.warning(f"ValidationError: {exc.errors()}")

    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content=build_error_response(
            422,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": errors},
            request_id_for(request),
        ),
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")

    return JSONResponse(
        status_code=500,
        content=build_error_response(
            500,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            request_id=request_id_for(request),
        ),
    )
