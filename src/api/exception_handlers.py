"""Exception handlers for the FastAPI application.

Every failure leaves the API as ``{error_code, error_kind, message, details}``.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.exceptions import AppException, ErrorCode, ErrorKind

logger = structlog.get_logger()

_HTTP_STATUS_KINDS = {
    404: ErrorKind.NOT_FOUND,
    405: ErrorKind.VALIDATION,
    409: ErrorKind.CONFLICT,
}


def _http_error_kind(status_code: int) -> ErrorKind:
    if status_code in _HTTP_STATUS_KINDS:
        return _HTTP_STATUS_KINDS[status_code]
    if status_code >= 500:
        return ErrorKind.INTERNAL
    return ErrorKind.VALIDATION


def error_response(
    status_code: int,
    error_code: str,
    kind: ErrorKind,
    message: str,
    details: Any | None = None,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    """Render the error envelope."""
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "error_kind": kind.value,
            "message": message,
            "details": details,
        },
        headers=headers,
    )


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    # Drop the leading "body"/"query" segment so fields read like the schema.
    details = []
    for error in exc.errors():
        loc = [str(x) for x in error["loc"]]
        if len(loc) > 1 and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        details.append({"field": ".".join(loc), "message": error["msg"], "type": error["type"]})
    return details


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> ORJSONResponse:
        """Business failures keep their code and kind."""
        log = logger.error if exc.kind == ErrorKind.INTERNAL else logger.warning
        log(
            "app_exception",
            error_code=exc.error_code.value,
            error_kind=exc.kind.value,
            message=exc.message,
        )
        return error_response(
            exc.status_code, exc.error_code.value, exc.kind, exc.message, exc.details
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Unknown routes and methods from the router."""
        return error_response(
            exc.status_code,
            "HTTP_ERROR",
            _http_error_kind(exc.status_code),
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Malformed request bodies and query parameters."""
        details = _validation_details(exc)
        logger.info("request_validation_failed", fields=[d["field"] for d in details])
        return error_response(
            422,
            ErrorCode.VALIDATION_ERROR.value,
            ErrorKind.VALIDATION,
            "Request validation failed",
            details,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
        """Anything else is an internal failure; the message is hidden in production."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            error_type=type(exc).__name__,
            request_id=request_id,
            exc_info=True,
        )
        message = "An unexpected error occurred" if settings.is_production else str(exc)
        return error_response(
            500,
            ErrorCode.INTERNAL_ERROR.value,
            ErrorKind.INTERNAL,
            message,
            {"request_id": request_id},
        )
