"""Error Handlers — map exceptions to the marketplace's JSON error envelope.

Invariants:
    - ChoreMatchError → its own status and to_response() envelope
    - RequestValidationError → 400 VALIDATION_ERROR with per-field details, no inputs echoed
    - Exception (catch-all) → 500 INTERNAL_ERROR, traceback logged, nothing leaked
    - Errors carrying retry_after_ms get a Retry-After header (whole seconds, rounded up)

Design Decisions:
    - Domain errors logged at the level matching their severity, so 4xx noise stays out
      of ERROR dashboards
    - Handlers are module-level coroutines registered by register_error_handlers()
"""

import logging
from math import ceil

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chore_match.core.errors import ChoreMatchError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}

INTERNAL_ERROR_BODY = {
    "error": {
        "code": "INTERNAL_ERROR",
        "message": "An unexpected error occurred",
        "category": ErrorCategory.INTERNAL.value,
        "severity": ErrorSeverity.CRITICAL.value,
    },
}


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain, validation and catch-all handlers on app."""
    app.add_exception_handler(ChoreMatchError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_domain_error(request: Request, exc: ChoreMatchError) -> JSONResponse:
    logger.log(
        _LOG_LEVELS.get(exc.severity, logging.ERROR),
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "account_id": exc.context.account_id,
            "chore_id": exc.context.chore_id,
        },
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=_retry_after_header(exc.context.retry_after_ms),
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = validation_details(exc.errors())
    logger.info(
        f"Rejected {request.method} {request.url.path}: "
        f"{', '.join(d['field'] for d in details)}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": ErrorCategory.VALIDATION.value,
                "severity": ErrorSeverity.WARNING.value,
                "details": details,
            },
        },
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=INTERNAL_ERROR_BODY,
    )


def validation_details(errors) -> list[dict]:
    """Flatten pydantic errors to {field, message, type}. Inputs are dropped: they may hold passwords."""
    return [
        {
            "field": ".".join(str(part) for part in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in errors
    ]


def _retry_after_header(retry_after_ms: int | None) -> dict[str, str] | None:
    if retry_after_ms is None:
        return None
    return {"Retry-After": str(max(1, ceil(retry_after_ms / 1000)))}
