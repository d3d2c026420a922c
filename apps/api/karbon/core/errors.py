"""Domain exceptions and the standardized error envelope used by every endpoint."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"


logger = structlog.get_logger()


# ── Domain exceptions ────────────────────────────────────────────────────────


class NotFound(LookupError):
    """A referenced company, source, input, result or certificate is missing."""

    error_code = "not_found"


class InvalidValue(ValueError):
    """A numeric or date input does not parse, is not finite, or is negative."""

    error_code = "invalid_value"


class InvalidDateRange(ValueError):
    """Certificate expiry date is not strictly after its issue date."""

    error_code = "invalid_date_range"


class Conflict(ValueError):
    error_code = "conflict"


class DuplicateDetail(Conflict):
    """A detail for the same (input, source) pair already exists."""

    error_code = "duplicate_detail"


class DuplicateInput(Conflict):
    """The company already submitted an input for that month."""

    error_code = "duplicate_input"


class SourceInUse(Conflict):
    error_code = "source_in_use"


class NotEligible(ValueError):
    """Certification is blocked; carries the eligibility verdict that blocked it."""

    error_code = "not_eligible"

    def __init__(self, message: str, verdict: Any) -> None:
        super().__init__(message)
        self.verdict = verdict


def to_http_exception(exc: Exception) -> HTTPException:
    """Translate a domain exception into an HTTPException with a structured detail."""
    if isinstance(exc, NotFound):
        status_code = 404
    elif isinstance(exc, (Conflict, NotEligible)):
        status_code = 409
    else:
        status_code = 422

    detail: Any = None
    if isinstance(exc, NotEligible):
        detail = exc.verdict.model_dump() if hasattr(exc.verdict, "model_dump") else exc.verdict

    return HTTPException(
        status_code=status_code,
        detail={
            "error": getattr(exc, "error_code", "invalid_request"),
            "message": str(exc),
            "detail": detail,
        },
    )


# ── Handlers ─────────────────────────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "unknown")


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions, report them and return the JSON envelope."""
    request_id = _request_id(request)

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )
    sentry_sdk.capture_exception(exc)

    body = ErrorResponse(
        error="internal_server_error",
        message="An unexpected error occurred. Our team has been notified.",
        request_id=request_id,
    )
    return JSONResponse(status_code=500, content=body.model_dump())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Wrap HTTPException details, structured or plain, in the same envelope."""
    if isinstance(exc.detail, dict):
        body = ErrorResponse(
            error=exc.detail.get("error", f"http_{exc.status_code}"),
            message=exc.detail.get("message", str(exc.detail)),
            detail=exc.detail.get("detail"),
            request_id=_request_id(request),
        )
    else:
        body = ErrorResponse(
            error=f"http_{exc.status_code}",
            message=str(exc.detail),
            request_id=_request_id(request),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
        headers=dict(exc.headers or {}),
    )
