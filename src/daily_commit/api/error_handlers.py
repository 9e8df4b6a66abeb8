"""
FastAPI exception handlers for structured error responses.

Maps job exceptions to HTTP status codes:

- invalid input (request or pydantic validation) -> 400
- rate limit exceeded -> 429
- everything else -> 500 with a short message only (no internals)
"""

import logging
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from daily_commit.errors import JobError, RateLimitExceeded
from daily_commit.retry.exceptions import RetryExhausted

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _summarize_errors(errors: list[dict]) -> list[dict]:
    """Keep only the JSON-safe parts of pydantic error entries."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in errors
    ]


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": _request_id(request),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle invalid request bodies (sanitization failures included).

    Maps to 400 Bad Request.
    """
    errors = _summarize_errors(exc.errors())
    logger.warning("Invalid request format", extra={"errors": errors})

    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "invalid_request",
        "Request validation failed",
        {"errors": errors},
    )


async def pydantic_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors raised outside request parsing.

    Maps to 400 Bad Request (client error).
    """
    errors = _summarize_errors(exc.errors())
    logger.warning("Invalid input", extra={"errors": errors})

    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "invalid_request",
        "Request validation failed",
        {"errors": errors},
    )


async def rate_limit_error_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Handle callers over their fixed-window quota.

    Maps to 429 Too Many Requests.
    """
    logger.warning("Rate limit exceeded", extra={"client_id": exc.identifier})

    return _error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "rate_limited",
        "Too many requests, please try again later",
    )


async def retry_exhausted_handler(request: Request, exc: RetryExhausted) -> JSONResponse:
    """
    Handle operations that gave up after their retry budget.

    Maps to 500; attempt count and last error are logged, not returned.
    """
    logger.error(
        "Retry exhausted",
        extra={
            "operation": exc.label,
            "attempts": exc.attempts,
            "last_error": type(exc.last_error).__name__ if exc.last_error else None,
        },
    )

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "job_failed",
        "Daily commit failed",
    )


async def job_error_handler(request: Request, exc: JobError) -> JSONResponse:
    """
    Handle job failures (credentials, configuration, git, file system).

    Maps to 500 Internal Server Error with the short error message.
    """
    logger.error(
        "Job error",
        extra={"error_type": type(exc).__name__, "details": exc.details},
    )

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "job_failed",
        exc.message,
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.exception(
        "Unexpected error",
        extra={"error_type": type(exc).__name__},
    )

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred",
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    RequestValidationError: request_validation_error_handler,
    PydanticValidationError: pydantic_validation_error_handler,
    RateLimitExceeded: rate_limit_error_handler,
    RetryExhausted: retry_exhausted_handler,
    JobError: job_error_handler,
    Exception: generic_error_handler,
}
