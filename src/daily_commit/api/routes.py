"""
HTTP routes for the Daily Commit service.

- POST /commit: run the rewrite-commit-push job once (rate limited per caller)
- GET /health: diagnostics only, never runs the job
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from daily_commit.api.dependencies import get_caller_id, get_runtime, get_settings
from daily_commit.api.models import CommitResponse, ErrorResponse, HealthResponse
from daily_commit.config import Settings
from daily_commit.models.job import JobRequest
from daily_commit.runtime import JobRuntime

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/commit",
    response_model=CommitResponse,
    status_code=status.HTTP_200_OK,
    summary="Run the daily commit",
    description="""
    Rewrite a text file in the configured repository, commit it and push it.

    Every body field is optional: the file defaults to `daily-commit.txt`,
    the content and message to a timestamped "Daily commit" line, and the
    credential key to the configured secret name.
    """,
    responses={
        200: {"description": "File modified and changes pushed"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Job failed"},
    },
)
async def commit(
    request: Request,
    payload: Optional[JobRequest] = Body(default=None),
    runtime: JobRuntime = Depends(get_runtime),
    caller_id: str = Depends(get_caller_id),
) -> CommitResponse:
    """
    Run one job invocation for the calling client.

    Args:
        request: FastAPI request (for the request id)
        payload: Optional overrides
        runtime: Job runtime (injected)
        caller_id: Client identity for rate limiting (injected)

    Returns:
        CommitResponse with the job result
    """
    result = await runtime.invoke(
        payload,
        trigger="http",
        caller_id=caller_id,
        request_id=getattr(request.state, "request_id", None),
    )
    return CommitResponse(status="success", result=result)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="""
    Report credential-store reachability, memory usage and configuration
    completeness. Does not modify any file or repository.
    """,
    responses={
        200: {"description": "All checks passed"},
        503: {"description": "One or more checks failed"},
    },
)
async def health_check(
    runtime: JobRuntime = Depends(get_runtime),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Run diagnostic checks.

    Args:
        runtime: Job runtime (injected)
        settings: Application settings (injected)

    Returns:
        HealthResponse as JSON, 200 when healthy and 503 otherwise
    """
    healthy, checks = await runtime.health()

    health_status = "healthy" if healthy else "unhealthy"
    logger.info("Health check", status=health_status)

    response = HealthResponse(
        status=health_status,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        checks=checks,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )
