"""
API-specific response models for FastAPI endpoints.

These wrap the core JobResult with status information.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from daily_commit.models.job import JobResult


class CommitResponse(BaseModel):
    """Response for the commit endpoint."""

    status: str = Field(
        description="Request status",
        examples=["success"]
    )
    result: JobResult = Field(
        description="Outcome of the rewrite-commit-push run"
    )


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "unhealthy"]
    )
    version: str = Field(
        description="Service version",
        examples=["0.1.0"]
    )
    environment: str = Field(
        description="Configuration tier",
        examples=["development", "production"]
    )
    checks: dict[str, Any] = Field(
        description="Individual check results (environment, memory, credential store)"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp (UTC)"
    )


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(
        description="Error code or type",
        examples=["invalid_request", "rate_limited", "internal_error"]
    )
    message: str = Field(
        description="Short human-readable error message"
    )
    details: Optional[dict] = Field(
        default=None,
        description="Additional error details (validation failures only)"
    )
    request_id: Optional[str] = Field(
        default=None,
        description="Request ID for tracing (if available)"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Error timestamp (UTC)"
    )
