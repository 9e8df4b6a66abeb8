"""
FastAPI dependency injection for the Daily Commit service.

The JobRuntime is built once per process (see main.create_app) and stored on
``app.state``; endpoints receive it through ``get_runtime``.
"""

from functools import lru_cache

from fastapi import Request

from daily_commit.config import Settings, settings
from daily_commit.runtime import JobRuntime


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


def get_runtime(request: Request) -> JobRuntime:
    """
    Get the process-wide job runtime.

    Args:
        request: Incoming request (gives access to app.state)

    Returns:
        JobRuntime instance
    """
    return request.app.state.runtime


def get_caller_id(request: Request) -> str:
    """
    Caller identity used for rate limiting.

    First address of X-Forwarded-For when behind a proxy, otherwise the
    socket peer address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
