"""
Celery task for the scheduled daily commit.

The task runs the same JobRuntime as the HTTP entrypoint, without rate
limiting. Retrying is done inside the runtime (per operation class), so the
task itself is not retried by Celery.
"""

import asyncio
from typing import Optional

import structlog
from celery import Task

from daily_commit.config import settings
from daily_commit.logging_config import configure_logging
from daily_commit.models.job import JobRequest
from daily_commit.runtime import JobRuntime
from daily_commit.tasks.celery_app import celery_app

logger = structlog.get_logger(__name__)


class CommitTask(Task):
    """
    Base task class with resource initialization.

    Builds the runtime once per worker process and reuses it across task
    invocations. The runtime's HTTP client and lock are bound to one event
    loop, so the task keeps its own loop instead of calling asyncio.run.
    """

    _runtime: Optional[JobRuntime] = None
    _loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def runtime(self) -> JobRuntime:
        """Get or initialize the job runtime (singleton per worker)."""
        if self._runtime is None:
            configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
            self._runtime = JobRuntime.build(settings)
        return self._runtime

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """Get or create the worker's event loop."""
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop


@celery_app.task(
    bind=True,
    base=CommitTask,
    name="daily_commit",
)
def run_daily_commit_task(self: CommitTask, request_dict: Optional[dict] = None) -> dict:
    """
    Run one scheduled job invocation.

    Args:
        request_dict: Optional JobRequest overrides (JSON-serializable)

    Returns:
        JobResult as dict

    Raises:
        pydantic.ValidationError: Invalid overrides
        JobError: Job failed (already retried per operation class)
    """
    request = JobRequest.model_validate(request_dict) if request_dict else None

    logger.info("Scheduled job started", task_id=self.request.id)

    try:
        result = self.loop.run_until_complete(
            self.runtime.invoke(request, trigger="schedule", request_id=self.request.id)
        )
    except Exception as exc:
        logger.error(
            "Scheduled job failed",
            task_id=self.request.id,
            error_type=type(exc).__name__,
        )
        raise

    logger.info(
        "Scheduled job completed",
        task_id=self.request.id,
        execution_time_ms=result.execution_time_ms,
        retries=result.retries,
    )
    return result.model_dump(mode="json")
