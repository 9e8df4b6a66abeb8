"""
Celery application configuration for the scheduled job.

This module initializes the Celery app with Redis broker and result backend
and registers the daily beat schedule. Tasks are defined in commit_tasks.py.

Run a worker with an embedded beat scheduler:

    celery -A daily_commit.tasks.celery_app worker --beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from daily_commit.config import settings

celery_app = Celery(
    "daily_commit",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["daily_commit.tasks.commit_tasks"],
)

celery_app.conf.update(
    # Task execution
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,  # Hard limit (kills task)
    task_soft_time_limit=settings.CELERY_TASK_TIME_LIMIT - 30,  # Soft limit (raises exception)

    # Worker settings
    worker_concurrency=1,  # One job at a time per worker process
    worker_prefetch_multiplier=1,

    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Result backend
    result_expires=86400,  # Keep results for a day

    # Task tracking
    task_track_started=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Schedule
    beat_schedule={
        "daily-commit": {
            "task": "daily_commit",
            "schedule": crontab(hour=settings.SCHEDULE_HOUR, minute=settings.SCHEDULE_MINUTE),
        },
    },
)
