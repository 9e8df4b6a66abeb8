"""
Celery tasks for the scheduled trigger.

- celery_app.py: Celery application configuration (broker, backend, beat schedule)
- commit_tasks.py: Task definition (daily_commit)
"""

from daily_commit.tasks.celery_app import celery_app
from daily_commit.tasks.commit_tasks import run_daily_commit_task

__all__ = [
    "celery_app",
    "run_daily_commit_task",
]
