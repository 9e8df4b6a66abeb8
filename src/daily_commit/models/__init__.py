"""Data models for the Daily Commit job."""

from daily_commit.models.job import JobRequest, JobResult

__all__ = ["JobRequest", "JobResult"]
