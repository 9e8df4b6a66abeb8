"""
Daily Commit job.

Rewrites a text file inside a git checkout, commits it and pushes the change,
either on a Celery beat schedule or through an HTTP trigger. Around that single
business action sits the reliability control plane:

- Retry executor with exponential backoff and jitter
- TTL credential cache in front of the secrets store
- Batched metrics aggregation and log gating
- Per-invocation lifecycle reset for reused worker processes
- Fixed-window rate limiting of the HTTP entrypoint

Architecture: FastAPI / Celery entrypoints -> JobRuntime (composition root) -> DailyCommitJob
"""

__version__ = "0.1.0"
