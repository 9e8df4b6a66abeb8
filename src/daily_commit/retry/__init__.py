"""
Retry executor with exponential backoff.

Operations are retried according to an immutable RetryPolicy per operation
class (scm, credentials, file). Failures are classified by their exception
class: TransientInfraError is retried, everything else stops immediately.

Main Components:
    - RetryPolicy: Immutable attempts / delay / jitter settings
    - compute_delay: Pure backoff calculation
    - RetryExecutor: Drives attempts and non-blocking waits
    - RetryExhausted: Raised when an operation gives up

Usage:
    >>> from daily_commit.retry import RetryExecutor
    >>> executor = RetryExecutor()
    >>> value = await executor.execute(operation, settings.retry_policy("scm"), "scm_publish")
"""

from daily_commit.retry.backoff import compute_delay
from daily_commit.retry.exceptions import RetryExhausted
from daily_commit.retry.executor import RetryExecutor, RetryStats, is_retryable
from daily_commit.retry.policy import RetryPolicy

__all__ = [
    "RetryExecutor",
    "RetryExhausted",
    "RetryPolicy",
    "RetryStats",
    "compute_delay",
    "is_retryable",
]
