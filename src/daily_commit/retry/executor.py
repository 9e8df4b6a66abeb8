"""
Generic retry executor.

Runs a zero-argument coroutine factory under a RetryPolicy:

    for attempt in 0 .. max_attempts - 1:
        success                 -> return value
        last attempt            -> RetryExhausted
        non-retryable failure   -> RetryExhausted (no further attempts)
        retryable failure       -> await asyncio.sleep(backoff), next attempt

The wait is an ``asyncio.sleep`` yield point; no lock is held across it.
There is no overall deadline: total time is bounded by
``max_attempts * max_delay_ms`` plus the operations' own timeouts.

Usage:
    executor = RetryExecutor()
    result = await executor.execute(lambda: store.fetch(key), policy, "credential_fetch")
"""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import structlog

from daily_commit.monitoring.metrics import retries_total, retry_exhausted_total
from daily_commit.retry.backoff import compute_delay
from daily_commit.retry.exceptions import RetryExhausted
from daily_commit.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def is_retryable(error: BaseException) -> bool:
    """Retryability comes from the error class set at the collaborator boundary."""
    return bool(getattr(error, "retryable", False))


@dataclass
class RetryStats:
    """
    Per-invocation retry accounting, shared across several execute() calls.

    Attributes:
        attempts: Operation invocations made
        retries: Attempts beyond the first of each operation
        failures: Attempts that raised
    """

    attempts: int = 0
    retries: int = 0
    failures: int = 0


class RetryExecutor:
    """
    Retry wrapper with exponential backoff.

    Attributes:
        sleep: Awaitable sleep taking seconds (asyncio.sleep by default)
        rng: Random source for jitter (None -> module-level random)
    """

    def __init__(self, sleep: Sleep = asyncio.sleep, rng: random.Random | None = None):
        self.sleep = sleep
        self.rng = rng

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy,
        label: str,
        stats: RetryStats | None = None,
    ) -> T:
        """
        Execute ``operation`` with retries.

        Args:
            operation: Zero-arg callable returning a fresh awaitable per attempt
            policy: Retry policy for this operation class
            label: Operation label for logs, metrics and RetryExhausted
            stats: Optional accumulator for the caller's invocation metrics

        Returns:
            The value of the first successful attempt

        Raises:
            RetryExhausted: attempts exhausted, non-retryable failure, or
                max_attempts <= 0 (then attempts=0 and last_error=None)
        """
        attempts = 0
        last_error: BaseException | None = None
        started = time.perf_counter()

        for attempt in range(policy.max_attempts):
            attempts += 1
            if stats is not None:
                stats.attempts += 1
                if attempt > 0:
                    stats.retries += 1

            try:
                result = await operation()
            except Exception as exc:
                last_error = exc
                if stats is not None:
                    stats.failures += 1

                logger.warning(
                    "Operation attempt failed",
                    operation=label,
                    attempt=attempt + 1,
                    max_attempts=policy.max_attempts,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )

                if attempt == policy.max_attempts - 1:
                    break

                if not is_retryable(exc):
                    logger.info(
                        "Error is not retryable, failing immediately",
                        operation=label,
                        error_type=type(exc).__name__,
                    )
                    break

                delay_ms = compute_delay(attempt, policy, self.rng)
                retries_total.labels(operation=label).inc()
                logger.info(
                    "Waiting before retry",
                    operation=label,
                    delay_ms=delay_ms,
                    next_attempt=attempt + 2,
                )
                await self.sleep(delay_ms / 1000)
                continue

            if attempt > 0:
                logger.info(
                    "Operation succeeded after retry",
                    operation=label,
                    attempt=attempt + 1,
                    elapsed_ms=int((time.perf_counter() - started) * 1000),
                )
            return result

        retry_exhausted_total.labels(operation=label).inc()
        logger.error(
            "Operation failed, retries exhausted",
            operation=label,
            attempts=attempts,
            max_attempts=policy.max_attempts,
            final_error_type=type(last_error).__name__ if last_error else None,
        )
        raise RetryExhausted(label=label, attempts=attempts, last_error=last_error)
