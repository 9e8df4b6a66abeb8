"""
Batched metrics aggregation.

Each job invocation produces one MetricRecord. Records are buffered in memory
and shipped to the metrics sink as a single AggregatedMetric when either:

- the batch holds ``batch_size`` records, or
- more than ``batch_timeout`` seconds passed since the last flush.

A flush clears the batch and resets the flush clock even when the sink call
fails: a dropped batch is an accepted loss, not retried here. Nothing is
persisted across process restarts.

The aggregator is process-wide mutable state. It is only touched by one
invocation at a time (JobRuntime serializes invocations), so no lock is held.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

import structlog

from daily_commit.monitoring.metrics import metrics_flushes_total
from daily_commit.monitoring.sinks import MetricsSink

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class MetricRecord:
    """
    Outcome of a single job invocation.

    Attributes:
        duration_ms: Wall time of the invocation (ms)
        success: Whether the business action completed
        error_count: Errors observed during the invocation
        retry_count: Retries performed by the retry executor
    """

    duration_ms: float
    success: bool
    error_count: int = 0
    retry_count: int = 0

    def __post_init__(self) -> None:
        """Validate record invariants."""
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be >= 0")

        if self.error_count < 0 or self.retry_count < 0:
            raise ValueError("error_count and retry_count must be >= 0")


@dataclass(frozen=True)
class AggregatedMetric:
    """Aggregate over a non-empty batch of MetricRecords, computed at flush time."""

    total_executions: int
    successful_executions: int
    failed_executions: int
    average_duration_ms: float
    total_errors: int
    total_retries: int

    @property
    def success_rate(self) -> float:
        return self.successful_executions / self.total_executions

    @classmethod
    def from_records(cls, records: list[MetricRecord]) -> "AggregatedMetric":
        """
        Aggregate a batch.

        Raises:
            ValueError: If ``records`` is empty (average is undefined)
        """
        if not records:
            raise ValueError("Cannot aggregate an empty batch")

        successful = sum(1 for r in records if r.success)
        return cls(
            total_executions=len(records),
            successful_executions=successful,
            failed_executions=len(records) - successful,
            average_duration_ms=sum(r.duration_ms for r in records) / len(records),
            total_errors=sum(r.error_count for r in records),
            total_retries=sum(r.retry_count for r in records),
        )


class MetricsAggregator:
    """
    In-memory metric batch with size/time flush thresholds.

    Attributes:
        sink: Metrics sink receiving one publish call per flush
        batch_size: Record count that triggers an immediate flush
        batch_timeout: Seconds after which the next record triggers a flush
    """

    def __init__(
        self,
        sink: MetricsSink,
        batch_size: int,
        batch_timeout: float = DEFAULT_BATCH_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")

        self.sink = sink
        self.batch_size = batch_size
        self.batch_timeout = batch_timeout
        self._clock = clock
        self._batch: list[MetricRecord] = []
        # The flush clock starts at construction: the first record does not
        # flush on its own unless batch_size is 1.
        self._last_flush = clock()

    @property
    def pending(self) -> int:
        """Number of buffered records."""
        return len(self._batch)

    async def record(self, metric: MetricRecord, sink_id: str) -> None:
        """
        Buffer a record and flush if a threshold is reached.

        Best-effort: never raises.

        Args:
            metric: Invocation outcome
            sink_id: Namespace the aggregate is published under
        """
        try:
            self._batch.append(metric)
            should_flush = (
                len(self._batch) >= self.batch_size
                or self._clock() - self._last_flush > self.batch_timeout
            )
            if should_flush:
                await self.flush(sink_id)
        except Exception as exc:
            logger.error(
                "Failed to record metrics",
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def flush(self, sink_id: str) -> None:
        """
        Publish the aggregate of the current batch and clear it.

        No-op on an empty batch. The batch is cleared and the flush clock
        reset whether or not the sink call succeeds; sink errors propagate
        to the caller after that.
        """
        if not self._batch:
            return

        batch, self._batch = self._batch, []
        self._last_flush = self._clock()
        aggregated = AggregatedMetric.from_records(batch)

        try:
            await self.sink.publish(sink_id, aggregated, datetime.now(timezone.utc))
        except Exception:
            metrics_flushes_total.labels(outcome="failure").inc()
            logger.error(
                "Failed to publish batched metrics, batch dropped",
                namespace=sink_id,
                dropped=len(batch),
            )
            raise

        metrics_flushes_total.labels(outcome="success").inc()
        logger.info("Sent batched metrics", namespace=sink_id, records=len(batch))

    def clear(self) -> int:
        """
        Drop the batch without transmitting it.

        Returns:
            Number of records discarded
        """
        dropped = len(self._batch)
        self._batch = []
        return dropped
