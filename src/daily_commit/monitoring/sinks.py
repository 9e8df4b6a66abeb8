"""
Metrics sink collaborators.

A sink receives one AggregatedMetric per flush:

- PushgatewayMetricsSink: pushes gauges to a Prometheus Pushgateway
- LogMetricsSink: emits the aggregate as a structured log entry (development)
"""

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

import structlog
from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

from daily_commit.errors import MetricsPublishError

if TYPE_CHECKING:
    from daily_commit.monitoring.aggregator import AggregatedMetric

logger = structlog.get_logger(__name__)


class MetricsSink(Protocol):
    """Destination for aggregated job metrics."""

    async def publish(
        self, namespace: str, aggregated: "AggregatedMetric", timestamp: datetime
    ) -> None:
        """
        Transmit one aggregate.

        Raises:
            MetricsPublishError: If the backend rejects or times out
        """
        ...


class PushgatewayMetricsSink:
    """
    Push aggregated metrics to a Prometheus Pushgateway.

    Each publish builds a fresh registry so the gateway always holds the
    latest aggregate for the namespace (used as the Pushgateway job name).
    """

    def __init__(self, gateway_url: str, timeout: float = 5.0):
        self.gateway_url = gateway_url
        self.timeout = timeout

    def _build_registry(self, aggregated: "AggregatedMetric", timestamp: datetime) -> CollectorRegistry:
        registry = CollectorRegistry()
        values = {
            "daily_commit_total_executions": ("Executions in the batch", aggregated.total_executions),
            "daily_commit_success_rate": ("Successful / total executions", aggregated.success_rate),
            "daily_commit_average_execution_duration_ms": (
                "Average execution duration (ms)",
                aggregated.average_duration_ms,
            ),
            "daily_commit_total_errors": ("Errors in the batch", aggregated.total_errors),
            "daily_commit_total_retries": ("Retries in the batch", aggregated.total_retries),
            "daily_commit_batch_timestamp_seconds": ("Flush time (unix seconds)", timestamp.timestamp()),
        }
        for name, (documentation, value) in values.items():
            Gauge(name, documentation, registry=registry).set(value)
        return registry

    async def publish(
        self, namespace: str, aggregated: "AggregatedMetric", timestamp: datetime
    ) -> None:
        registry = self._build_registry(aggregated, timestamp)
        try:
            # push_to_gateway is blocking; keep the event loop free
            await asyncio.to_thread(
                push_to_gateway,
                self.gateway_url,
                job=namespace,
                registry=registry,
                timeout=self.timeout,
            )
        except Exception as exc:
            raise MetricsPublishError(
                "Pushgateway publish failed",
                {"gateway": self.gateway_url, "error_type": type(exc).__name__},
            ) from exc


class LogMetricsSink:
    """Emit aggregated metrics as a structured log entry."""

    async def publish(
        self, namespace: str, aggregated: "AggregatedMetric", timestamp: datetime
    ) -> None:
        logger.info(
            "Aggregated job metrics",
            namespace=namespace,
            timestamp=timestamp.isoformat(),
            total_executions=aggregated.total_executions,
            success_rate=aggregated.success_rate,
            average_duration_ms=round(aggregated.average_duration_ms, 2),
            total_errors=aggregated.total_errors,
            total_retries=aggregated.total_retries,
        )
