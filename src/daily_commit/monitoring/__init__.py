"""Monitoring for the Daily Commit job.

- metrics.py: process-local Prometheus counters (scraped at /metrics)
- aggregator.py: batched per-invocation metrics shipped to a sink
- sinks.py: Pushgateway and log sinks
"""

from daily_commit.monitoring.aggregator import (
    AggregatedMetric,
    MetricRecord,
    MetricsAggregator,
)
from daily_commit.monitoring.sinks import (
    LogMetricsSink,
    MetricsSink,
    PushgatewayMetricsSink,
)

__all__ = [
    "AggregatedMetric",
    "MetricRecord",
    "MetricsAggregator",
    "MetricsSink",
    "LogMetricsSink",
    "PushgatewayMetricsSink",
]
