"""
Unit tests for metrics sinks.
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from daily_commit.errors import MetricsPublishError
from daily_commit.monitoring.aggregator import AggregatedMetric, MetricRecord
from daily_commit.monitoring.sinks import LogMetricsSink, PushgatewayMetricsSink

TIMESTAMP = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def aggregated() -> AggregatedMetric:
    return AggregatedMetric.from_records(
        [
            MetricRecord(duration_ms=100, success=True, retry_count=2),
            MetricRecord(duration_ms=300, success=False, error_count=1),
        ]
    )


@pytest.mark.asyncio
async def test_pushgateway_sink_pushes_aggregate(aggregated):
    """Test the aggregate is pushed as gauges under the namespace job."""
    sink = PushgatewayMetricsSink("http://pushgateway:9091", timeout=2.0)

    with patch("daily_commit.monitoring.sinks.push_to_gateway") as push:
        await sink.publish("DailyCommit/test", aggregated, TIMESTAMP)

    push.assert_called_once()
    args, kwargs = push.call_args
    assert args == ("http://pushgateway:9091",)
    assert kwargs["job"] == "DailyCommit/test"
    assert kwargs["timeout"] == 2.0

    registry = kwargs["registry"]
    assert registry.get_sample_value("daily_commit_total_executions") == 2
    assert registry.get_sample_value("daily_commit_success_rate") == 0.5
    assert registry.get_sample_value("daily_commit_average_execution_duration_ms") == 200
    assert registry.get_sample_value("daily_commit_total_errors") == 1
    assert registry.get_sample_value("daily_commit_total_retries") == 2


@pytest.mark.asyncio
async def test_pushgateway_failure_becomes_publish_error(aggregated):
    """Test gateway errors are converted to MetricsPublishError."""
    sink = PushgatewayMetricsSink("http://pushgateway:9091")

    with patch(
        "daily_commit.monitoring.sinks.push_to_gateway",
        side_effect=OSError("connection refused"),
    ):
        with pytest.raises(MetricsPublishError) as exc_info:
            await sink.publish("DailyCommit/test", aggregated, TIMESTAMP)

    assert exc_info.value.details["error_type"] == "OSError"


@pytest.mark.asyncio
async def test_log_sink_accepts_aggregate(aggregated):
    """Test the log sink publishes without a backend."""
    await LogMetricsSink().publish("DailyCommit/test", aggregated, TIMESTAMP)
