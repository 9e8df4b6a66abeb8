"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from daily_commit.credentials.cache import CredentialCache
from daily_commit.monitoring.aggregator import MetricsAggregator
from daily_commit.retry.executor import RetryExecutor
from daily_commit.retry.policy import RetryPolicy
from daily_commit.scm.git import GitWorkspace


@pytest.fixture
def mock_sleep():
    """Sleep stand-in recording requested delays (seconds)."""
    return AsyncMock(return_value=None)


@pytest.fixture
def executor(mock_sleep) -> RetryExecutor:
    """RetryExecutor that never actually waits."""
    return RetryExecutor(sleep=mock_sleep)


@pytest.fixture
def no_jitter_policy() -> RetryPolicy:
    """Deterministic policy: 3 attempts, 100ms base, 1s cap."""
    return RetryPolicy(max_attempts=3, base_delay_ms=100, max_delay_ms=1000, jitter=False)


@pytest.fixture
def mock_credential_store(credential_document):
    """Mock credential store returning the sample document."""
    mock = AsyncMock()
    mock.fetch = AsyncMock(return_value=credential_document)
    return mock


@pytest.fixture
def credential_cache(mock_credential_store, executor, manual_clock) -> CredentialCache:
    """CredentialCache over the mock store with a 60s default TTL."""
    return CredentialCache(
        store=mock_credential_store,
        executor=executor,
        policy=RetryPolicy(max_attempts=2, base_delay_ms=0, max_delay_ms=0, jitter=False),
        default_ttl=60.0,
        clock=manual_clock,
    )


@pytest.fixture
def mock_metrics_sink():
    """Mock metrics sink accepting every publish."""
    mock = AsyncMock()
    mock.publish = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def aggregator(mock_metrics_sink, manual_clock) -> MetricsAggregator:
    """Aggregator with batch size 3 and a 300s timeout."""
    return MetricsAggregator(
        sink=mock_metrics_sink,
        batch_size=3,
        batch_timeout=300.0,
        clock=manual_clock,
    )


@pytest.fixture
def mock_workspace(tmp_path):
    """GitWorkspace mock rooted in a temporary directory."""
    mock = Mock(spec=GitWorkspace)
    mock.workdir = tmp_path / "checkout"
    mock.has_checkout = Mock(return_value=False)
    mock.publish = AsyncMock(return_value=None)
    mock.reset_to_clean = AsyncMock(return_value=None)
    return mock
