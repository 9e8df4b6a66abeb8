"""
Unit tests for DailyCommitJob.

Real CredentialCache over a mock store, real file rewrite into a temporary
directory, mocked git workspace.
"""

from unittest.mock import AsyncMock

import pytest

from daily_commit.errors import (
    CredentialFetchFailed,
    CredentialStoreRejected,
    FileRewriteError,
    ScmCommandError,
    ScmNetworkError,
)
from daily_commit.job import DailyCommitJob
from daily_commit.retry.exceptions import RetryExhausted
from daily_commit.retry.executor import RetryStats
from daily_commit.retry.policy import RetryPolicy


@pytest.fixture
def job(credential_cache, mock_workspace, executor) -> DailyCommitJob:
    return DailyCommitJob(
        credentials=credential_cache,
        workspace=mock_workspace,
        executor=executor,
        file_policy=RetryPolicy(max_attempts=1, base_delay_ms=0, max_delay_ms=0),
        scm_policy=RetryPolicy(max_attempts=3, base_delay_ms=0, max_delay_ms=0),
        cache_ttl=60,
    )


@pytest.mark.asyncio
async def test_run_rewrites_commits_and_pushes(job, mock_workspace, resolved_request, credential_bundle):
    """Test the file is written and published with the fetched credentials."""
    result = await job.run(resolved_request, RetryStats())

    target = mock_workspace.workdir / "daily-commit.txt"
    assert target.read_text(encoding="utf-8") == "Daily commit - test"
    assert result.new_content == "Daily commit - test"
    mock_workspace.publish.assert_awaited_once_with(
        "daily-commit.txt", "Daily commit - 2026-01-01", credential_bundle
    )


@pytest.mark.asyncio
async def test_transient_scm_failure_is_retried(job, mock_workspace, resolved_request):
    """Test the publish sequence is retried under the scm policy."""
    mock_workspace.publish = AsyncMock(side_effect=[ScmNetworkError("reset"), None])
    stats = RetryStats()

    await job.run(resolved_request, stats)

    assert mock_workspace.publish.await_count == 2
    assert stats.retries == 1
    assert stats.failures == 1


@pytest.mark.asyncio
async def test_permanent_scm_failure_is_not_retried(job, mock_workspace, resolved_request):
    """Test a permanent git failure surfaces after one attempt."""
    mock_workspace.publish = AsyncMock(side_effect=ScmCommandError("auth failed"))

    with pytest.raises(RetryExhausted) as exc_info:
        await job.run(resolved_request, RetryStats())

    assert exc_info.value.label == "scm_publish"
    assert isinstance(exc_info.value.last_error, ScmCommandError)
    mock_workspace.publish.assert_awaited_once()


@pytest.mark.asyncio
async def test_credential_failure_stops_before_file_rewrite(
    job, mock_workspace, mock_credential_store, resolved_request
):
    """Test nothing is written or pushed without credentials."""
    mock_credential_store.fetch = AsyncMock(side_effect=CredentialStoreRejected("denied"))

    with pytest.raises(CredentialFetchFailed):
        await job.run(resolved_request, RetryStats())

    assert not (mock_workspace.workdir / "daily-commit.txt").exists()
    mock_workspace.publish.assert_not_awaited()


@pytest.mark.asyncio
async def test_file_failure_stops_before_publish(job, mock_workspace, resolved_request):
    """Test a failed rewrite is not retried and nothing is pushed."""
    mock_workspace.workdir.parent.mkdir(parents=True, exist_ok=True)
    mock_workspace.workdir.write_text("not a directory", encoding="utf-8")

    with pytest.raises(RetryExhausted) as exc_info:
        await job.run(resolved_request, RetryStats())

    assert exc_info.value.label == "file_rewrite"
    assert exc_info.value.attempts == 1
    assert isinstance(exc_info.value.last_error, FileRewriteError)
    mock_workspace.publish.assert_not_awaited()
