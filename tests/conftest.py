"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from pathlib import Path
from typing import Any, Dict

import pytest

from daily_commit.config import Settings
from daily_commit.credentials.models import CredentialBundle, parse_credential_bundle
from daily_commit.models.job import JobRequest


class ManualClock:
    """Monotonic clock stand-in advanced explicitly by tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.RATE_LIMIT_MAX_REQUESTS = 2
    """
    return Settings(
        # === Application ===
        APP_NAME="Daily Commit (Test)",
        APP_VERSION="0.1.0",
        ENVIRONMENT="development",
        FUNCTION_NAME="daily-commit-test",

        # === Credential store ===
        SECRET_NAME="test-secret",
        CREDENTIAL_STORE_URL="http://credentials.test",

        # === Source control ===
        WORKDIR=str(tmp_path / "checkout"),
        GIT_BRANCH="main",

        # === Retry (no real waiting in tests) ===
        SCM_BASE_DELAY_MS=0,
        CREDENTIALS_BASE_DELAY_MS=0,

        # === Monitoring ===
        PUSHGATEWAY_URL=None,
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def manual_clock() -> ManualClock:
    """Controllable clock for TTL, batch-timeout and rate-limit tests."""
    return ManualClock()


@pytest.fixture
def credential_document() -> Dict[str, Any]:
    """Credential document as returned by the credential store."""
    return {
        "userEmail": "bot@example.com",
        "userName": "Daily Bot",
        "token": "ghp_test_token",
        "repositoryUrl": "https://github.com/example/daily.git",
    }


@pytest.fixture
def credential_bundle(credential_document: Dict[str, Any]) -> CredentialBundle:
    """Parsed CredentialBundle from the sample document."""
    return parse_credential_bundle(credential_document)


@pytest.fixture
def resolved_request() -> JobRequest:
    """JobRequest with every field filled in."""
    return JobRequest(
        file_path="daily-commit.txt",
        new_content="Daily commit - test",
        commit_message="Daily commit - 2026-01-01",
        credential_key="test-secret",
    )
