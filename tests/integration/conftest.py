"""Integration test fixtures (service checks and prerequisites).

Provides fixtures for checking if external tools are available.
Integration tests are skipped if required tools are missing.
"""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

GIT_ENV = {
    "GIT_AUTHOR_NAME": "Seed",
    "GIT_AUTHOR_EMAIL": "seed@example.com",
    "GIT_COMMITTER_NAME": "Seed",
    "GIT_COMMITTER_EMAIL": "seed@example.com",
    "GIT_TERMINAL_PROMPT": "0",
}


def git(*args: str, cwd: Path) -> str:
    """Run a git command for test setup and return its stdout."""
    completed = subprocess.run(
        ["git", *args],
        cwd=cwd,
        env={**os.environ, **GIT_ENV},
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout.strip()


@pytest.fixture(scope="session")
def check_git():
    """Check if the git binary is available.

    Skips tests if git is not installed.
    """
    if shutil.which("git") is None:
        pytest.skip("git not available")


@pytest.fixture
def remote_repository(check_git, tmp_path) -> Path:
    """Bare repository with one commit on main, used as the push target."""
    remote = tmp_path / "remote.git"
    seed = tmp_path / "seed"
    remote.mkdir()
    seed.mkdir()

    git("init", "--bare", "--quiet", cwd=remote)
    git("init", "--quiet", cwd=seed)
    git("checkout", "-b", "main", "--quiet", cwd=seed)
    (seed / "README.txt").write_text("seed\n", encoding="utf-8")
    git("add", "README.txt", cwd=seed)
    git("commit", "--quiet", "-m", "Initial commit", cwd=seed)
    git("push", "--quiet", str(remote), "HEAD:main", cwd=seed)

    return remote


@pytest.fixture
def integration_settings(test_settings, tmp_path):
    """Settings for integration tests with a scratch checkout directory."""
    test_settings.WORKDIR = str(tmp_path / "scratch")
    test_settings.PROMETHEUS_ENABLED = False

    return test_settings


@pytest.fixture
def run_git(check_git):
    """Helper running git commands for assertions against test repositories."""
    return git
