"""
Git working checkout driven through asyncio subprocesses.

The publish sequence is fixed:

    configure_identity -> sync_or_clone -> stage -> commit -> push

``sync_or_clone`` initialises the checkout in place (``git init`` + fetch)
rather than cloning, so a file rewritten into the scratch directory before
the first sync is kept: the working tree is moved onto the remote tip with a
mixed reset, leaving the rewrite as a local modification to stage.

Failures are converted here into the job error taxonomy:

- timeout                     -> ScmTimeoutError (retryable)
- remote/network failure      -> ScmNetworkError (retryable)
- anything else non-zero exit -> ScmCommandError (permanent)
"""

import asyncio
import os
from pathlib import Path

import structlog

from daily_commit.credentials.models import CredentialBundle
from daily_commit.errors import ScmCommandError, ScmNetworkError, ScmTimeoutError

logger = structlog.get_logger(__name__)

# stderr fragments git prints when talking to the remote failed
_NETWORK_FAILURE_MARKERS = (
    "could not resolve host",
    "connection reset",
    "connection refused",
    "connection timed out",
    "operation timed out",
    "the remote end hung up unexpectedly",
    "rpc failed",
    "early eof",
    "the requested url returned error: 5",
    "the requested url returned error: 429",
)

_REMOTE_PLACEHOLDER = "<remote>"


def classify_git_failure(command: str, returncode: int, stderr: str) -> Exception:
    """Map a failed git command to a retryable or permanent error."""
    details = {"command": command, "returncode": returncode, "stderr": stderr[-500:]}
    lowered = stderr.lower()
    if any(marker in lowered for marker in _NETWORK_FAILURE_MARKERS):
        return ScmNetworkError("Git remote operation failed", details)
    return ScmCommandError("Git command failed", details)


class GitWorkspace:
    """
    Scratch git checkout used by the job.

    Attributes:
        workdir: Checkout directory in scratch storage
        branch: Remote branch the job commits to
        timeout: Per-command timeout (seconds)
    """

    def __init__(
        self,
        workdir: Path,
        branch: str = "main",
        timeout: float = 30.0,
        git_binary: str = "git",
    ):
        self.workdir = Path(workdir)
        self.branch = branch
        self.timeout = timeout
        self.git_binary = git_binary
        self._identity_env: dict[str, str] = {}

    def has_checkout(self) -> bool:
        return (self.workdir / ".git").is_dir()

    async def run(self, *args: str, redact: tuple[str, ...] = ()) -> str:
        """
        Run a git command in the workdir.

        Args:
            *args: git arguments
            redact: Argument values replaced by a placeholder in logs/errors

        Returns:
            Stripped stdout
        """
        shown = " ".join(_REMOTE_PLACEHOLDER if a in redact else a for a in ("git", *args))
        env = {
            **os.environ,
            "GIT_TERMINAL_PROMPT": "0",
            **self._identity_env,
        }

        try:
            process = await asyncio.create_subprocess_exec(
                self.git_binary,
                *args,
                cwd=self.workdir,
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ScmCommandError(
                "Unable to start git", {"command": shown, "error": str(exc)}
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ScmTimeoutError(
                "Git command timed out", {"command": shown, "timeout": self.timeout}
            ) from None

        stderr_text = stderr.decode("utf-8", errors="replace")
        for secret in redact:
            stderr_text = stderr_text.replace(secret, _REMOTE_PLACEHOLDER)

        if process.returncode != 0:
            raise classify_git_failure(shown, process.returncode, stderr_text)

        logger.debug("Git command succeeded", command=shown)
        return stdout.decode("utf-8", errors="replace").strip()

    async def configure_identity(self, credentials: CredentialBundle) -> None:
        """Use the bundle's identity as author and committer for later commands."""
        self._identity_env = {
            "GIT_AUTHOR_NAME": credentials.user_name,
            "GIT_AUTHOR_EMAIL": credentials.user_email,
            "GIT_COMMITTER_NAME": credentials.user_name,
            "GIT_COMMITTER_EMAIL": credentials.user_email,
        }
        logger.info("Git identity configured", user_name=credentials.user_name)

    async def sync_or_clone(self, repository_url: str) -> None:
        """Bring the checkout onto the remote branch tip, creating it if needed."""
        self.workdir.mkdir(parents=True, exist_ok=True)

        if self.has_checkout():
            await self.run("remote", "set-url", "origin", repository_url)
            logger.info("Git repository already exists, updating")
        else:
            await self.run("init", "--quiet")
            await self.run("remote", "add", "origin", repository_url)
            logger.info("Initialised checkout", workdir=str(self.workdir))

        await self.run("fetch", "--quiet", "origin", self.branch)
        await self.run("reset", "--quiet", "--mixed", "FETCH_HEAD")
        await self.run("checkout", "-B", self.branch, "--quiet")
        logger.info("Checkout synced with remote", branch=self.branch)

    async def stage(self, path: str) -> None:
        await self.run("add", "--", path)
        logger.info("File staged", path=path)

    async def commit(self, message: str) -> None:
        await self.run("commit", "--quiet", "-m", message)
        logger.info("Changes committed", commit_message=message)

    async def push(self, credentials: CredentialBundle) -> None:
        """Push HEAD to the branch; the token only appears in this command's arguments."""
        remote = credentials.authenticated_url()
        await self.run("push", remote, f"HEAD:{self.branch}", redact=(remote,))
        logger.info("Changes pushed", branch=self.branch)

    async def publish(self, path: str, message: str, credentials: CredentialBundle) -> None:
        """Run the full five-step publish sequence."""
        await self.configure_identity(credentials)
        await self.sync_or_clone(credentials.repository_url)
        await self.stage(path)
        await self.commit(message)
        await self.push(credentials)
        logger.info("Git workflow completed", path=path, branch=self.branch)

    async def reset_to_clean(self) -> None:
        """
        Discard local changes and untracked files in an existing checkout.

        Both commands always run; a failing reset (e.g. no commit fetched
        yet) does not skip the clean.

        Raises:
            ScmCommandError: Naming every command that failed
        """
        failures: dict[str, str] = {}
        for name, args in (
            ("reset", ("reset", "--hard", "--quiet", "HEAD")),
            ("clean", ("clean", "-fd", "--quiet")),
        ):
            try:
                await self.run(*args)
            except Exception as exc:
                failures[name] = repr(exc)

        if failures:
            raise ScmCommandError("Checkout cleanup failed", {"failed": failures})
