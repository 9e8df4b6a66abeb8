"""
Error taxonomy for the Daily Commit job.

Every collaborator boundary (credential store, git, file system, metrics sink)
converts its native failures into one of these classes. Retryability is a
property of the class (``retryable``), so the retry executor never inspects
error text:

- TransientInfraError: network resets, timeouts, throttling -> retried
- PermanentRequestError: malformed input, auth rejection, missing field -> not retried
"""

from typing import Any


class JobError(Exception):
    """
    Base exception for all job errors.

    Attributes:
        message: Human-readable error description
        details: Structured error data for logging
        retryable: Whether the retry executor may attempt the operation again
    """

    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class TransientInfraError(JobError):
    """
    Temporary infrastructure failure.

    Connection resets, DNS failures, timeouts and throttling or unavailable
    responses from a backend. Retried with backoff.
    """

    retryable = True


class PermanentRequestError(JobError):
    """
    Failure that will not go away by retrying.

    Malformed input, authentication rejection, missing required fields.
    Surfaced immediately.
    """


# === Credential store boundary ===


class CredentialStoreUnavailable(TransientInfraError):
    """Credential store unreachable, timed out, or throttling (429/5xx)."""
    pass


class CredentialStoreRejected(PermanentRequestError):
    """Credential store refused the lookup (401/403/404) or returned garbage."""
    pass


class IncompleteCredential(PermanentRequestError):
    """
    Credential bundle is missing a required field or has it with the wrong type.

    Attributes:
        field: Name of the first missing or invalid field
    """

    def __init__(self, field: str, key: str | None = None):
        self.field = field
        super().__init__(
            f"Missing or invalid credential field: {field}",
            {"field": field, "key": key} if key else {"field": field},
        )


class CredentialFetchFailed(PermanentRequestError):
    """
    Fetching a credential bundle failed after the store call was retried.

    Permanent from the caller's perspective: the retry executor already
    wrapped the store call, nothing above it retries again.

    Attributes:
        key: Credential-store key that was requested
        cause: Underlying failure (may be None)
    """

    def __init__(self, key: str, cause: BaseException | None = None):
        self.key = key
        self.cause = cause
        reason = type(cause).__name__ if cause else "unknown"
        super().__init__(
            f"Failed to retrieve credentials for '{key}'",
            {"key": key, "cause": reason},
        )


# === Source control boundary ===


class ScmTimeoutError(TransientInfraError):
    """Git command exceeded its configured timeout."""
    pass


class ScmNetworkError(TransientInfraError):
    """Git command failed talking to the remote (resets, DNS, 5xx)."""
    pass


class ScmCommandError(PermanentRequestError):
    """Git command failed for a non-network reason (auth, conflicts, usage)."""
    pass


# === File system boundary ===


class FileRewriteError(PermanentRequestError):
    """Target file could not be read or written."""
    pass


# === Metrics sink boundary ===


class MetricsPublishError(TransientInfraError):
    """Metrics sink rejected or timed out on a publish call."""
    pass


# === Entrypoint ===


class RateLimitExceeded(JobError):
    """
    Caller exceeded the fixed-window request quota.

    Attributes:
        identifier: Caller identity that was throttled
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__("Rate limit exceeded", {"identifier": identifier})


class ConfigurationError(PermanentRequestError):
    """Required configuration is missing for the current environment tier."""
    pass
