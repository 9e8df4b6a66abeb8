"""
Retry executor exceptions.

RetryExhausted is raised when an operation either ran out of attempts or
failed with a non-retryable error. It wraps the last underlying failure so
the entrypoint can map it to a user-visible outcome.
"""

from daily_commit.errors import JobError


class RetryExhausted(JobError):
    """
    Raised when the retry executor gives up on an operation.

    Attributes:
        label: Operation label (e.g., "scm_publish")
        attempts: Number of attempts actually made (0 if max_attempts <= 0)
        last_error: Final underlying failure (None when no attempt was made)
    """

    def __init__(
        self,
        label: str,
        attempts: int,
        last_error: BaseException | None,
    ) -> None:
        self.label = label
        self.attempts = attempts
        self.last_error = last_error

        super().__init__(
            f"{label} failed after {attempts} attempt(s). "
            f"Last error: {type(last_error).__name__ if last_error else 'none'}",
            {
                "label": label,
                "attempts": attempts,
                "last_error_type": type(last_error).__name__ if last_error else None,
            },
        )
