"""
Retry policy definition.

A RetryPolicy is immutable and built once per operation class (scm,
credentials, file) from tiered configuration; see ``Settings.retry_policy``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy for one operation class.

    Attributes:
        max_attempts: Total attempts allowed (0 means the operation never runs)
        base_delay_ms: Delay before the first retry (ms)
        max_delay_ms: Upper bound for any single delay (ms)
        backoff_multiplier: Growth factor per attempt, must be > 1
        jitter: Randomize each delay into [0.5, 1.0) of its raw value
    """

    max_attempts: int
    base_delay_ms: int
    max_delay_ms: int
    backoff_multiplier: float = 2.0
    jitter: bool = True

    def __post_init__(self) -> None:
        """Validate policy invariants."""
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0")

        if self.max_delay_ms < 0:
            raise ValueError("max_delay_ms must be >= 0")

        if self.backoff_multiplier <= 1:
            raise ValueError("backoff_multiplier must be > 1")
