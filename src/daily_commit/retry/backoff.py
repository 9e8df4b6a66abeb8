"""Exponential backoff delay calculation."""

import math
import random

from daily_commit.retry.policy import RetryPolicy


def compute_delay(attempt: int, policy: RetryPolicy, rng: random.Random | None = None) -> int:
    """
    Compute the delay before the retry that follows ``attempt``.

    ``base_delay_ms * backoff_multiplier ** attempt``, capped at
    ``max_delay_ms``. With jitter the capped value is scaled by a uniform
    factor in [0.5, 1.0). The result is floored to whole milliseconds.

    Args:
        attempt: Zero-based attempt number that just failed
        policy: Retry policy
        rng: Random source (module-level ``random`` when None)

    Returns:
        Delay in milliseconds
    """
    if attempt < 0:
        raise ValueError("attempt must be >= 0")

    # Compare in log space first so large attempts never overflow a float
    if policy.base_delay_ms == 0:
        delay: float = 0.0
    elif attempt * math.log(policy.backoff_multiplier) >= math.log(
        max(policy.max_delay_ms, 1) / policy.base_delay_ms
    ) + 1:
        delay = float(policy.max_delay_ms)
    else:
        delay = min(
            policy.base_delay_ms * policy.backoff_multiplier ** attempt,
            policy.max_delay_ms,
        )

    if policy.jitter and delay > 0:
        source = rng if rng is not None else random
        jittered = math.floor(delay * (0.5 + source.random() * 0.5))
        # random() just below 1.0 can round the factor up to exactly 1.0
        return min(jittered, math.ceil(delay) - 1)

    return math.floor(delay)
