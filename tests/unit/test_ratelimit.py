"""
Unit tests for the fixed-window RateLimiter.
"""

from daily_commit.ratelimit import RateLimiter


def test_allows_up_to_max_requests(manual_clock):
    """Test exactly max_requests are allowed within one window."""
    limiter = RateLimiter(clock=manual_clock)

    results = [limiter.allow("10.0.0.1", 3, 60) for _ in range(5)]

    assert results == [True, True, True, False, False]


def test_callers_are_counted_separately(manual_clock):
    """Test each identifier has its own counter."""
    limiter = RateLimiter(clock=manual_clock)

    assert limiter.allow("a", 1, 60) is True
    assert limiter.allow("a", 1, 60) is False
    assert limiter.allow("b", 1, 60) is True
    assert len(limiter) == 2


def test_window_resets_after_expiry(manual_clock):
    """Test a fresh window starts once now > window_reset_at."""
    limiter = RateLimiter(clock=manual_clock)
    limiter.allow("a", 1, 60)

    manual_clock.advance(60)
    assert limiter.allow("a", 1, 60) is False

    manual_clock.advance(0.001)
    assert limiter.allow("a", 1, 60) is True
    assert limiter.allow("a", 1, 60) is False


def test_denied_requests_do_not_extend_window(manual_clock):
    """Test rejections leave the window boundary unchanged."""
    limiter = RateLimiter(clock=manual_clock)
    limiter.allow("a", 1, 10)

    for _ in range(5):
        manual_clock.advance(2)
        assert limiter.allow("a", 1, 10) is False

    manual_clock.advance(0.5)
    assert limiter.allow("a", 1, 10) is True
