from utils.security import RateLimiter, sanitize_tag


def test_fixed_window_allows_thirty_then_blocks(limiter):
    assert all(limiter.try_acquire() for _ in range(30))
    assert limiter.try_acquire() is False


def test_fixed_window_resets_on_rollover(limiter, clock):
    for _ in range(30):
        limiter.try_acquire()
    assert limiter.try_acquire() is False

    clock.advance(60)
    assert limiter.try_acquire() is True


def test_window_is_aligned_not_sliding(limiter, clock):
    clock.now = 659.0  # last second of the window starting at 600
    for _ in range(30):
        assert limiter.try_acquire()

    clock.now = 660.0
    assert limiter.try_acquire() is True


def test_old_windows_are_pruned(limiter, clock):
    limiter.try_acquire()
    clock.advance(120)
    limiter.try_acquire()
    assert list(limiter.window_counts) == [720.0]


def test_per_user_sliding_window(clock):
    limiter = RateLimiter(max_requests=2, window_seconds=10, clock=clock)

    assert limiter.is_rate_limited(1) is False
    assert limiter.is_rate_limited(1) is False
    assert limiter.is_rate_limited(1) is True
    assert limiter.is_rate_limited(2) is False

    clock.advance(10)
    assert limiter.is_rate_limited(1) is False


def test_sanitize_tag():
    assert sanitize_tag("  Cat   Girl ") == "cat_girl"
    assert sanitize_tag("") == ""
    assert sanitize_tag(None) == ""
    assert len(sanitize_tag("a" * 500)) == 200


def test_sweep_forgets_idle_users(clock):
    limiter = RateLimiter(max_requests=2, window_seconds=10, clock=clock)
    limiter.is_rate_limited(1)
    clock.advance(5)
    limiter.is_rate_limited(2)

    clock.advance(6)
    assert limiter.sweep() == 1
    assert list(limiter.request_counts) == [2]

    clock.advance(10)
    assert limiter.sweep() == 1
    assert limiter.request_counts == {}
