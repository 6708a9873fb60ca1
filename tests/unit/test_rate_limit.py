"""
Unit tests for the per-player rate limiter.
"""

import threading

from stashkeeper.modules.inventory.rate_limit import RateLimiter


class TestRateLimiter:
    """Cooldown behaviour."""

    def test_first_submission_allowed(self):
        limiter = RateLimiter(cooldown=5.0)
        assert limiter.check_and_record('p1', 1000.0) is True
        assert limiter.last_accepted('p1') == 1000.0

    def test_within_cooldown_rejected_without_update(self):
        limiter = RateLimiter(cooldown=5.0)
        limiter.check_and_record('p1', 1000.0)

        assert limiter.check_and_record('p1', 1004.999) is False
        assert limiter.last_accepted('p1') == 1000.0

    def test_after_cooldown_allowed(self):
        limiter = RateLimiter(cooldown=5.0)
        limiter.check_and_record('p1', 1000.0)

        assert limiter.check_and_record('p1', 1005.001) is True
        assert limiter.last_accepted('p1') == 1005.001

    def test_exactly_cooldown_allowed(self):
        limiter = RateLimiter(cooldown=5.0)
        limiter.check_and_record('p1', 1000.0)
        assert limiter.check_and_record('p1', 1005.0) is True

    def test_rejection_does_not_extend_window(self):
        limiter = RateLimiter(cooldown=5.0)
        limiter.check_and_record('p1', 1000.0)

        assert limiter.check_and_record('p1', 1003.0) is False
        assert limiter.check_and_record('p1', 1004.5) is False
        # Still measured from the accepted attempt at 1000
        assert limiter.check_and_record('p1', 1005.0) is True

    def test_players_are_independent(self):
        limiter = RateLimiter(cooldown=5.0)
        assert limiter.check_and_record('p1', 1000.0)
        assert limiter.check_and_record('p2', 1000.1)
        assert not limiter.check_and_record('p1', 1001.0)
        assert limiter.last_accepted('p3') is None

    def test_retry_after(self):
        limiter = RateLimiter(cooldown=5.0)
        assert limiter.retry_after('p1', 1000.0) == 0.0

        limiter.check_and_record('p1', 1000.0)
        assert limiter.retry_after('p1', 1002.0) == 3.0
        assert limiter.retry_after('p1', 1010.0) == 0.0

    def test_zero_cooldown_never_limits(self):
        limiter = RateLimiter(cooldown=0)
        assert limiter.check_and_record('p1', 1000.0)
        assert limiter.check_and_record('p1', 1000.0)

    def test_concurrent_same_player_admits_one(self):
        limiter = RateLimiter(cooldown=5.0)
        barrier = threading.Barrier(8)
        results = []
        results_lock = threading.Lock()

        def submit():
            barrier.wait()
            allowed = limiter.check_and_record('p1', 1000.0)
            with results_lock:
                results.append(allowed)

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
        assert results.count(False) == 7
