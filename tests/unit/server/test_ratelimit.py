"""Tests for the fixed-window rate limiter."""

from reelguess.server.ratelimit import RateLimiter, client_identifier


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRateLimiter:
    def test_allows_up_to_max_then_rejects(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(interval=60, max_requests=3, clock=clock)

        results = [limiter.check("1.2.3.4") for _ in range(4)]

        assert [r.success for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]
        assert all(r.limit == 3 for r in results)
        assert all(r.reset_at == 1_060.0 for r in results)

    def test_window_resets_after_interval(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(interval=60, max_requests=1, clock=clock)

        assert limiter.check("a").success
        assert not limiter.check("a").success

        clock.now += 61
        result = limiter.check("a")
        assert result.success
        assert result.reset_at == clock.now + 60

    def test_identifiers_are_independent(self) -> None:
        limiter = RateLimiter(max_requests=1, clock=FakeClock())
        assert limiter.check("a").success
        assert limiter.check("b").success
        assert not limiter.check("a").success

    def test_expired_windows_are_purged(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(interval=10, max_requests=5, cleanup_interval=60, clock=clock)
        limiter.check("a")
        limiter.check("b")
        assert len(limiter) == 2

        clock.now += 120
        limiter.check("c")
        assert len(limiter) == 1


class TestClientIdentifier:
    def test_prefers_leftmost_forwarded_for(self) -> None:
        headers = {"x-forwarded-for": " 10.0.0.1 , 172.16.0.2", "x-real-ip": "10.9.9.9"}
        assert client_identifier(headers) == "10.0.0.1"

    def test_falls_back_to_real_ip_then_fallback(self) -> None:
        assert client_identifier({"x-real-ip": "10.9.9.9"}, fallback="127.0.0.1") == "10.9.9.9"
        assert client_identifier({}, fallback="127.0.0.1") == "127.0.0.1"
        assert client_identifier({}) == "unknown"
