"""
Rate Limiter Tests

Covers sliding-window admission, retry-after computation, per-key isolation,
sweeping of idle keys and the background cleanup loop.
"""

import asyncio
import threading

import pytest

from aura_server.ratelimit import RateLimiter


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock)


class TestAdmit:
    def test_first_request_allowed(self, limiter):
        decision = limiter.admit("1.2.3.4", 25, 60_000)
        assert decision.allowed
        assert decision.retry_after_ms == 0
        assert decision.remaining == 24

    def test_twenty_sixth_request_denied(self, limiter, clock):
        """25 requests in the window are admitted; the 26th is rejected."""
        for i in range(25):
            assert limiter.admit("client", 25, 60_000).allowed, f"request {i + 1}"
            clock.advance(100)

        decision = limiter.admit("client", 25, 60_000)
        assert not decision.allowed
        assert decision.remaining == 0
        # Oldest admitted at t0; now is t0 + 2500.
        assert decision.retry_after_ms == 60_000 - 2_500

    def test_retry_after_is_at_least_one_ms(self, limiter, clock):
        limiter.admit("k", 1, 1_000)
        clock.advance(999.9)
        decision = limiter.admit("k", 1, 1_000)
        assert not decision.allowed
        assert decision.retry_after_ms >= 1

    def test_window_slides(self, limiter, clock):
        for _ in range(3):
            limiter.admit("k", 3, 1_000)
        assert not limiter.admit("k", 3, 1_000).allowed

        clock.advance(1_000)
        assert limiter.admit("k", 3, 1_000).allowed

    def test_timestamp_on_boundary_is_stale(self, limiter, clock):
        limiter.admit("k", 1, 500)
        clock.advance(500)
        assert limiter.admit("k", 1, 500).allowed
        assert limiter.timestamps_for("k") == [clock.now]

    def test_denied_requests_are_not_recorded(self, limiter):
        limiter.admit("k", 1, 60_000)
        limiter.admit("k", 1, 60_000)
        limiter.admit("k", 1, 60_000)
        assert len(limiter.timestamps_for("k")) == 1

    def test_keys_are_independent(self, limiter):
        assert limiter.admit("a", 1, 60_000).allowed
        assert not limiter.admit("a", 1, 60_000).allowed
        assert limiter.admit("b", 1, 60_000).allowed

    def test_timestamps_stay_sorted_and_in_window(self, limiter, clock):
        for step in (10, 200, 300, 50, 700):
            limiter.admit("k", 100, 1_000)
            clock.advance(step)
        limiter.admit("k", 100, 1_000)

        stamps = limiter.timestamps_for("k")
        assert stamps == sorted(stamps)
        assert all(clock.now - 1_000 < ts <= clock.now for ts in stamps)

    def test_concurrent_admissions_do_not_lose_updates(self):
        limiter = RateLimiter()
        results = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                decision = limiter.admit("shared", 50, 60_000)
                with lock:
                    results.append(decision.allowed)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 50
        assert len(limiter.timestamps_for("shared")) == 50


class TestSweep:
    def test_sweep_removes_idle_keys(self, limiter, clock):
        limiter.admit("old", 5, 1_000)
        clock.advance(800)
        limiter.admit("recent", 5, 1_000)
        clock.advance(300)

        removed = limiter.sweep()

        assert removed == 1
        assert limiter.timestamps_for("old") == []
        assert len(limiter.timestamps_for("recent")) == 1
        assert len(limiter) == 1

    def test_sweep_uses_each_entry_window(self, limiter, clock):
        limiter.admit("short", 5, 100)
        limiter.admit("long", 5, 10_000)
        clock.advance(500)

        assert limiter.sweep() == 1
        assert len(limiter) == 1


class TestCleanupLoop:
    async def test_cleanup_sweeps_until_cancelled(self, limiter, clock):
        limiter.admit("idle", 5, 10)
        clock.advance(100)

        task = asyncio.create_task(limiter.run_cleanup(interval_s=0.01))
        for _ in range(50):
            await asyncio.sleep(0.01)
            if len(limiter) == 0:
                break

        assert len(limiter) == 0

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        assert task.done()
