import pytest

from app.core.cache import TTLStore
from app.core.errors import RateLimitedError
from app.core.rate_limit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(max_requests=5, window_seconds=60, store=TTLStore(60, clock=clock))


class TestRateLimiter:
    def test_admits_up_to_limit(self, limiter):
        assert all(limiter.hit("user-1") for _ in range(5))
        assert limiter.hit("user-1") is False

    def test_keys_are_independent(self, limiter):
        for _ in range(5):
            limiter.hit("user-1")
        assert limiter.hit("user-2") is True
        assert limiter.remaining("user-2") == 4

    def test_window_resets(self, limiter, clock):
        for _ in range(6):
            limiter.hit("user-1")
        clock.now = 60.0
        assert limiter.hit("user-1") is True
        assert limiter.remaining("user-1") == 4

    def test_check_raises(self, limiter):
        for _ in range(5):
            limiter.check("user-1")
        with pytest.raises(RateLimitedError) as exc_info:
            limiter.check("user-1")
        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable is True

    def test_reset(self, limiter):
        for _ in range(5):
            limiter.hit("user-1")
        limiter.reset()
        assert limiter.remaining("user-1") == 5

    def test_expired_windows_are_purged(self, clock):
        limiter = RateLimiter(max_requests=5, window_seconds=60, store=TTLStore(60, clock=clock), purge_every=3)
        limiter.hit("user-1")
        limiter.hit("user-2")
        assert len(limiter.store) == 2

        clock.now = 60.0
        limiter.hit("user-3")

        assert len(limiter.store) == 1
        assert limiter.remaining("user-3") == 4


class TestTTLStore:
    def test_expiry(self, clock):
        store = TTLStore(10, clock=clock)
        store.set("k", "v")
        assert store.get("k") == "v"
        clock.now = 10.0
        assert store.get("k") is None
        assert store.get_even_if_expired("k") == ("v", True)

    def test_per_entry_ttl_and_purge(self, clock):
        store = TTLStore(10, clock=clock)
        store.set("short", 1, ttl_seconds=1)
        store.set("long", 2)
        clock.now = 5.0
        assert store.purge_expired() == 1
        assert len(store) == 1
        assert store.get("long") == 2
