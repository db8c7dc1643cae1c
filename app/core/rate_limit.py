# app/core/rate_limit.py
import logging
from dataclasses import dataclass
from typing import Hashable, Optional

from .cache import TTLStore
from .errors import RateLimitedError

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    started_at: float
    count: int


class RateLimiter:
    """
    Fixed-window request counter keyed by user id.

    A window opens on the first call for a key and lasts ``window_seconds``;
    the counter resets when the window expires. Expired windows are dropped
    from the store every ``purge_every`` calls.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        store: Optional[TTLStore] = None,
        purge_every: int = 100,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.store = store if store is not None else TTLStore(window_seconds)
        self.purge_every = purge_every
        self._calls = 0

    def hit(self, key: Hashable) -> bool:
        """Count a call and return whether it is allowed."""
        self._calls += 1
        if self._calls % self.purge_every == 0:
            purged = self.store.purge_expired()
            if purged:
                logger.debug(f"Dropped {purged} expired rate limit windows")

        window = self.store.get(key)
        if window is None:
            self.store.set(key, _Window(started_at=self.store.now(), count=1), self.window_seconds)
            return True
        window.count += 1
        return window.count <= self.max_requests

    def check(self, key: Hashable) -> None:
        if not self.hit(key):
            logger.warning(f"Rate limit exceeded for {key}")
            raise RateLimitedError(
                f"Too many requests: at most {self.max_requests} per {self.window_seconds:g} seconds"
            )

    def remaining(self, key: Hashable) -> int:
        window = self.store.get(key)
        if window is None:
            return self.max_requests
        return max(0, self.max_requests - window.count)

    def reset(self) -> None:
        self.store.clear()
        self._calls = 0
