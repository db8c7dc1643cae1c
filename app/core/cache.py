# app/core/cache.py
"""
In-memory key/value store with per-entry expiry.

Instances are created at startup and hung off ``app.state`` so each
process (and each test) owns its own store instead of sharing a module
level dict.
"""
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

Clock = Callable[[], float]


class TTLStore:
    def __init__(self, ttl_seconds: float, clock: Clock = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}

    def now(self) -> float:
        return self._clock()

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = (value, self._clock() + ttl)

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return a live value, or ``default`` if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if self._clock() >= expires_at:
            return default
        return value

    def get_even_if_expired(self, key: Hashable) -> Optional[Tuple[Any, bool]]:
        """Return ``(value, expired)`` while the entry is still held."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        return value, self._clock() >= expires_at

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
