"""In-memory TTL cache owned by the orchestration layer.

Holds the last computed value per key together with the time it was stored.
Expiry is checked explicitly on every read against an injectable clock, so
freshness never depends on module lifetime.
"""

import time
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """Keyed cache whose entries expire ``ttl_seconds`` after being stored.

    Args:
        ttl_seconds: Entry lifetime in seconds.
        time_fn: Clock returning seconds. Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        ttl_seconds: float,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._time_fn = time_fn
        self._entries: dict[str, tuple[float, T]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> T | None:
        """Return the value for ``key`` if present and fresh, else None.

        Expired entries are evicted on access.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._time_fn() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = (self._time_fn(), value)

    def age(self, key: str) -> float | None:
        """Seconds since ``key`` was stored, or None if absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._time_fn() - entry[0]

    def is_fresh(self, key: str) -> bool:
        return self.get(key) is not None

    def invalidate(self, key: str | None = None) -> None:
        """Drop one key, or everything when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
