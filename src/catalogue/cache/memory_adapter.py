"""In-process cache adapter for development and testing.

Behaves like the Redis adapter (TTL expiry, None on miss) without any
external calls. It can be switched into a failing mode at runtime to
simulate a cache outage.
"""

import threading
import time

from catalogue.cache.port import CacheBackend, CacheError


class InMemoryCache(CacheBackend):
    """Configurable in-memory cache backend."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[bytes, float]] = {}
        self._lock = threading.Lock()
        self.available: bool = True
        self.calls: list[tuple[str, str]] = []

    def configure(self, available: bool) -> None:
        """Simulate the backend going down (False) or coming back (True)."""
        self.available = available

    def _ensure_available(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if not self.available:
            raise CacheError(f"{operation} {key} failed: cache backend unavailable")

    def _live(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= time.monotonic():
            self._entries.pop(key, None)
            return None
        return value

    def get(self, key: str) -> bytes | None:
        self._ensure_available("GET", key)
        with self._lock:
            return self._live(key)

    def set(self, key: str, value: bytes, ttl: int) -> None:
        self._ensure_available("SET", key)
        with self._lock:
            self._entries[key] = (value, time.monotonic() + ttl)

    def compare_and_set(self, key: str, expected: bytes | None, value: bytes, ttl: int) -> bool:
        self._ensure_available("CAS", key)
        with self._lock:
            if self._live(key) != expected:
                return False
            self._entries[key] = (value, time.monotonic() + ttl)
            return True

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._ensure_available("DEL", key)
            with self._lock:
                self._entries.pop(key, None)

    def ping(self) -> bool:
        return self.available

    def keys(self) -> list[str]:
        """Keys currently cached and not yet expired."""
        now = time.monotonic()
        with self._lock:
            return sorted(key for key, (_, expires_at) in self._entries.items() if expires_at > now)

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()
        self.calls.clear()
