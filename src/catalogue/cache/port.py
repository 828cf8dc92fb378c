"""Cache backend port (abstract interface).

Defines the byte-level contract the product cache relies on. `get` returns
None for a missing key; any backend failure raises `CacheError`, so callers
can tell "not cached" apart from "cache unavailable".
"""

from abc import ABC, abstractmethod


class CacheError(Exception):
    """The cache backend could not complete a request."""


class CacheBackend(ABC):
    """Abstract key/value cache interface."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the bytes stored under `key`, or None when absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store `value` under `key` for `ttl` seconds."""
        ...

    @abstractmethod
    def compare_and_set(self, key: str, expected: bytes | None, value: bytes, ttl: int) -> bool:
        """Store `value` only if `key` still holds `expected` (None meaning absent).

        Returns False, leaving the key untouched, when another writer got there
        first. The check and the write are one atomic step on the backend.
        """
        ...

    @abstractmethod
    def delete(self, *keys: str) -> None:
        """Remove every given key. Missing keys are ignored."""
        ...

    @abstractmethod
    def ping(self) -> bool:
        """Return True when the backend is reachable."""
        ...
