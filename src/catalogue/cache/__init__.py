"""Cache backend factory.

Provides get_cache() / set_cache() / reset_cache() to swap implementations:
- RedisCache in deployed environments
- InMemoryCache for development and testing

Selected with the CACHE_ADAPTER environment variable ("redis" or "memory").
"""

from catalogue.cache.port import CacheBackend
from shared.settings import get_settings

_current_cache: CacheBackend | None = None


def get_cache() -> CacheBackend:
    """Return the configured cache backend (singleton)."""
    global _current_cache
    if _current_cache is None:
        settings = get_settings()
        if settings.cache_adapter == "redis":
            from catalogue.cache.redis_adapter import RedisCache

            _current_cache = RedisCache.from_settings(settings)
        elif settings.cache_adapter == "memory":
            from catalogue.cache.memory_adapter import InMemoryCache

            _current_cache = InMemoryCache()
        else:
            raise ValueError(f"Unknown cache adapter: {settings.cache_adapter}")
    return _current_cache


def set_cache(cache: CacheBackend) -> None:
    """Override the active cache backend (useful for tests)."""
    global _current_cache
    _current_cache = cache


def reset_cache() -> None:
    """Reset to the configured cache backend."""
    global _current_cache
    _current_cache = None
