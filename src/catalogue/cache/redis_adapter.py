"""Redis-backed cache adapter."""

import redis

from catalogue.cache.port import CacheBackend, CacheError
from shared.settings import Settings


class RedisCache(CacheBackend):
    """Cache backend over a pooled redis-py client.

    Every call is bounded by the client's connect and socket timeouts.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCache":
        client = redis.Redis.from_url(
            settings.redis_url,
            socket_connect_timeout=settings.cache_connect_timeout,
            socket_timeout=settings.cache_socket_timeout,
            max_connections=settings.cache_max_connections,
        )
        return cls(client)

    def get(self, key: str) -> bytes | None:
        try:
            return self._client.get(key)
        except redis.RedisError as exc:
            raise CacheError(f"GET {key} failed: {exc}") from exc

    def set(self, key: str, value: bytes, ttl: int) -> None:
        try:
            self._client.set(key, value, ex=ttl)
        except redis.RedisError as exc:
            raise CacheError(f"SET {key} failed: {exc}") from exc

    def compare_and_set(self, key: str, expected: bytes | None, value: bytes, ttl: int) -> bool:
        try:
            with self._client.pipeline() as pipe:
                pipe.watch(key)
                if pipe.get(key) != expected:
                    pipe.unwatch()
                    return False
                pipe.multi()
                pipe.set(key, value, ex=ttl)
                pipe.execute()
                return True
        except redis.WatchError:
            return False
        except redis.RedisError as exc:
            raise CacheError(f"CAS {key} failed: {exc}") from exc

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            self._client.delete(*keys)
        except redis.RedisError as exc:
            raise CacheError(f"DEL {' '.join(keys)} failed: {exc}") from exc

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False
