"""Process-wide settings, read once from the environment."""

import os
from dataclasses import dataclass
from functools import lru_cache


def _float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass(frozen=True)
class Settings:
    """Connection targets, timeouts and cache policy for the service.

    Every outbound dependency carries a bounded timeout so that a slow
    database or cache cannot stall a request worker indefinitely.
    """

    database_url: str = "sqlite:///stockroom.db"
    db_connect_timeout: float = 5.0
    db_statement_timeout: float = 10.0
    db_pool_size: int = 10
    db_pool_timeout: float = 5.0
    db_isolation_level: str | None = None

    cache_adapter: str = "redis"
    redis_url: str = "redis://localhost:6379/0"
    cache_connect_timeout: float = 2.0
    cache_socket_timeout: float = 2.0
    cache_max_connections: int = 20
    product_cache_ttl: int = 300
    not_found_cache_ttl: int = 60

    order_retry_attempts: int = 3

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            db_connect_timeout=_float("DB_CONNECT_TIMEOUT", cls.db_connect_timeout),
            db_statement_timeout=_float("DB_STATEMENT_TIMEOUT", cls.db_statement_timeout),
            db_pool_size=_int("DB_POOL_SIZE", cls.db_pool_size),
            db_pool_timeout=_float("DB_POOL_TIMEOUT", cls.db_pool_timeout),
            db_isolation_level=os.getenv("DB_ISOLATION_LEVEL") or None,
            cache_adapter=os.getenv("CACHE_ADAPTER", cls.cache_adapter),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            cache_connect_timeout=_float("CACHE_CONNECT_TIMEOUT", cls.cache_connect_timeout),
            cache_socket_timeout=_float("CACHE_SOCKET_TIMEOUT", cls.cache_socket_timeout),
            cache_max_connections=_int("CACHE_MAX_CONNECTIONS", cls.cache_max_connections),
            product_cache_ttl=_int("PRODUCT_CACHE_TTL", cls.product_cache_ttl),
            not_found_cache_ttl=_int("NOT_FOUND_CACHE_TTL", cls.not_found_cache_ttl),
            order_retry_attempts=_int("ORDER_RETRY_ATTEMPTS", cls.order_retry_attempts),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the settings for this process (read from the environment once)."""
    return Settings.from_env()
