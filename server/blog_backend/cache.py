"""
Cache abstraction for read-through caching of config snapshots.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for production. The cache is advisory: callers always
treat the database as the source of truth.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


class Cache(Protocol):
    """Minimal cache interface injected into stores and services."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def delete_prefix(self, prefix: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def get_or_set(
        self, key: str, loader: Callable[[], Any], ttl: int | None = None
    ) -> Any:
        ...


def _copy(value: Any) -> Any:
    # Mimic serialization so callers never share mutable state with the cache.
    return json.loads(json.dumps(value, default=str))


@dataclass
class InMemoryCache:
    """Process-local cache for testing/dev."""

    items: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self.items:
                return None
            return _copy(self.items[key])

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        with self._lock:
            self.items[key] = _copy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self.items.pop(key, None)

    def delete_prefix(self, prefix: str) -> None:
        with self._lock:
            for key in [k for k in self.items if k.startswith(prefix)]:
                del self.items[key]

    def clear(self) -> None:
        with self._lock:
            self.items.clear()

    def get_or_set(
        self, key: str, loader: Callable[[], Any], ttl: int | None = None
    ) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        self.set(key, value, ttl=ttl)
        return _copy(value)


# Connection resets and timeouts both mean "Redis is unreachable right now".
REDIS_UNAVAILABLE = (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError)


@dataclass
class RedisCache:
    """Redis-backed cache storing JSON-encoded values under a key prefix.

    Every operation degrades to a miss or a no-op while Redis is
    unreachable; the database stays the source of truth.
    """

    url: str
    prefix: str = "blog:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _reconnect(self, operation: str, exc: Exception) -> None:
        # Connection resets happen on managed Redis. The next call gets a
        # fresh client.
        logger.warning("Redis cache %s failed: %s", operation, type(exc).__name__)
        self.client = redis.Redis.from_url(self.url)

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(self._key(key))
        except REDIS_UNAVAILABLE as exc:
            self._reconnect("get", exc)
            return None
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        payload = json.dumps(value, default=str)
        try:
            if ttl:
                self.client.set(self._key(key), payload, ex=ttl)
            else:
                self.client.set(self._key(key), payload)
        except REDIS_UNAVAILABLE as exc:
            self._reconnect("set", exc)

    def delete(self, key: str) -> None:
        # A missed delete leaves the old value until its TTL runs out.
        try:
            self.client.delete(self._key(key))
        except REDIS_UNAVAILABLE as exc:
            self._reconnect("delete", exc)

    def delete_prefix(self, prefix: str) -> None:
        try:
            keys = list(self.client.scan_iter(match=f"{self._key(prefix)}*"))
            if keys:
                self.client.delete(*keys)
        except REDIS_UNAVAILABLE as exc:
            self._reconnect("delete_prefix", exc)

    def clear(self) -> None:
        # Only our own prefix; the Redis instance may be shared.
        self.delete_prefix("")

    def get_or_set(
        self, key: str, loader: Callable[[], Any], ttl: int | None = None
    ) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        self.set(key, value, ttl=ttl)
        return value
