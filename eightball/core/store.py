"""Key-value store port and its adapters.

The oracle only needs set/get/expire/keys with per-key TTLs. Redis backs
production deployments; MemoryStore serves local runs and tests.
"""

from __future__ import annotations

import fnmatch
import time
from typing import Callable, Dict, List, Optional, Protocol, Tuple

import redis.asyncio as redis


_GLOB_SPECIALS = "\\*?["


def escape_glob(value: str) -> str:
    """Escape glob metacharacters so ids match literally in key patterns."""

    return "".join(f"[{ch}]" if ch in _GLOB_SPECIALS else ch for ch in value)


class KeyValueStore(Protocol):
    """Storage operations required by the oracle."""

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ...

    async def get(self, key: str) -> Optional[str]:
        ...

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        ...

    async def keys(self, pattern: str) -> List[str]:
        ...

    async def close(self) -> None:
        ...


class MemoryStore:
    """In-process store; expired keys are swept on every write and scan.

    ``clock`` returns seconds; tests pass a fake one to move time forward.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def _purge(self) -> None:
        now = self._clock()
        expired = [
            key
            for key, (_, expires_at) in self._data.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._data[key]

    def _alive(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return False
        return True

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self._purge()
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        self._data[key] = (value, expires_at)

    async def get(self, key: str) -> Optional[str]:
        if not self._alive(key):
            return None
        return self._data[key][0]

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        if not self._alive(key):
            return False
        value, _ = self._data[key]
        self._data[key] = (value, self._clock() + ttl_seconds)
        return True

    async def keys(self, pattern: str) -> List[str]:
        # sweep every expired key, not only those matching the pattern
        self._purge()
        return [k for k in self._data if fnmatch.fnmatchcase(k, pattern)]

    async def close(self) -> None:
        self._data.clear()


class RedisStore:
    """Thin redis.asyncio wrapper that satisfies the KeyValueStore contract."""

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStore":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        await self._redis.set(key, value, ex=ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(key)

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        return bool(await self._redis.expire(key, ttl_seconds))

    async def keys(self, pattern: str) -> List[str]:
        # incremental SCAN, never KEYS
        return [key async for key in self._redis.scan_iter(match=pattern)]

    async def close(self) -> None:
        await self._redis.aclose()


def build_store(redis_url: Optional[str]) -> KeyValueStore:
    if redis_url:
        return RedisStore.from_url(redis_url)
    return MemoryStore()
