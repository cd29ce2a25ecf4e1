"""Freshness cache for profile records, backed by Vercel KV (Upstash Redis)."""

from __future__ import annotations

import json
import time
from concurrent.futures import Future
from typing import Any, Callable, Optional

from upstash_redis import Redis

from . import background, config
from .log import get_logger
from .models import UserRecord

logger = get_logger(__name__)

KEY_PREFIX = "rpg-card:user"


def get_kv_client() -> Optional[Redis]:
    """Get Vercel KV client if configured."""
    url = config.KV_REST_API_URL
    token = config.KV_REST_API_TOKEN
    if not url or not token:
        return None
    try:
        return Redis(url=url, token=token)
    except Exception as e:
        logger.warning("kv_client_unavailable", error=str(e))
        return None


class MemoryKV:
    """Process-local stand-in for the KV store, with the same `get`/`setex` surface.

    Entries expire on their own; callers never look at timestamps.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        item = self._data.get(key)
        if item is None:
            return None
        expires_at, value = item
        if self._clock() >= expires_at:
            self._data.pop(key, None)
            return None
        return value

    def setex(self, key: str, seconds: int, value: Any) -> None:
        now = self._clock()
        for stale in [k for k, (expires_at, _) in self._data.items() if now >= expires_at]:
            del self._data[stale]
        self._data[key] = (now + seconds, value)


class FreshnessCache:
    """Stores UserRecords with a backend-enforced TTL. Backend failures count as misses."""

    def __init__(self, client=None, ttl: int = config.CACHE_TTL_SECONDS):
        self._kv = client if client is not None else MemoryKV()
        self.ttl = ttl

    @staticmethod
    def _key(username: str) -> str:
        return f"{KEY_PREFIX}:{username.lower()}"

    def get(self, username: str) -> Optional[UserRecord]:
        key = self._key(username)
        try:
            raw = self._kv.get(key)
        except Exception as e:
            logger.warning("cache_get_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            return UserRecord.from_dict(data)
        except ValueError as e:
            logger.warning("cache_entry_corrupt", key=key, error=str(e))
            return None

    def set(self, username: str, record: UserRecord) -> None:
        key = self._key(username)
        try:
            self._kv.setex(key, self.ttl, json.dumps(record.to_dict()))
        except Exception as e:
            logger.warning("cache_set_failed", key=key, error=str(e))

    def set_async(self, username: str, record: UserRecord) -> Future:
        """Schedule `set` in the background; the response does not wait for it."""
        return background.submit(self.set, username, record)


_shared: Optional[FreshnessCache] = None


def get_cache() -> FreshnessCache:
    """Process-wide cache, created on first use."""
    global _shared
    if _shared is None:
        _shared = FreshnessCache(get_kv_client())
    return _shared
