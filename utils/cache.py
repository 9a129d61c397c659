"""
In-memory cache with TTL expiry and LRU eviction.
Used for LLM responses, extracted keywords and Wikipedia searches.
"""
import asyncio
import hashlib
import json
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from config import Config
from utils.logger import get_logger

logger = get_logger("cache")

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """Cache entry with expiry and access bookkeeping."""
    value: V
    timestamp: float
    ttl: float
    access_count: int = 1
    last_accessed: float = 0.0

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class ResponseCache(Generic[V]):
    """
    Bounded cache with per-entry TTL and strict LRU eviction.

    Expired entries are dropped lazily on read and periodically by an
    optional background sweeper.
    """

    def __init__(self, name: str, max_size: int = 100, default_ttl: float = 3600.0,
                 cleanup_interval: float = 300.0):
        """
        Initialize the cache.

        Args:
            name: Name used in log messages
            max_size: Maximum number of entries
            default_ttl: TTL in seconds for entries set without an explicit one
            cleanup_interval: Seconds between background sweeps
        """
        self.name = name
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._cleanup_interval = cleanup_interval
        # Ordered least- to most-recently used
        self._entries: "OrderedDict[str, CacheEntry[V]]" = OrderedDict()
        self._cleanup_task: Optional[asyncio.Task] = None

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: str) -> Optional[V]:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        now = time.time()
        if entry.is_expired(now):
            del self._entries[key]
            logger.debug(f"{self.name}: expired '{key[:16]}'")
            return None

        entry.access_count += 1
        entry.last_accessed = now
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        """Store a value, evicting the least recently used entry if the cache is full."""
        now = time.time()

        if key not in self._entries and len(self._entries) >= self._max_size:
            self._evict_lru()

        self._entries[key] = CacheEntry(
            value=value,
            timestamp=now,
            ttl=ttl if ttl is not None else self._default_ttl,
            last_accessed=now
        )
        self._entries.move_to_end(key)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        """Keys in LRU order, least recently used first."""
        return list(self._entries.keys())

    def _evict_lru(self) -> None:
        if not self._entries:
            return
        lru_key, _ = self._entries.popitem(last=False)
        logger.debug(f"{self.name}: LRU evicted '{lru_key[:16]}'")

    def cleanup_expired(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        now = time.time()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]

        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug(f"{self.name}: swept {len(expired)} expired entries")
        return len(expired)

    def get_stats(self) -> dict[str, Any]:
        """Summary of cache usage."""
        entries = list(self._entries.values())
        total_hits = sum(entry.access_count for entry in entries)

        return {
            "name": self.name,
            "size": len(entries),
            "max_size": self._max_size,
            "memory_usage": self._estimate_memory_usage(),
            "hit_rate": total_hits / len(entries) if entries else 0,
            "oldest_entry": min((e.timestamp for e in entries), default=None),
            "newest_entry": max((e.timestamp for e in entries), default=None),
        }

    def _estimate_memory_usage(self) -> int:
        total = 0
        for entry in self._entries.values():
            total += len(json.dumps(entry.value, default=str)) * 2
            total += 100
        return total

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval)
            self.cleanup_expired()

    def start_cleanup(self) -> None:
        """Start the periodic sweeper on the running event loop."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop_cleanup(self) -> None:
        """Stop the periodic sweeper."""
        if self._cleanup_task is None:
            return

        self._cleanup_task.cancel()
        try:
            await self._cleanup_task
        except asyncio.CancelledError:
            pass
        self._cleanup_task = None


def make_cache_key(messages: list[dict], model: str, web_search: bool) -> str:
    """Create a cache key from the conversation, model and web-search flag."""
    payload = json.dumps(
        {"messages": messages, "model": model, "web": bool(web_search)},
        sort_keys=True,
        ensure_ascii=False
    )
    return hashlib.sha256(payload.encode()).hexdigest()


def _build(name: str, policy: tuple) -> ResponseCache:
    max_size, ttl, interval = policy
    return ResponseCache(name, max_size=max_size, default_ttl=ttl, cleanup_interval=interval)


# Global cache instances
_response_cache: ResponseCache[str] = _build("responses", Config.RESPONSE_CACHE_POLICY)
_keyword_cache: ResponseCache[list] = _build("keywords", Config.KEYWORD_CACHE_POLICY)
_wikipedia_cache: ResponseCache[list] = _build("wikipedia", Config.WIKIPEDIA_CACHE_POLICY)


def get_response_cache() -> ResponseCache[str]:
    """Get the global LLM response cache."""
    return _response_cache


def get_keyword_cache() -> ResponseCache[list]:
    """Get the global extracted-keyword cache."""
    return _keyword_cache


def get_wikipedia_cache() -> ResponseCache[list]:
    """Get the global Wikipedia search cache."""
    return _wikipedia_cache


def all_caches() -> list[ResponseCache]:
    return [_response_cache, _keyword_cache, _wikipedia_cache]
