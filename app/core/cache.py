# app/core/cache.py
import json
import logging
import re
import time
from typing import Any, Callable, Dict, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

# seconds of recency a single hit is worth when ranking entries for eviction
HIT_WEIGHT_SECONDS = 10


class CacheManager:
    """
    In-process LRU response cache bounded by entry count and estimated memory.
    Entries are ranked by last access plus a bonus per hit; the lowest ranked
    go first, a fifth of max_size at a time.
    """

    def __init__(
        self,
        max_size: int = 500,
        max_memory: int = 50 * 1024 * 1024,
        default_ttl: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.max_size = max_size
        self.max_memory = max_memory
        self.default_ttl = default_ttl
        self.clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}
        self.current_memory = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @staticmethod
    def estimate_size(data: Any) -> int:
        return len(json.dumps(data, ensure_ascii=False, default=str)) * 2

    def set(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        size = self.estimate_size(data)

        if self.current_memory + size > self.max_memory:
            self._evict(size)
        if len(self._entries) >= self.max_size:
            self.cleanup()

        if key in self._entries:
            self.current_memory -= self._entries[key]["size"]

        now = self.clock()
        self._entries[key] = {"data": data, "timestamp": now, "expires_at": now + ttl, "hits": 0, "size": size}
        self.current_memory += size

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        now = self.clock()
        if now > entry["expires_at"]:
            self.delete(key)
            self.misses += 1
            return None

        entry["hits"] += 1
        entry["timestamp"] = now
        self.hits += 1
        return entry["data"]

    def delete(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self.current_memory -= entry["size"]

    def clear(self) -> None:
        self._entries.clear()
        self.current_memory = 0

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob-like pattern where `*` matches anything."""
        regex = re.compile("^" + ".*".join(re.escape(part) for part in pattern.split("*")) + "$")
        matched = [key for key in self._entries if regex.match(key)]
        for key in matched:
            self.delete(key)
        return len(matched)

    def cleanup(self) -> None:
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now > entry["expires_at"]]
        for key in expired:
            self.delete(key)
            self.evictions += 1

        if len(self._entries) >= self.max_size:
            self._evict(0)

    def _evict(self, required_space: int) -> None:
        ranked = sorted(
            self._entries.items(),
            key=lambda item: item[1]["timestamp"] + item[1]["hits"] * HIT_WEIGHT_SECONDS,
        )
        batch = max(int(self.max_size * 0.2), 1)
        freed = 0
        for key, entry in ranked[:batch]:
            freed += entry["size"]
            self.delete(key)
            self.evictions += 1
            if freed >= required_space:
                break
        logger.debug(f"Cache evicted entries, freed {freed} bytes")

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "memory_usage": self.current_memory,
        }


cache_manager = CacheManager(
    max_size=settings.CACHE_MAX_SIZE,
    max_memory=settings.CACHE_MAX_MEMORY_MB * 1024 * 1024,
    default_ttl=settings.CACHE_TTL_SECONDS,
)


def cache_key(user_id: Optional[Any], path: str, query: str = "") -> str:
    owner = str(user_id) if user_id is not None else "anonymous"
    return f"{owner}:{path}?{query}" if query else f"{owner}:{path}"


def invalidate_user_cache(user_id: Any) -> int:
    deleted = cache_manager.delete_pattern(f"{user_id}:*")
    if deleted:
        logger.debug(f"Invalidated {deleted} cached responses for user {user_id}")
    return deleted
