"""Tag-invalidated TTL cache for derived read views.

Reads are cached for a short fixed window. Mutations never update a cached
value in place; they mark tags stale and the next read recomputes from the
datastore. Each mutation declares its Invalidation once and the operation
boundary applies it after commit.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Invalidation:
    """Tags and paths made stale by a committed mutation."""

    tags: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()

    def __or__(self, other: Invalidation) -> Invalidation:
        return Invalidation(
            tags=tuple(dict.fromkeys(self.tags + other.tags)),
            paths=tuple(dict.fromkeys(self.paths + other.paths)),
        )


ORDERS_INVALIDATION = Invalidation(
    tags=("business", "orders"),
    paths=("/admin/orders", "/admin/business"),
)
EMPLOYEE_PAYMENTS_INVALIDATION = Invalidation(
    tags=("business", "orders", "transactions"),
    paths=("/admin/orders", "/admin/business", "/admin/finances"),
)
PAYMENTS_INVALIDATION = Invalidation(
    tags=("business", "orders", "payments"),
    paths=("/admin/orders",),
)
TRANSACTIONS_INVALIDATION = Invalidation(
    tags=("business", "transactions"),
    paths=("/admin/finances",),
)
NOTIFICATIONS_INVALIDATION = Invalidation(
    tags=("notifications",),
    paths=("/admin/notifications",),
)
RESTORE_INVALIDATION = (
    ORDERS_INVALIDATION
    | EMPLOYEE_PAYMENTS_INVALIDATION
    | PAYMENTS_INVALIDATION
    | NOTIFICATIONS_INVALIDATION
)


@dataclass
class CacheEntry:
    """Cached value with expiry and dependency tags."""

    value: Any
    expires_at: float
    tags: frozenset[str] = field(default_factory=frozenset)


class TaggedCache:
    """In-process TTL cache with tag and path invalidation."""

    def __init__(
        self,
        default_ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._stale_paths: set[str] = set()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any | None:
        """Return a live cached value or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    def set(
        self,
        key: str,
        value: Any,
        tags: tuple[str, ...] | list[str] = (),
        ttl: float | None = None,
    ) -> None:
        """Store a value under key, depending on the given tags."""
        expires_at = self._clock() + (self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = CacheEntry(value, expires_at, frozenset(tags))

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
        tags: tuple[str, ...] | list[str] = (),
        ttl: float | None = None,
    ) -> T:
        """Return the cached value or compute, store and return it."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = await compute()
        self.set(key, value, tags=tags, ttl=ttl)
        return value

    def invalidate_tag(self, tag: str) -> int:
        """Drop every entry depending on tag. Returns count dropped."""
        with self._lock:
            stale = [k for k, e in self._entries.items() if tag in e.tags]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def invalidate_path(self, path: str) -> None:
        """Mark a rendered view path as stale."""
        with self._lock:
            self._stale_paths.add(path)

    def apply(self, invalidation: Invalidation) -> None:
        """Apply the invalidation list of a committed mutation."""
        dropped = sum(self.invalidate_tag(tag) for tag in invalidation.tags)
        for path in invalidation.paths:
            self.invalidate_path(path)
        logger.debug(
            "Invalidated tags=%s paths=%s (%d entries dropped)",
            invalidation.tags,
            invalidation.paths,
            dropped,
        )

    def pop_stale_paths(self) -> set[str]:
        """Return and clear the set of stale view paths."""
        with self._lock:
            paths, self._stale_paths = self._stale_paths, set()
        return paths

    def stats(self) -> dict[str, int]:
        """Entry count and hit/miss counters."""
        with self._lock:
            return {
                "entries": len(self._entries),
                "stale_paths": len(self._stale_paths),
                "hits": self.hits,
                "misses": self.misses,
            }

    def clear(self) -> None:
        """Drop everything."""
        with self._lock:
            self._entries.clear()
            self._stale_paths.clear()


_cache: TaggedCache | None = None


def get_cache() -> TaggedCache:
    """Get the process-wide cache instance."""
    global _cache
    if _cache is None:
        from newsdesk_ledger.config import get_settings

        _cache = TaggedCache(default_ttl=get_settings().business_cache_ttl)
    return _cache
