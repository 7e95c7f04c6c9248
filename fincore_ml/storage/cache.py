"""Per-organization cache for learned pattern indexes."""

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar
from uuid import UUID

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _CacheEntry(Generic[T]):
    value: T
    expires_at: float


class OrganizationCache(Generic[T]):
    """LRU cache with a TTL, keyed by organization.

    Concurrent misses for the same organization share one load. Failed loads
    are not cached, so the next request retries.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[UUID, _CacheEntry[T]] = OrderedDict()
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _discard_lock(self, organization_id: UUID) -> None:
        lock = self._locks.get(organization_id)
        if lock is not None and not lock.locked():
            del self._locks[organization_id]

    def _fresh(self, organization_id: UUID) -> _CacheEntry[T] | None:
        entry = self._entries.get(organization_id)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[organization_id]
            self._discard_lock(organization_id)
            return None
        self._entries.move_to_end(organization_id)
        return entry

    async def get_or_load(
        self,
        organization_id: UUID,
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        entry = self._fresh(organization_id)
        if entry is not None:
            self._hits += 1
            return entry.value

        lock = self._locks.setdefault(organization_id, asyncio.Lock())
        try:
            async with lock:
                # Another request may have loaded it while we waited
                entry = self._fresh(organization_id)
                if entry is not None:
                    self._hits += 1
                    return entry.value

                self._misses += 1
                value = await loader()
                self._entries[organization_id] = _CacheEntry(
                    value=value, expires_at=self._clock() + self._ttl
                )
                self._entries.move_to_end(organization_id)
                while len(self._entries) > self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    self._discard_lock(evicted)
                    logger.debug(
                        "Evicted cached patterns for organization %s", evicted
                    )
                return value
        finally:
            # Locks only live as long as their organization has an entry
            if organization_id not in self._entries:
                self._discard_lock(organization_id)

    def invalidate(self, organization_id: UUID) -> bool:
        """Drop an organization's entry. Returns True if one was cached."""
        removed = self._entries.pop(organization_id, None) is not None
        self._discard_lock(organization_id)
        if removed:
            logger.info("Invalidated cached patterns for %s", organization_id)
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self._locks.clear()

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        return {
            "entries": len(self._entries),
            "max_entries": self._max_entries,
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
        }
