import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional
from dataclasses import dataclass


@dataclass
class CacheEntry:
    task: "asyncio.Future[Any]"
    expires_at: Optional[float]

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class InflightCache:
    """In-memory cache of fetches, shared while in flight.

    The first caller for a key starts the fetch and stores the task; every
    concurrent or later caller awaits that same task. A failed fetch is
    evicted so the next caller starts a new one. With ``ttl_seconds == 0``
    successful entries never expire.
    """

    def __init__(self, ttl_seconds: int = 0):
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._lock = asyncio.Lock()

    async def get_or_fetch(self, key: Hashable, fetch: Callable[[], Awaitable[Any]]) -> Any:
        async with self._lock:
            now = time.monotonic()
            entry = self._entries.get(key)
            if entry is None or entry.expired(now):
                expires_at = now + self.ttl_seconds if self.ttl_seconds else None
                entry = CacheEntry(task=asyncio.ensure_future(fetch()), expires_at=expires_at)
                self._entries[key] = entry

        try:
            # shield: a cancelled caller must not cancel the fetch other callers share
            return await asyncio.shield(entry.task)
        except Exception:
            async with self._lock:
                if self._entries.get(key) is entry:
                    del self._entries[key]
            raise

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def size(self) -> int:
        return len(self._entries)
