"""In-memory cache provider using cachetools.TLRUCache.

Each entry carries its own time-to-live, so the one store can hold
hour-long pending extractions next to day-long record mappings.  Expired
entries are invisible to ``get`` immediately and are physically removed
by a periodic sweep whose interval is independent of any entry's TTL.

Single-process only: the event loop never runs two callbacks at once,
so the check-and-set in :meth:`claim` needs no lock.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, NamedTuple

import structlog
from cachetools import TLRUCache

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)

_CLAIMED = object()


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCacheProvider(ICacheProvider):
    """In-memory per-entry TTL cache backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    default_ttl:
        Time-to-live in seconds used when ``put`` is called without one.
    check_period:
        Seconds between background sweeps of expired entries.
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    timer:
        Monotonic clock returning seconds; tests pass a fake to control
        expiry without sleeping.
    """

    def __init__(
        self,
        default_ttl: float = 3600,
        check_period: float = 600,
        max_size: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._check_period = check_period
        self._cache: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=max_size, ttu=_time_to_use, timer=timer
        )
        self._hits = 0
        self._misses = 0
        self._sweeper: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            logger.debug("cache_miss", key=key)
            return None
        self._hits += 1
        logger.debug("cache_hit", key=key)
        return entry.value

    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        self._cache[key] = _Entry(value, self._default_ttl if ttl is None else ttl)
        logger.debug("cache_set", key=key, ttl=ttl or self._default_ttl)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        return key in self._cache

    async def claim(self, key: str, ttl: float | None = None) -> bool:
        if key in self._cache:
            logger.debug("cache_claim_refused", key=key)
            return False
        self._cache[key] = _Entry(_CLAIMED, self._default_ttl if ttl is None else ttl)
        return True

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Physically remove expired entries; returns how many were dropped."""
        removed = len(self._cache.expire())
        if removed:
            logger.debug("cache_sweep", removed=removed, remaining=self._cache.currsize)
        return removed

    def start_sweeper(self) -> None:
        """Start the background sweep task on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._check_period)
            self.sweep()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def stats(self) -> dict[str, int]:
        return {"keys": self._cache.currsize, "hits": self._hits, "misses": self._misses}

    def clear(self) -> None:
        self._cache.clear()
        logger.info("cache_cleared")
