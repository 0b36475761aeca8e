"""Stay Score Backend — In-memory crime-stats cache with TTL"""

import asyncio
import time
import logging
from typing import Awaitable, Callable, Optional

from cachetools import TTLCache

logger = logging.getLogger("stayscore.cache")

Snapshot = dict[str, int]


class SnapshotCache:
    """Single-slot TTL cache holding one adapter's crime-stats snapshot.

    Refreshes happen inline on the first request after expiry. The lock makes
    the refresh single-flight: requests that arrive mid-refresh wait for it and
    reuse the new snapshot instead of hitting the upstream again. A failed
    refresh stores the fallback snapshot for a full TTL, so a dead upstream is
    retried once per window at most.
    """

    _KEY = "stats"

    def __init__(self, name: str, ttl: float, timer: Callable[[], float] = time.time):
        self.name = name
        self.ttl = ttl
        self._timer = timer
        self._slot: TTLCache = TTLCache(maxsize=1, ttl=ttl, timer=timer)
        self._lock = asyncio.Lock()
        # time of the last refresh attempt, None until the first one
        self.fetched_at: Optional[float] = None

    def peek(self) -> Optional[Snapshot]:
        """Current snapshot if still fresh, without triggering a refresh."""
        return self._slot.get(self._KEY)

    async def get(
        self,
        loader: Callable[[], Awaitable[Snapshot]],
        fallback: Callable[[], Snapshot] = dict,
    ) -> Snapshot:
        snapshot = self._slot.get(self._KEY)
        if snapshot is not None:
            return snapshot

        async with self._lock:
            snapshot = self._slot.get(self._KEY)
            if snapshot is not None:
                return snapshot

            started = self._timer()
            try:
                snapshot = await loader()
                logger.info(f"[{self.name}] crime stats refreshed: {len(snapshot)} areas")
            except Exception as e:
                logger.error(f"[{self.name}] Failed to fetch crime stats: {e}")
                snapshot = fallback()

            self._slot[self._KEY] = snapshot
            self.fetched_at = started
            return snapshot
