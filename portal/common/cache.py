"""In-memory TTL cache for query results.

One ``DataCache`` lives on ``app.state`` and is handed to services through
dependencies; tests build their own. Entries are owned by a single event
loop, so no locking is needed.

Key layout::

    profiles                    active employee directory (default TTL)
    dashboard-stats-<user_id>   per-user dashboard statistics (realtime TTL)
    tasks-<user_id>             per-user task list (realtime TTL)
    leaves-<user_id>            per-user leave list (realtime TTL)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, NamedTuple, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL = 5 * 60.0
REALTIME_TTL = 60.0
SWEEP_INTERVAL = 10 * 60.0

PROFILES_KEY = "profiles"
DASHBOARD_STATS_PREFIX = "dashboard-stats-"
TASKS_PREFIX = "tasks-"
LEAVES_PREFIX = "leaves-"


def dashboard_stats_key(user_id: Any) -> str:
    return f"{DASHBOARD_STATS_PREFIX}{user_id}"


def tasks_key(user_id: Any) -> str:
    return f"{TASKS_PREFIX}{user_id}"


def leaves_key(user_id: Any) -> str:
    return f"{LEAVES_PREFIX}{user_id}"


class CacheEntry(NamedTuple):
    value: Any
    stored_at: float
    ttl: float


class DataCache:
    """Key → value store with a time-to-live per entry."""

    def __init__(
        self,
        *,
        default_ttl: float = DEFAULT_TTL,
        realtime_ttl: float = REALTIME_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self.realtime_ttl = realtime_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._sweeper: Optional[asyncio.Task] = None

    # ── Core operations ─────────────────────────────────────────────

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store *value*, replacing any previous entry for *key*."""
        self._entries[key] = CacheEntry(
            value=value,
            stored_at=self._clock(),
            ttl=ttl if ttl is not None else self.default_ttl,
        )

    def get(self, key: str) -> Optional[Any]:
        """Return the fresh value for *key*, or ``None`` (evicting a stale entry)."""
        entry = self._fresh_entry(key)
        if entry is None:
            logger.debug("Cache miss: %s", key)
            return None
        logger.debug("Cache hit: %s", key)
        return entry.value

    def has(self, key: str) -> bool:
        return self._fresh_entry(key) is not None

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def cleanup(self) -> int:
        """Evict every expired entry; return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not _is_fresh(entry, now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Cache sweep evicted %d entries", len(expired))
        return len(expired)

    def stats(self) -> dict[str, Any]:
        """Size and keys, for debugging."""
        return {"size": len(self._entries), "keys": list(self._entries)}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    # ── Typed helpers ───────────────────────────────────────────────

    def set_profiles(self, profiles: list, ttl: Optional[float] = None) -> None:
        self.set(PROFILES_KEY, profiles, self.default_ttl if ttl is None else ttl)

    def get_profiles(self) -> Optional[list]:
        return self.get(PROFILES_KEY)

    def set_dashboard_stats(self, user_id: Any, stats: Any, ttl: Optional[float] = None) -> None:
        self.set(dashboard_stats_key(user_id), stats, self.realtime_ttl if ttl is None else ttl)

    def get_dashboard_stats(self, user_id: Any) -> Optional[Any]:
        return self.get(dashboard_stats_key(user_id))

    def set_tasks(self, user_id: Any, tasks: list, ttl: Optional[float] = None) -> None:
        self.set(tasks_key(user_id), tasks, self.realtime_ttl if ttl is None else ttl)

    def get_tasks(self, user_id: Any) -> Optional[list]:
        return self.get(tasks_key(user_id))

    def set_leave_requests(self, user_id: Any, leaves: list, ttl: Optional[float] = None) -> None:
        self.set(leaves_key(user_id), leaves, self.realtime_ttl if ttl is None else ttl)

    def get_leave_requests(self, user_id: Any) -> Optional[list]:
        return self.get(leaves_key(user_id))

    # ── Invalidation ────────────────────────────────────────────────

    def invalidate_user_data(self, user_id: Any) -> None:
        """Drop the statistics, task and leave entries of one user."""
        self.delete(dashboard_stats_key(user_id))
        self.delete(tasks_key(user_id))
        self.delete(leaves_key(user_id))

    def invalidate_global_data(self) -> None:
        """Drop the directory and every user's dashboard statistics."""
        self.delete(PROFILES_KEY)
        self.delete_prefix(DASHBOARD_STATS_PREFIX)

    def invalidate_task_lists(self) -> None:
        """Drop every user's cached task list (managers see their department's tasks)."""
        self.delete_prefix(TASKS_PREFIX)

    def invalidate_leave_lists(self) -> None:
        """Drop every user's cached leave list (managers see all requests)."""
        self.delete_prefix(LEAVES_PREFIX)

    def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self._entries if k.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    # ── Background sweep ────────────────────────────────────────────

    def start_sweeper(self, interval: float = SWEEP_INTERVAL) -> asyncio.Task:
        """Run ``cleanup()`` every *interval* seconds on the running loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(
                self._sweep_forever(interval), name="data-cache-sweeper",
            )
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.cleanup()

    # ── Internal ────────────────────────────────────────────────────

    def _fresh_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not _is_fresh(entry, self._clock()):
            del self._entries[key]
            return None
        return entry


def _is_fresh(entry: CacheEntry, now: float) -> bool:
    return now - entry.stored_at < entry.ttl
