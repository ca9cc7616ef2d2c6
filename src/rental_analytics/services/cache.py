"""In-memory TTL cache with key, pattern, user and tag invalidation."""

import re
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Protocol

from rental_analytics.domain.cache import (
    DEFAULT_TTL_SECONDS,
    CacheEntry,
    CacheMetrics,
    key_owner,
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(tz=UTC)


class Cache(Protocol):
    """Cache interface used by read-through services."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(
        self,
        key: str,
        value: object,
        ttl_seconds: float | None = None,
        tags: Iterable[str] = (),
    ) -> None:
        """Store a cached value with a TTL in seconds."""


class TTLCache(Cache):
    """Process-wide key/value cache with lazy expiration.

    Expired entries are dropped when read. A sweep also runs from ``set`` at
    most once per ``cleanup_interval_seconds``. All operations hold one lock,
    so the instance can be shared by threadpool-run request handlers.
    """

    def __init__(
        self,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        cleanup_interval_seconds: float = 60,
        clock: Clock = utc_now,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._tag_index: dict[str, set[str]] = {}
        self._default_ttl_seconds = default_ttl_seconds
        self._cleanup_interval = timedelta(seconds=cleanup_interval_seconds)
        self._clock = clock
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._expirations = 0
        self._invalidations = 0
        self._last_cleanup: datetime | None = None
        self._next_sweep_at: datetime | None = None

    @property
    def default_ttl_seconds(self) -> float:
        return self._default_ttl_seconds

    def get(self, key: str) -> object | None:
        """Return the live value for ``key`` or None on a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            now = self._clock()
            if not entry.is_live(now):
                self._remove(key)
                self._expirations += 1
                self._misses += 1
                return None
            self._entries[key] = replace(
                entry, hit_count=entry.hit_count + 1, last_access=now
            )
            self._hits += 1
            return entry.value

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key`` without touching hit counters."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.is_live(self._clock()):
                return None
            return entry

    def set(
        self,
        key: str,
        value: object,
        ttl_seconds: float | None = None,
        tags: Iterable[str] = (),
    ) -> None:
        """Insert or overwrite ``key``, resetting its insertion time."""
        with self._lock:
            now = self._clock()
            if self._cleanup_due(now):
                self._purge_expired(now)
            if key in self._entries:
                self._unindex(key)
            entry = CacheEntry(
                key=key,
                value=value,
                inserted_at=now,
                ttl_seconds=(
                    self._default_ttl_seconds if ttl_seconds is None else ttl_seconds
                ),
                tags=frozenset(tags),
                last_access=now,
            )
            self._entries[key] = entry
            for tag in entry.tags:
                self._tag_index.setdefault(tag, set()).add(key)

    def invalidate(self, key: str) -> bool:
        """Remove ``key`` if present. Absent keys are not an error."""
        with self._lock:
            if key not in self._entries:
                return False
            self._remove(key)
            self._invalidations += 1
            return True

    def invalidate_where(self, predicate: Callable[[str], bool]) -> int:
        """Remove every entry whose key satisfies ``predicate``."""
        with self._lock:
            doomed = [key for key in self._entries if predicate(key)]
            for key in doomed:
                self._remove(key)
            self._invalidations += len(doomed)
            return len(doomed)

    def invalidate_pattern(self, pattern: "re.Pattern[str] | str") -> int:
        """Remove every entry whose key matches ``pattern`` anywhere."""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.invalidate_where(lambda key: regex.search(key) is not None)

    def invalidate_user(self, user_id: object) -> int:
        """Remove every entry whose owner segment is ``user_id``."""
        owner = str(user_id)
        return self.invalidate_where(lambda key: key_owner(key) == owner)

    def invalidate_tags(
        self,
        tags: Iterable[str],
        predicate: Callable[[str], bool] | None = None,
    ) -> int:
        """Remove entries carrying any of ``tags``, optionally filtered by key."""
        with self._lock:
            doomed: set[str] = set()
            for tag in tags:
                doomed.update(self._tag_index.get(tag, ()))
            if predicate is not None:
                doomed = {key for key in doomed if predicate(key)}
            for key in doomed:
                self._remove(key)
            self._invalidations += len(doomed)
            return len(doomed)

    def purge_expired(self) -> int:
        """Drop every expired entry now."""
        with self._lock:
            return self._purge_expired(self._clock())

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._invalidations += len(self._entries)
            self._entries.clear()
            self._tag_index.clear()

    def keys(self) -> list[str]:
        """Return stored keys, including entries not yet purged."""
        with self._lock:
            return list(self._entries)

    def metrics(self) -> CacheMetrics:
        """Return a snapshot of cache statistics."""
        with self._lock:
            return CacheMetrics(
                total_entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                expirations=self._expirations,
                invalidations=self._invalidations,
                tagged_keys=sum(len(keys) for keys in self._tag_index.values()),
                last_cleanup=self._last_cleanup,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get_entry(key) is not None

    def _cleanup_due(self, now: datetime) -> bool:
        if self._next_sweep_at is None:
            self._next_sweep_at = now + self._cleanup_interval
            return False
        return now >= self._next_sweep_at

    def _purge_expired(self, now: datetime) -> int:
        expired = [
            key for key, entry in self._entries.items() if not entry.is_live(now)
        ]
        for key in expired:
            self._remove(key)
        self._expirations += len(expired)
        self._last_cleanup = now
        self._next_sweep_at = now + self._cleanup_interval
        return len(expired)

    def _remove(self, key: str) -> None:
        self._unindex(key)
        self._entries.pop(key, None)

    def _unindex(self, key: str) -> None:
        entry = self._entries.get(key)
        if entry is None:
            return
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tag_index[tag]
