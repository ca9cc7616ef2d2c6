"""Domain models for the in-memory cache."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

DEFAULT_TTL_SECONDS = 300


def cache_key(resource: str, user_id: object, *parts: object) -> str:
    """Build a namespaced cache key like ``{resource}:{user_id}[:{part}...]``."""
    return ":".join([resource, str(user_id), *(str(part) for part in parts)])


def key_resource(key: str) -> str:
    """Return the resource segment of a namespaced key."""
    return key.split(":", maxsplit=1)[0]


def key_owner(key: str) -> str | None:
    """Return the user segment of a namespaced key, if present."""
    parts = key.split(":", maxsplit=2)
    if len(parts) < 2:
        return None
    return parts[1]


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its insertion time and time-to-live."""

    key: str
    value: object
    inserted_at: datetime
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    tags: frozenset[str] = field(default_factory=frozenset)
    hit_count: int = 0
    last_access: datetime | None = None

    @property
    def expires_at(self) -> datetime:
        """Return the moment the entry stops being live."""
        return self.inserted_at + timedelta(seconds=self.ttl_seconds)

    def is_live(self, now: datetime) -> bool:
        """Return True while ``now`` is strictly before expiry."""
        return now < self.expires_at


@dataclass(frozen=True)
class CacheMetrics:
    """Point-in-time cache statistics."""

    total_entries: int
    hits: int
    misses: int
    expirations: int
    invalidations: int
    tagged_keys: int
    last_cleanup: datetime | None

    @property
    def hit_rate(self) -> float:
        """Return hits over total reads, or 0.0 before any read."""
        reads = self.hits + self.misses
        if reads == 0:
            return 0.0
        return self.hits / reads

    def as_dict(self) -> dict[str, object]:
        """Serialize metrics for JSON responses."""
        return {
            "totalEntries": self.total_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hitRate": self.hit_rate,
            "expirations": self.expirations,
            "invalidations": self.invalidations,
            "taggedKeys": self.tagged_keys,
            "lastCleanup": (
                self.last_cleanup.isoformat() if self.last_cleanup else None
            ),
        }
