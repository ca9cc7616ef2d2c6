"""Platform listing with per-user caching."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from rental_analytics.domain.cache import cache_key
from rental_analytics.domain.errors import NotFoundError, ValidationError
from rental_analytics.domain.platforms import (
    PREDEFINED_PLATFORMS,
    CustomPlatform,
    PlatformList,
)
from rental_analytics.services.cache import TTLCache
from rental_analytics.services.cache_coordinator import CacheResource, CacheTag

_logger = logging.getLogger(__name__)


class PlatformRepository(Protocol):
    """Persistence interface for custom platforms."""

    def list_custom_platforms(self, user_id: UUID) -> list[CustomPlatform]:
        """Return the user's custom platforms ordered by name."""

    def get_custom_platform(
        self, user_id: UUID, platform_id: UUID
    ) -> CustomPlatform | None:
        """Return a custom platform owned by the user, if present."""

    def find_by_name(self, user_id: UUID, name: str) -> CustomPlatform | None:
        """Return the user's custom platform with this name, if present."""

    def create_custom_platform(self, user_id: UUID, name: str) -> CustomPlatform:
        """Create a custom platform and return it."""

    def update_custom_platform(self, platform_id: UUID, name: str) -> CustomPlatform:
        """Rename a custom platform and return it."""

    def delete_custom_platform(self, platform_id: UUID) -> None:
        """Delete a custom platform."""

    def count_rent_entries(self, user_id: UUID, platform_id: UUID) -> int:
        """Return how many rent entries reference the platform."""


@dataclass
class PlatformService:
    """Application service for predefined and custom platforms."""

    repository: PlatformRepository
    cache: TTLCache
    region: str = "russian"
    ttl_seconds: float | None = None

    def get_user_platforms(self, user_id: UUID) -> PlatformList:
        """Return platforms for a user, served from cache when possible."""
        key = cache_key(CacheResource.PLATFORMS, user_id)
        cached = self.cache.get(key)
        if isinstance(cached, PlatformList):
            return cached

        platforms = PlatformList(
            predefined=list(PREDEFINED_PLATFORMS.get(self.region, [])),
            custom=self.repository.list_custom_platforms(user_id),
        )
        self.cache.set(
            key, platforms, ttl_seconds=self.ttl_seconds, tags=(CacheTag.PLATFORMS,)
        )
        return platforms

    def create_custom_platform(self, user_id: UUID, name: str) -> CustomPlatform:
        """Create a custom platform with a unique name."""
        cleaned = _clean_name(name)
        if self.repository.find_by_name(user_id, cleaned) is not None:
            raise ValidationError("Platform name already exists")
        platform = self.repository.create_custom_platform(user_id, cleaned)
        self._invalidate(user_id)
        return platform

    def update_custom_platform(
        self, user_id: UUID, platform_id: UUID, name: str
    ) -> CustomPlatform:
        """Rename a custom platform owned by the user."""
        if self.repository.get_custom_platform(user_id, platform_id) is None:
            raise NotFoundError("Platform not found")
        cleaned = _clean_name(name)
        duplicate = self.repository.find_by_name(user_id, cleaned)
        if duplicate is not None and duplicate.id != platform_id:
            raise ValidationError("Platform name already exists")
        platform = self.repository.update_custom_platform(platform_id, cleaned)
        self._invalidate(user_id)
        return platform

    def delete_custom_platform(self, user_id: UUID, platform_id: UUID) -> None:
        """Delete a custom platform that no rent entry uses."""
        if self.repository.get_custom_platform(user_id, platform_id) is None:
            raise NotFoundError("Platform not found")
        if self.repository.count_rent_entries(user_id, platform_id) > 0:
            raise ValidationError("Cannot delete platform that is used in rent entries")
        self.repository.delete_custom_platform(platform_id)
        self._invalidate(user_id)

    def _invalidate(self, user_id: UUID) -> None:
        self.cache.invalidate(cache_key(CacheResource.PLATFORMS, user_id))
        _logger.info("Invalidated platform cache for %s", user_id)


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Platform name is required")
    return cleaned
