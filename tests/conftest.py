"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from rental_analytics.config import Settings
from rental_analytics.containers import AppContainer
from rental_analytics.domain.platforms import CustomPlatform
from rental_analytics.domain.preferences import UserPreferences
from rental_analytics.services.cache import TTLCache
from rental_analytics.services.cache_coordinator import CacheService
from rental_analytics.services.platforms import PlatformRepository, PlatformService
from rental_analytics.services.preferences import (
    UserPreferencesRepository,
    UserPreferencesService,
)


@dataclass
class FakeClock:
    """Manually advanced clock for expiration tests."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class InMemoryPlatformRepository(PlatformRepository):
    """In-memory custom platform repository for tests."""

    platforms: dict[UUID, CustomPlatform] = field(default_factory=dict)
    rent_entry_counts: dict[UUID, int] = field(default_factory=dict)
    list_calls: int = 0

    def list_custom_platforms(self, user_id: UUID) -> list[CustomPlatform]:
        self.list_calls += 1
        return sorted(
            (p for p in self.platforms.values() if p.user_id == user_id),
            key=lambda platform: platform.name,
        )

    def get_custom_platform(
        self, user_id: UUID, platform_id: UUID
    ) -> CustomPlatform | None:
        platform = self.platforms.get(platform_id)
        if platform is None or platform.user_id != user_id:
            return None
        return platform

    def find_by_name(self, user_id: UUID, name: str) -> CustomPlatform | None:
        for platform in self.platforms.values():
            if platform.user_id == user_id and platform.name == name:
                return platform
        return None

    def create_custom_platform(self, user_id: UUID, name: str) -> CustomPlatform:
        platform = CustomPlatform(
            id=uuid4(),
            user_id=user_id,
            name=name,
            usage_count=0,
            created_at=datetime.now(tz=UTC),
            updated_at=None,
        )
        self.platforms[platform.id] = platform
        return platform

    def update_custom_platform(self, platform_id: UUID, name: str) -> CustomPlatform:
        updated = replace(
            self.platforms[platform_id], name=name, updated_at=datetime.now(tz=UTC)
        )
        self.platforms[platform_id] = updated
        return updated

    def delete_custom_platform(self, platform_id: UUID) -> None:
        self.platforms.pop(platform_id, None)

    def count_rent_entries(self, user_id: UUID, platform_id: UUID) -> int:
        return self.rent_entry_counts.get(platform_id, 0)


@dataclass
class InMemoryUserPreferencesRepository(UserPreferencesRepository):
    """In-memory preferences repository for tests."""

    rows: dict[UUID, UserPreferences] = field(default_factory=dict)
    get_calls: int = 0

    def get_preferences(self, user_id: UUID) -> UserPreferences | None:
        self.get_calls += 1
        return self.rows.get(user_id)

    def create_default_preferences(self, user_id: UUID) -> UserPreferences:
        preferences = UserPreferences(user_id=user_id)
        self.rows[user_id] = preferences
        return preferences

    def upsert_preferences(
        self, user_id: UUID, payload: dict[str, object]
    ) -> UserPreferences:
        current = self.rows.get(user_id) or UserPreferences(user_id=user_id)
        updated = replace(current, **payload)
        self.rows[user_id] = updated
        return updated


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(default_ttl_seconds=300, clock=clock)


@pytest.fixture
def cache_service(cache: TTLCache) -> CacheService:
    return CacheService(cache)


@pytest.fixture
def container(
    settings: Settings, cache: TTLCache, cache_service: CacheService
) -> AppContainer:
    platform_service = PlatformService(
        repository=InMemoryPlatformRepository(), cache=cache
    )
    preferences_service = UserPreferencesService(
        repository=InMemoryUserPreferencesRepository(),
        cache=cache,
        cache_service=cache_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        cache=cache,
        cache_service=cache_service,
        platform_service=platform_service,
        preferences_service=preferences_service,
        close_resources=close_resources,
    )
