"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from rental_analytics.adapters.supabase_platform_repository import (
    SupabasePlatformRepository,
)
from rental_analytics.adapters.supabase_preferences_repository import (
    SupabaseUserPreferencesRepository,
)
from rental_analytics.config import Settings
from rental_analytics.services.cache import TTLCache
from rental_analytics.services.cache_coordinator import CacheService
from rental_analytics.services.platforms import PlatformService
from rental_analytics.services.preferences import UserPreferencesService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache: TTLCache
    cache_service: CacheService
    platform_service: PlatformService
    preferences_service: UserPreferencesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache = TTLCache(
        default_ttl_seconds=resolved_settings.cache_default_ttl_seconds,
        cleanup_interval_seconds=resolved_settings.cache_cleanup_interval_seconds,
    )
    cache_service = CacheService(cache)
    platform_service = PlatformService(
        repository=SupabasePlatformRepository(supabase_client),
        cache=cache,
        region=resolved_settings.platform_region,
    )
    preferences_service = UserPreferencesService(
        repository=SupabaseUserPreferencesRepository(supabase_client),
        cache=cache,
        cache_service=cache_service,
    )

    async def close_resources() -> None:
        cache.clear()

    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        cache_service=cache_service,
        platform_service=platform_service,
        preferences_service=preferences_service,
        close_resources=close_resources,
    )
