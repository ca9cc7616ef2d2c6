"""User preferences with cached reads and invalidation on change."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from rental_analytics.domain.cache import cache_key
from rental_analytics.domain.errors import ValidationError
from rental_analytics.domain.preferences import (
    CURRENCY_SYMBOLS,
    DATE_FORMATS,
    DEFAULT_VIEWS,
    THEMES,
    DisplayFormat,
    UserPreferences,
)
from rental_analytics.services.cache import TTLCache
from rental_analytics.services.cache_coordinator import (
    CacheResource,
    CacheService,
    CacheTag,
)

_UPDATABLE_FIELDS = {
    "currency_format",
    "date_format",
    "language",
    "default_view",
    "theme_preference",
    "preferences",
}


class UserPreferencesRepository(Protocol):
    """Persistence interface for user preferences."""

    def get_preferences(self, user_id: UUID) -> UserPreferences | None:
        """Return stored preferences, if any."""

    def create_default_preferences(self, user_id: UUID) -> UserPreferences:
        """Create and return default preferences."""

    def upsert_preferences(
        self, user_id: UUID, payload: dict[str, object]
    ) -> UserPreferences:
        """Create or update preferences and return the stored row."""


@dataclass
class UserPreferencesService:
    """Service for reading and updating user preferences."""

    repository: UserPreferencesRepository
    cache: TTLCache
    cache_service: CacheService
    ttl_seconds: float | None = None

    def get_preferences(self, user_id: UUID) -> UserPreferences:
        """Return preferences, creating defaults on first access."""
        key = cache_key(CacheResource.USER_PREFERENCES, user_id)
        cached = self.cache.get(key)
        if isinstance(cached, UserPreferences):
            return cached

        preferences = self.repository.get_preferences(user_id)
        if preferences is None:
            preferences = self.repository.create_default_preferences(user_id)
        self.cache.set(
            key,
            preferences,
            ttl_seconds=self.ttl_seconds,
            tags=(CacheTag.USER_PREFERENCES,),
        )
        return preferences

    def get_display_format(self, user_id: UUID) -> DisplayFormat:
        """Return currency and date formatting for a user."""
        key = cache_key(CacheResource.DISPLAY_FORMAT, user_id)
        cached = self.cache.get(key)
        if isinstance(cached, DisplayFormat):
            return cached

        preferences = self.get_preferences(user_id)
        display = DisplayFormat(
            currency_code=preferences.currency_format,
            currency_symbol=CURRENCY_SYMBOLS.get(
                preferences.currency_format, preferences.currency_format
            ),
            date_format=preferences.date_format,
        )
        self.cache.set(
            key,
            display,
            ttl_seconds=self.ttl_seconds,
            tags=(CacheTag.USER_PREFERENCES,),
        )
        return display

    def update_preferences(
        self, user_id: UUID, payload: dict[str, object]
    ) -> UserPreferences:
        """Validate and persist preference changes, then drop cached copies."""
        _validate_update(payload)
        updated = self.repository.upsert_preferences(user_id, payload)
        self.cache_service.invalidate_after_preference_change(user_id)
        return updated


def _validate_update(payload: dict[str, object]) -> None:
    unknown = set(payload) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown preference fields: {', '.join(sorted(unknown))}")
    date_format = payload.get("date_format")
    if date_format is not None and date_format not in DATE_FORMATS:
        raise ValidationError(f"Unsupported date format: {date_format}")
    default_view = payload.get("default_view")
    if default_view is not None and default_view not in DEFAULT_VIEWS:
        raise ValidationError(f"Unsupported default view: {default_view}")
    theme = payload.get("theme_preference")
    if theme is not None and theme not in THEMES:
        raise ValidationError(f"Unsupported theme: {theme}")
    currency = payload.get("currency_format")
    if currency is not None and currency not in CURRENCY_SYMBOLS:
        raise ValidationError(f"Unsupported currency: {currency}")
