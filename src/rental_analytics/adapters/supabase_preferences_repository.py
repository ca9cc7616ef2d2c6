"""Supabase repository for user preferences."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from rental_analytics.domain.preferences import DEFAULT_PREFERENCES, UserPreferences
from rental_analytics.services.preferences import UserPreferencesRepository


@dataclass
class SupabaseUserPreferencesRepository(UserPreferencesRepository):
    """Supabase implementation for user preferences."""

    client: Client

    def get_preferences(self, user_id: UUID) -> UserPreferences | None:
        """Return stored preferences for a user."""
        response = (
            self.client.table("user_preferences")
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_preferences(response.data[0])

    def create_default_preferences(self, user_id: UUID) -> UserPreferences:
        """Insert the default preferences row."""
        response = (
            self.client.table("user_preferences")
            .insert({"user_id": str(user_id), **DEFAULT_PREFERENCES})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user preferences")
        return _parse_preferences(response.data[0])

    def upsert_preferences(
        self, user_id: UUID, payload: dict[str, object]
    ) -> UserPreferences:
        """Create or update the preferences row."""
        response = (
            self.client.table("user_preferences")
            .upsert(
                {
                    "user_id": str(user_id),
                    **payload,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update user preferences")
        return _parse_preferences(response.data[0])


def _parse_preferences(row: dict[str, object]) -> UserPreferences:
    updated_raw = row.get("updated_at")
    return UserPreferences(
        user_id=UUID(str(row["user_id"])),
        currency_format=str(row.get("currency_format") or "USD"),
        date_format=str(row.get("date_format") or "MM/DD/YYYY"),
        language=str(row.get("language") or "en"),
        default_view=str(row.get("default_view") or "dashboard"),
        theme_preference=row.get("theme_preference"),
        preferences=dict(row.get("preferences") or {}),
        updated_at=(
            datetime.fromisoformat(updated_raw)
            if isinstance(updated_raw, str) and updated_raw
            else None
        ),
    )
