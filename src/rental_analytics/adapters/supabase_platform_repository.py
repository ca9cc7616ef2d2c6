"""Supabase implementation for custom platforms."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from rental_analytics.domain.platforms import CustomPlatform
from rental_analytics.services.platforms import PlatformRepository


@dataclass
class SupabasePlatformRepository(PlatformRepository):
    """Supabase-backed repository for user custom platforms."""

    client: Client

    def list_custom_platforms(self, user_id: UUID) -> list[CustomPlatform]:
        """Return the user's custom platforms ordered by name."""
        response = (
            self.client.table("custom_platforms")
            .select("*")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [_parse_platform(row) for row in response.data or []]

    def get_custom_platform(
        self, user_id: UUID, platform_id: UUID
    ) -> CustomPlatform | None:
        """Return a custom platform owned by the user, if present."""
        response = (
            self.client.table("custom_platforms")
            .select("*")
            .eq("id", str(platform_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_platform(response.data[0])

    def find_by_name(self, user_id: UUID, name: str) -> CustomPlatform | None:
        """Return the user's custom platform with this name, if present."""
        response = (
            self.client.table("custom_platforms")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_platform(response.data[0])

    def create_custom_platform(self, user_id: UUID, name: str) -> CustomPlatform:
        """Create a custom platform and return it."""
        response = (
            self.client.table("custom_platforms")
            .insert({"user_id": str(user_id), "name": name, "usage_count": 0})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create custom platform")
        return _parse_platform(response.data[0])

    def update_custom_platform(self, platform_id: UUID, name: str) -> CustomPlatform:
        """Rename a custom platform and return it."""
        response = (
            self.client.table("custom_platforms")
            .update({"name": name, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", str(platform_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update custom platform")
        return _parse_platform(response.data[0])

    def delete_custom_platform(self, platform_id: UUID) -> None:
        """Delete a custom platform."""
        self.client.table("custom_platforms").delete().eq(
            "id", str(platform_id)
        ).execute()

    def count_rent_entries(self, user_id: UUID, platform_id: UUID) -> int:
        """Return how many rent entries reference the platform."""
        response = (
            self.client.table("rent_entries")
            .select("id", count="exact")
            .eq("user_id", str(user_id))
            .eq("platform", str(platform_id))
            .execute()
        )
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_platform(row: dict[str, object]) -> CustomPlatform:
    """Parse a custom platform row into a domain model."""
    return CustomPlatform(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        usage_count=int(row.get("usage_count") or 0),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )
