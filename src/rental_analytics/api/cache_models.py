"""Pydantic models for cache invalidation requests."""

from pydantic import BaseModel, ConfigDict, Field


class CacheOperation(BaseModel):
    """A write event that should invalidate caches."""

    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    action: str = "update"
    user_id: str | None = Field(default=None, alias="userId")


class CacheInvalidationRequest(BaseModel):
    """Body of POST /api/cache/invalidate."""

    model_config = ConfigDict(populate_by_name=True)

    pattern: str | None = None
    tags: list[str] | None = None
    operation: CacheOperation | None = None
    clear_all: bool | None = Field(default=None, alias="clearAll")

    def is_empty(self) -> bool:
        """Return True when no recognized field was provided."""
        return (
            not self.pattern
            and self.tags is None
            and self.operation is None
            and not self.clear_all
        )
