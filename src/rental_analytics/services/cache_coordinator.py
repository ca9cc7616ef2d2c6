"""Cache invalidation rules tied to domain write operations."""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from rental_analytics.domain.cache import key_owner, key_resource
from rental_analytics.domain.errors import ValidationError
from rental_analytics.services.cache import TTLCache

_logger = logging.getLogger(__name__)

OPERATION_ACTIONS = ("create", "update", "delete")


class CacheResource:
    """Resource segments used as the first part of cache keys."""

    DASHBOARD = "dashboard"
    PROPERTIES = "properties"
    PROPERTY = "property"
    PROPERTY_STATS = "property-stats"
    TAGS = "tags"
    TAG = "tag"
    RENT_ENTRIES = "rent-entries"
    RENT_ENTRY = "rent-entry"
    RENT_SUMMARY = "rent-summary"
    EXPENSE_ENTRIES = "expense-entries"
    EXPENSE_ENTRY = "expense-entry"
    EXPENSE_SUMMARY = "expense-summary"
    USER_PREFERENCES = "user-preferences"
    DISPLAY_FORMAT = "display-format"
    PLATFORMS = "platforms"


class CacheTag:
    """Logical tags attached to entries at ``set`` time."""

    DASHBOARD = "dashboard"
    PROPERTIES = "properties"
    TAGS = "tags"
    RENT_ENTRIES = "rent-entries"
    EXPENSE_ENTRIES = "expense-entries"
    USER_PREFERENCES = "user-preferences"
    PLATFORMS = "platforms"


@dataclass(frozen=True)
class InvalidationRule:
    """Resources and tags cleared after one kind of write."""

    resources: frozenset[str]
    tags: tuple[str, ...]


INVALIDATION_RULES: dict[str, InvalidationRule] = {
    "property": InvalidationRule(
        resources=frozenset(
            {
                CacheResource.PROPERTIES,
                CacheResource.PROPERTY,
                CacheResource.PROPERTY_STATS,
                CacheResource.DASHBOARD,
            }
        ),
        tags=(CacheTag.PROPERTIES, CacheTag.DASHBOARD),
    ),
    # Deleting a tag cascades to the entry associations, and entry lists
    # embed tag names.
    "tag": InvalidationRule(
        resources=frozenset(
            {
                CacheResource.TAGS,
                CacheResource.TAG,
                CacheResource.RENT_ENTRIES,
                CacheResource.RENT_ENTRY,
                CacheResource.EXPENSE_ENTRIES,
                CacheResource.EXPENSE_ENTRY,
                CacheResource.DASHBOARD,
            }
        ),
        tags=(
            CacheTag.TAGS,
            CacheTag.RENT_ENTRIES,
            CacheTag.EXPENSE_ENTRIES,
            CacheTag.DASHBOARD,
        ),
    ),
    "rent-entry": InvalidationRule(
        resources=frozenset(
            {
                CacheResource.RENT_ENTRIES,
                CacheResource.RENT_ENTRY,
                CacheResource.RENT_SUMMARY,
                CacheResource.DASHBOARD,
            }
        ),
        tags=(CacheTag.RENT_ENTRIES, CacheTag.DASHBOARD),
    ),
    "expense-entry": InvalidationRule(
        resources=frozenset(
            {
                CacheResource.EXPENSE_ENTRIES,
                CacheResource.EXPENSE_ENTRY,
                CacheResource.EXPENSE_SUMMARY,
                CacheResource.DASHBOARD,
            }
        ),
        tags=(CacheTag.EXPENSE_ENTRIES, CacheTag.DASHBOARD),
    ),
    "user-preferences": InvalidationRule(
        resources=frozenset(
            {CacheResource.USER_PREFERENCES, CacheResource.DISPLAY_FORMAT}
        ),
        tags=(CacheTag.USER_PREFERENCES,),
    ),
}


@dataclass
class CacheService:
    """Translates write events into cache invalidations."""

    cache: TTLCache

    def invalidate_after_property_operation(
        self, action: str, user_id: object | None = None
    ) -> int:
        """Invalidate property lists, details and stats."""
        return self._apply("property", action, user_id)

    def invalidate_after_tag_operation(
        self, action: str, user_id: object | None = None
    ) -> int:
        """Invalidate tag lists and the entry lists that embed tag names."""
        return self._apply("tag", action, user_id)

    def invalidate_after_rent_entry_operation(
        self, action: str, user_id: object | None = None
    ) -> int:
        """Invalidate rent entry lists and summaries."""
        return self._apply("rent-entry", action, user_id)

    def invalidate_after_expense_entry_operation(
        self, action: str, user_id: object | None = None
    ) -> int:
        """Invalidate expense entry lists and summaries."""
        return self._apply("expense-entry", action, user_id)

    def invalidate_after_preference_change(
        self, user_id: object | None = None, action: str = "update"
    ) -> int:
        """Invalidate cached preferences and derived display formats."""
        return self._apply("user-preferences", action, user_id)

    def invalidate_after_operation(
        self, operation_type: str | None, action: str, user_id: object | None = None
    ) -> int:
        """Dispatch an operation type to its invalidation method."""
        handlers: dict[str, Callable[[], int]] = {
            "property": lambda: self.invalidate_after_property_operation(
                action, user_id
            ),
            "tag": lambda: self.invalidate_after_tag_operation(action, user_id),
            "rent-entry": lambda: self.invalidate_after_rent_entry_operation(
                action, user_id
            ),
            "expense-entry": lambda: self.invalidate_after_expense_entry_operation(
                action, user_id
            ),
            "user-preferences": lambda: self.invalidate_after_preference_change(
                user_id, action
            ),
        }
        if not operation_type:
            raise ValidationError("Operation type is required")
        handler = handlers.get(operation_type)
        if handler is None:
            raise ValidationError(f"Unknown operation type: {operation_type}")
        return handler()

    def invalidate_client_cache(self, pattern: "re.Pattern[str] | str") -> int:
        """Invalidate every key matching a regular expression."""
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as exc:
                raise ValidationError(f"Invalid pattern: {exc}") from exc
        removed = self.cache.invalidate_pattern(pattern)
        _logger.info(
            "Invalidated cache pattern %s (%s entries)", pattern.pattern, removed
        )
        return removed

    def invalidate_server_cache(self, tags: Iterable[str]) -> int:
        """Invalidate every entry carrying one of the given tags."""
        tag_list = list(tags)
        removed = self.cache.invalidate_tags(tag_list)
        _logger.info(
            "Invalidated cache tags %s (%s entries)", ", ".join(tag_list), removed
        )
        return removed

    def invalidate_user(self, user_id: object) -> int:
        """Invalidate every key belonging to one user."""
        removed = self.cache.invalidate_user(user_id)
        _logger.info("Invalidated caches for user %s (%s entries)", user_id, removed)
        return removed

    def clear_all(self) -> None:
        """Drop every cached entry."""
        self.cache.clear()
        _logger.info("Cleared all caches")

    def get_cache_metrics(self) -> dict[str, object]:
        """Return a JSON-ready metrics snapshot."""
        return self.cache.metrics().as_dict()

    def log_cache_metrics(self) -> None:
        """Log the current metrics snapshot."""
        metrics = self.cache.metrics()
        _logger.info(
            "Cache metrics: entries=%s hits=%s misses=%s hit_rate=%.1f%%",
            metrics.total_entries,
            metrics.hits,
            metrics.misses,
            metrics.hit_rate * 100,
        )

    def _apply(self, operation_type: str, action: str, user_id: object | None) -> int:
        if action not in OPERATION_ACTIONS:
            raise ValidationError(f"Unknown operation action: {action}")
        rule = INVALIDATION_RULES[operation_type]
        owner = None if user_id is None else str(user_id)

        def belongs(key: str) -> bool:
            return owner is None or key_owner(key) == owner

        removed = self.cache.invalidate_where(
            lambda key: key_resource(key) in rule.resources and belongs(key)
        )
        removed += self.cache.invalidate_tags(rule.tags, predicate=belongs)
        _logger.info(
            "Invalidated caches after %s %s (%s entries)",
            operation_type,
            action,
            removed,
        )
        return removed
