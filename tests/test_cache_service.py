"""Tests for cache invalidation rules."""

import logging

import pytest

from rental_analytics.domain.errors import ValidationError
from rental_analytics.services.cache import TTLCache
from rental_analytics.services.cache_coordinator import CacheService


def _seed(cache: TTLCache, user_id: str) -> None:
    cache.set(f"properties:{user_id}", ["flat"], tags=["properties"])
    cache.set(f"property:{user_id}:p1", {"id": "p1"})
    cache.set(f"property-stats:{user_id}:p1", {"income": 10})
    cache.set(f"dashboard:{user_id}", {}, tags=["dashboard"])
    cache.set(f"tags:{user_id}", ["repairs"], tags=["tags"])
    cache.set(f"rent-entries:{user_id}", [], tags=["rent-entries"])
    cache.set(f"rent-summary:{user_id}", {})
    cache.set(f"expense-entries:{user_id}", [], tags=["expense-entries"])
    cache.set(f"expense-summary:{user_id}", {})
    cache.set(f"user-preferences:{user_id}", {}, tags=["user-preferences"])
    cache.set(f"display-format:{user_id}", {})
    cache.set(f"platforms:{user_id}", [], tags=["platforms"])


def test_property_operation_clears_property_keys(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")

    cache_service.invalidate_after_property_operation("create")

    assert set(cache.keys()) == {
        "tags:user1",
        "rent-entries:user1",
        "rent-summary:user1",
        "expense-entries:user1",
        "expense-summary:user1",
        "user-preferences:user1",
        "display-format:user1",
        "platforms:user1",
    }


@pytest.mark.parametrize("action", ["create", "update", "delete"])
def test_action_does_not_change_invalidation_set(
    cache: TTLCache, cache_service: CacheService, action: str
) -> None:
    _seed(cache, "user1")

    removed = cache_service.invalidate_after_property_operation(action)

    assert removed == 4


def test_tag_operation_cascades_to_entry_lists(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")

    cache_service.invalidate_after_tag_operation("delete")

    assert cache.get("tags:user1") is None
    assert cache.get("rent-entries:user1") is None
    assert cache.get("expense-entries:user1") is None
    assert cache.get("dashboard:user1") is None
    assert cache.get("properties:user1") == ["flat"]
    assert cache.get("rent-summary:user1") == {}


def test_rent_entry_operation_clears_summaries(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")

    cache_service.invalidate_after_rent_entry_operation("update")

    assert cache.get("rent-entries:user1") is None
    assert cache.get("rent-summary:user1") is None
    assert cache.get("expense-entries:user1") == []


def test_expense_entry_operation_clears_summaries(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")

    cache_service.invalidate_after_expense_entry_operation("create")

    assert cache.get("expense-entries:user1") is None
    assert cache.get("expense-summary:user1") is None
    assert cache.get("rent-summary:user1") == {}


def test_preference_change_clears_display_format(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")

    cache_service.invalidate_after_preference_change()

    assert cache.get("user-preferences:user1") is None
    assert cache.get("display-format:user1") is None
    assert cache.get("dashboard:user1") == {}


def test_user_scoped_operation_keeps_other_users(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")
    _seed(cache, "user2")

    cache_service.invalidate_after_property_operation("update", user_id="user1")

    assert cache.get("properties:user1") is None
    assert cache.get("dashboard:user1") is None
    assert cache.get("properties:user2") == ["flat"]
    assert cache.get("dashboard:user2") == {}


def test_dispatch_rejects_unknown_type(cache_service: CacheService) -> None:
    with pytest.raises(ValidationError, match="Unknown operation type: unknown-type"):
        cache_service.invalidate_after_operation("unknown-type", "create")


def test_dispatch_rejects_unknown_action(cache_service: CacheService) -> None:
    with pytest.raises(ValidationError, match="Unknown operation action: archive"):
        cache_service.invalidate_after_operation("property", "archive")


def test_dispatch_routes_to_rule(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")

    cache_service.invalidate_after_operation("user-preferences", "update")

    assert cache.get("user-preferences:user1") is None


def test_invalidate_client_cache_by_regex(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")

    removed = cache_service.invalidate_client_cache("^propert")

    assert removed == 3
    assert cache.get("properties:user1") is None
    assert cache.get("property:user1:p1") is None
    assert cache.get("property-stats:user1:p1") is None
    assert cache.get("tags:user1") == ["repairs"]


def test_invalidate_client_cache_rejects_bad_regex(
    cache_service: CacheService,
) -> None:
    with pytest.raises(ValidationError, match="Invalid pattern"):
        cache_service.invalidate_client_cache("(")


def test_invalidate_server_cache_by_tags(
    cache: TTLCache, cache_service: CacheService
) -> None:
    _seed(cache, "user1")
    _seed(cache, "user2")

    removed = cache_service.invalidate_server_cache(["platforms", "tags"])

    assert removed == 4
    assert cache.get("platforms:user2") is None
    assert cache.get("properties:user2") == ["flat"]


def test_invalidate_user(cache: TTLCache, cache_service: CacheService) -> None:
    _seed(cache, "user1")
    _seed(cache, "user2")

    cache_service.invalidate_user("user1")

    assert all("user1" not in key for key in cache.keys())
    assert len(cache) == 12


def test_clear_all(cache: TTLCache, cache_service: CacheService) -> None:
    _seed(cache, "user1")

    cache_service.clear_all()

    assert len(cache) == 0


def test_metrics_snapshot(cache: TTLCache, cache_service: CacheService) -> None:
    cache.set("tags:user1", [])
    cache.get("tags:user1")
    cache.get("tags:user2")

    metrics = cache_service.get_cache_metrics()

    assert metrics["totalEntries"] == 1
    assert metrics["hits"] == 1
    assert metrics["misses"] == 1
    assert metrics["hitRate"] == 0.5


def test_log_cache_metrics(
    cache_service: CacheService,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(logging.getLogger("rental_analytics"), "propagate", True)
    with caplog.at_level(logging.INFO, logger="rental_analytics"):
        cache_service.log_cache_metrics()

    assert "Cache metrics" in caplog.text


def test_invalidate_user_ignores_prefix_colliding_ids(
    cache: TTLCache, cache_service: CacheService
) -> None:
    cache.set("platforms:user1", 1)
    cache.set("platforms:user10", 2)
    cache.set("tags:platforms", 3)

    removed = cache_service.invalidate_user("user1")

    assert removed == 1
    assert cache.get("platforms:user10") == 2
    assert cache.get("tags:platforms") == 3


def test_preference_change_validates_action(cache_service: CacheService) -> None:
    with pytest.raises(ValidationError, match="Unknown operation action: archive"):
        cache_service.invalidate_after_operation("user-preferences", "archive")


def test_dispatch_requires_operation_type(cache_service: CacheService) -> None:
    with pytest.raises(ValidationError, match="Operation type is required"):
        cache_service.invalidate_after_operation(None, "create")
