"""Cache invalidation and metrics endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from rental_analytics.api.cache_models import CacheInvalidationRequest  # noqa: TC001
from rental_analytics.domain.errors import CacheError, InternalError, ValidationError

if TYPE_CHECKING:
    from rental_analytics.containers import AppContainer

router = APIRouter(prefix="/api/cache", tags=["cache"])

_logger = logging.getLogger(__name__)

_EMPTY_REQUEST_ERROR = (
    "Invalid request: must provide pattern, tags, operation, or clearAll"
)


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests carry the admin token when one is configured."""
    if admin_token is None:
        return
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/invalidate", dependencies=[Depends(require_admin)])
async def invalidate(
    body: CacheInvalidationRequest, request: Request
) -> dict[str, str]:
    """Invalidate caches by operation, pattern, tags or everything."""
    container: AppContainer = request.app.state.container
    cache_service = container.cache_service
    if body.is_empty():
        raise ValidationError(_EMPTY_REQUEST_ERROR)

    try:
        if body.clear_all:
            cache_service.clear_all()
            return {"message": "All caches cleared successfully"}

        if body.operation is not None:
            operation = body.operation
            cache_service.invalidate_after_operation(
                operation.type, operation.action, operation.user_id
            )
            return {
                "message": (
                    f"Caches invalidated after {operation.type} {operation.action}"
                )
            }

        if body.pattern:
            cache_service.invalidate_client_cache(body.pattern)
        if body.tags is not None:
            cache_service.invalidate_server_cache(body.tags)
    except CacheError:
        raise
    except Exception as exc:
        _logger.exception("Cache invalidation failed")
        raise InternalError("Internal server error") from exc
    return {"message": "Caches invalidated successfully"}


@router.get("/invalidate", dependencies=[Depends(require_admin)])
async def cache_status(request: Request) -> dict[str, object]:
    """Return cache health and metrics."""
    container: AppContainer = request.app.state.container
    try:
        metrics = container.cache_service.get_cache_metrics()
    except Exception as exc:
        _logger.exception("Failed to read cache metrics")
        raise InternalError("Failed to get cache metrics") from exc
    return {
        "status": "healthy",
        "metrics": metrics,
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }


@router.delete("/invalidate", dependencies=[Depends(require_admin)])
async def clear_caches(request: Request) -> dict[str, str]:
    """Clear all caches."""
    container: AppContainer = request.app.state.container
    try:
        container.cache_service.clear_all()
    except Exception as exc:
        _logger.exception("Failed to clear caches")
        raise InternalError("Failed to clear caches") from exc
    return {"message": "All caches cleared successfully"}
