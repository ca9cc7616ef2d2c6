"""Domain errors surfaced at the HTTP boundary."""


class CacheError(Exception):
    """Base error for cache coordination failures."""


class ValidationError(CacheError):
    """Raised for malformed invalidation or write requests."""


class NotFoundError(CacheError):
    """Raised when a requested record does not exist for the user."""


class InternalError(CacheError):
    """Raised when an unexpected failure happens inside the cache layer."""
