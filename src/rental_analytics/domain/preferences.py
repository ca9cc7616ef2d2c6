"""Domain models for user preferences."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

DATE_FORMATS = {"MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD"}
DEFAULT_VIEWS = {"dashboard", "properties", "reports", "settings"}
THEMES = {"light", "dark", "system"}

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "RUB": "₽",
    "GBP": "£",
}

DEFAULT_PREFERENCES: dict[str, object] = {
    "currency_format": "USD",
    "date_format": "MM/DD/YYYY",
    "language": "en",
    "default_view": "dashboard",
}


@dataclass(frozen=True)
class UserPreferences:
    """Display and navigation preferences for a user."""

    user_id: UUID
    currency_format: str = "USD"
    date_format: str = "MM/DD/YYYY"
    language: str = "en"
    default_view: str = "dashboard"
    theme_preference: str | None = None
    preferences: dict[str, object] = field(default_factory=dict)
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DisplayFormat:
    """Formatting derived from preferences."""

    currency_code: str
    currency_symbol: str
    date_format: str
