"""Domain models for booking platforms."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Platform:
    """A predefined booking platform for a region."""

    id: str
    name: str
    url: str
    region: str


@dataclass(frozen=True)
class CustomPlatform:
    """A user-defined booking platform."""

    id: UUID
    user_id: UUID
    name: str
    usage_count: int
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True)
class PlatformList:
    """Predefined and custom platforms available to a user."""

    predefined: list[Platform]
    custom: list[CustomPlatform]


PREDEFINED_PLATFORMS: dict[str, list[Platform]] = {
    "russian": [
        Platform(id="avito", name="Avito", url="https://www.avito.ru", region="ru"),
        Platform(id="cian", name="CIAN", url="https://www.cian.ru", region="ru"),
        Platform(
            id="domclick", name="Domclick", url="https://domclick.ru", region="ru"
        ),
        Platform(
            id="yandex-realty",
            name="Yandex.Realty",
            url="https://realty.yandex.ru",
            region="ru",
        ),
    ],
    "us": [
        Platform(id="zillow", name="Zillow", url="https://www.zillow.com", region="us"),
        Platform(id="trulia", name="Trulia", url="https://www.trulia.com", region="us"),
        Platform(
            id="realtor", name="Realtor.com", url="https://www.realtor.com", region="us"
        ),
    ],
    "eu": [
        Platform(
            id="immobilienscout24",
            name="ImmobilienScout24",
            url="https://www.immobilienscout24.de",
            region="eu",
        ),
        Platform(
            id="rightmove",
            name="Rightmove",
            url="https://www.rightmove.co.uk",
            region="eu",
        ),
    ],
}
