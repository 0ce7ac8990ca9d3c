from __future__ import annotations

from dataclasses import dataclass

from servicehub.domain.entities.coordinate import Coordinate


def format_distance(distance: float | None) -> str | None:
    if distance is None:
        return None
    if distance > 1000:
        return f"{distance / 1000:.1f} km"
    return f"{distance:.0f} m"


def format_rating(rating: float | None) -> str:
    if not rating or rating <= 0:
        return "Unrated"
    return f"{rating:.1f} ★"


@dataclass(frozen=True)
class CompanyResult:
    uuid: str
    name: str
    phone_number: str | None = None
    email: str | None = None
    address: str | None = None
    website_url: str | None = None
    status_type: str | None = None
    service_names: tuple[str, ...] = ()
    average_rating: float | None = None
    coordinate: Coordinate | None = None
    distance: float | None = None  # meters

    @property
    def formatted_distance(self) -> str | None:
        return format_distance(self.distance)

    @property
    def formatted_rating(self) -> str:
        return format_rating(self.average_rating)


@dataclass(frozen=True)
class CompanyPage:
    companies: tuple[CompanyResult, ...] = ()
    total_elements: int = 0
    total_pages: int = 0
    size: int = 0
    number: int = 0


@dataclass(frozen=True)
class CompanyDetail:
    uuid: str
    name: str
    phone_number: str | None = None
    email: str | None = None
    address: str | None = None
    website_url: str | None = None
    status_type: str | None = None
    service_names: tuple[str, ...] = ()
    description: str | None = None
    average_rating: float | None = None
    distance: float | None = None
    coordinate: Coordinate | None = None

    @property
    def formatted_rating(self) -> str:
        return format_rating(self.average_rating)
