from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from servicehub.domain.entities.booking import Booking, BookingStatus
from servicehub.domain.entities.business_hour import BusinessHour
from servicehub.domain.entities.catalog import CatalogItem
from servicehub.domain.entities.company import CompanyDetail, CompanyPage, CompanyResult
from servicehub.domain.entities.contribution import (
    ContributionAward,
    ContributionBadge,
    ContributionPlacement,
    ContributionStats,
)
from servicehub.domain.entities.coordinate import Coordinate
from servicehub.domain.entities.place import Place
from servicehub.domain.entities.service_area import ServiceArea
from servicehub.domain.entities.user import UserProfile


class ResponseCode(str, Enum):
    SUCCESSFUL = "SUCCESSFUL"
    ERROR = "ERROR"
    NO_RESPONSE = "NO_RESPONSE"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"


class _DTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _coordinate(latitude: float | None, longitude: float | None) -> Coordinate | None:
    if latitude is None or longitude is None:
        return None
    return Coordinate(latitude=latitude, longitude=longitude)


def _empty_if_none(value: Any) -> Any:
    return [] if value is None else value


NullableList = BeforeValidator(_empty_if_none)


class EnvelopeDTO(_DTO):
    """Common response envelope. Read-only list endpoints may omit the code."""

    code_required: ClassVar[bool] = True

    response_code: ResponseCode | None = None
    title: str | None = None
    description: str | None = None
    token: str | None = None

    def effective_code(self) -> ResponseCode | None:
        if self.response_code is None and not self.code_required:
            return ResponseCode.SUCCESSFUL
        return self.response_code

    def payload(self) -> Any:
        return None


class CompanyDTO(_DTO):
    uuid: str
    name: str
    phone_number: str | None = None
    email: str | None = None
    address: str | None = None
    website_url: str | None = None
    status_type: str | None = None
    catalog_items: list[str] | None = None
    average_rating: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    distance: float | None = None

    def to_domain(self) -> CompanyResult:
        return CompanyResult(
            uuid=self.uuid,
            name=self.name,
            phone_number=self.phone_number,
            email=self.email,
            address=self.address,
            website_url=self.website_url,
            status_type=self.status_type,
            service_names=tuple(self.catalog_items or ()),
            average_rating=self.average_rating,
            coordinate=_coordinate(self.latitude, self.longitude),
            distance=self.distance,
        )


class CompanyPageDTO(_DTO):
    content: list[CompanyDTO] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    size: int = 0
    number: int = 0


class CompanyListEnvelope(EnvelopeDTO):
    company_list: CompanyPageDTO | None = None

    def payload(self) -> CompanyPage:
        page = self.company_list or CompanyPageDTO()
        return CompanyPage(
            companies=tuple(c.to_domain() for c in page.content),
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            size=page.size,
            number=page.number,
        )


class PlaceDTO(_DTO):
    lat: float
    lon: float
    place_id: int | None = None
    name: str | None = None
    display_name: str | None = None
    type: str | None = None
    importance: float | None = None
    bounding_box: list[float] | None = None

    def to_domain(self) -> Place:
        return Place(
            coordinate=Coordinate(latitude=self.lat, longitude=self.lon),
            place_id=self.place_id,
            name=self.name,
            display_name=self.display_name,
            type=self.type,
            importance=self.importance,
            bounding_box=tuple(self.bounding_box or ()),
        )


class PlaceEnvelope(EnvelopeDTO):
    code_required: ClassVar[bool] = False

    places: Annotated[list[PlaceDTO], NullableList] = Field(default_factory=list)

    def payload(self) -> list[Place]:
        return [p.to_domain() for p in self.places]


class CatalogItemDTO(_DTO):
    name: str
    uuid: str | None = None
    parent_name: str | None = None


class CatalogEnvelope(EnvelopeDTO):
    code_required: ClassVar[bool] = False

    catalog_list: Annotated[list[CatalogItemDTO], NullableList] = Field(default_factory=list)

    def payload(self) -> list[CatalogItem]:
        return [CatalogItem(name=i.name, uuid=i.uuid, parent_name=i.parent_name) for i in self.catalog_list]


class CompanyDetailDTO(CompanyDTO):
    description: str | None = None

    @field_validator("catalog_items", mode="before")
    @classmethod
    def _catalog_item_names(cls, value: Any) -> list[str] | None:
        # Items arrive either as plain strings or as {"name"|"label": ...} objects.
        if value is None:
            return None
        names: list[str] = []
        for item in value:
            if isinstance(item, str):
                name = item
            elif isinstance(item, dict):
                name = item.get("name") or item.get("label") or ""
            else:
                name = ""
            if name:
                names.append(name)
        return names

    def to_detail(self) -> CompanyDetail:
        return CompanyDetail(
            uuid=self.uuid,
            name=self.name,
            phone_number=self.phone_number,
            email=self.email,
            address=self.address,
            website_url=self.website_url,
            status_type=self.status_type,
            service_names=tuple(self.catalog_items or ()),
            description=self.description,
            average_rating=self.average_rating,
            distance=self.distance,
            coordinate=_coordinate(self.latitude, self.longitude),
        )


class CompanyDetailEnvelope(EnvelopeDTO):
    company: CompanyDetailDTO | None = None

    def payload(self) -> CompanyDetail | None:
        return self.company.to_detail() if self.company else None


class BusinessHourDTO(_DTO):
    day_of_week: str
    available: bool = False
    start_time: str | None = None
    end_time: str | None = None
    uuid: str | None = None


class BusinessHoursEnvelope(EnvelopeDTO):
    code_required: ClassVar[bool] = False

    business_hours: Annotated[list[BusinessHourDTO], NullableList] = Field(default_factory=list)

    def payload(self) -> list[BusinessHour]:
        return [
            BusinessHour(
                day_of_week=h.day_of_week,
                available=h.available,
                start_time=h.start_time,
                end_time=h.end_time,
                uuid=h.uuid,
            )
            for h in self.business_hours
        ]


class ServiceAreaDTO(_DTO):
    uuid: str | None = None
    name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    radius: float | None = None


class CompanyAreasEnvelope(EnvelopeDTO):
    code_required: ClassVar[bool] = False

    company_area_list: Annotated[list[ServiceAreaDTO], NullableList] = Field(default_factory=list)

    def payload(self) -> list[ServiceArea]:
        return [
            ServiceArea(
                uuid=a.uuid,
                name=a.name,
                coordinate=_coordinate(a.latitude, a.longitude),
                radius=a.radius,
            )
            for a in self.company_area_list
        ]


class UserDTO(_DTO):
    uuid: str
    name: str = ""
    surname: str = ""
    cell_phone: str = ""
    email: str = ""
    username: str | None = None
    status_type: str | None = None
    user_type: str | None = None

    def to_domain(self) -> UserProfile:
        return UserProfile.from_payload(self.model_dump(by_alias=True))


class UserEnvelope(EnvelopeDTO):
    user: UserDTO | None = None

    def payload(self) -> UserProfile | None:
        return self.user.to_domain() if self.user else None


class StatusEnvelope(EnvelopeDTO):
    """Responses that carry only a code and a description."""

    def payload(self) -> str | None:
        return self.description


class BookingUserDTO(_DTO):
    uuid: str
    email: str | None = None


class BookingCompanyDTO(_DTO):
    uuid: str
    name: str | None = None


class BookingDTO(_DTO):
    uuid: str
    user: BookingUserDTO
    company: BookingCompanyDTO
    booking_time: datetime
    status: BookingStatus

    def to_domain(self) -> Booking:
        return Booking(
            uuid=self.uuid,
            user_id=self.user.uuid,
            company_id=self.company.uuid,
            booking_time=self.booking_time,
            status=self.status,
            user_email=self.user.email,
            company_name=self.company.name,
        )


class BookingEnvelope(EnvelopeDTO):
    booking: BookingDTO | None = None

    def payload(self) -> Booking | None:
        return self.booking.to_domain() if self.booking else None


class BookingListEnvelope(EnvelopeDTO):
    booking_list: list[BookingDTO] | None = None

    def payload(self) -> list[Booking]:
        return [b.to_domain() for b in self.booking_list or []]


class ContributionPlacementDTO(_DTO):
    category: str
    count: int | None = None
    rank: int | None = None
    total_participants: int | None = None
    percentile: float | None = None


class ContributionBadgeDTO(_DTO):
    category: str
    type: str
    label: str
    rank: int | None = None
    percentile: int | None = None


class ContributionAwardDTO(_DTO):
    category: str
    title: str
    rank: int | None = None


class ContributionStatsDTO(_DTO):
    creator_count: int | None = None
    reviewer_count: int | None = None
    total_contributions: int | None = None
    placements: list[ContributionPlacementDTO] | None = None
    badges: list[ContributionBadgeDTO] | None = None
    awards: list[ContributionAwardDTO] | None = None

    def to_domain(self) -> ContributionStats:
        return ContributionStats(
            creator_count=self.creator_count,
            reviewer_count=self.reviewer_count,
            total_contributions=self.total_contributions,
            placements=tuple(ContributionPlacement(**p.model_dump()) for p in self.placements or []),
            badges=tuple(ContributionBadge(**b.model_dump()) for b in self.badges or []),
            awards=tuple(ContributionAward(**a.model_dump()) for a in self.awards or []),
        )


class ContributionStatsEnvelope(EnvelopeDTO):
    stats: ContributionStatsDTO | None = None

    def payload(self) -> ContributionStats | None:
        return self.stats.to_domain() if self.stats else None
