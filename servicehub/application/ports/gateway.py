from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

from servicehub.domain.entities.booking import Booking, BookingRequest
from servicehub.domain.entities.business_hour import BusinessHour
from servicehub.domain.entities.catalog import CatalogItem
from servicehub.domain.entities.company import CompanyDetail, CompanyPage
from servicehub.domain.entities.contribution import ContributionStats
from servicehub.domain.entities.place import Place
from servicehub.domain.entities.search_filters import SearchFilters
from servicehub.domain.entities.service_area import ServiceArea
from servicehub.domain.entities.user import UserProfile

T = TypeVar("T")


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    payload: T
    token: str | None = None  # refreshed token; callers feed it back into the session
    title: str | None = None
    description: str | None = None


class RemoteGatewayPort(ABC):
    """
    Backend calls. Every method either returns a GatewayResult or raises one of
    TransportError, ApplicationError or UnauthorizedError. Implementations hold
    no session state.
    """

    @abstractmethod
    async def search_companies(
        self, filters: SearchFilters, page: int = 0, size: int = 20
    ) -> GatewayResult[CompanyPage]:
        raise NotImplementedError

    @abstractmethod
    async def find_places(self, query: str) -> GatewayResult[list[Place]]:
        raise NotImplementedError

    @abstractmethod
    async def list_catalogs(self, search_string: str = "") -> GatewayResult[list[CatalogItem]]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_company_detail(self, company_id: str) -> GatewayResult[CompanyDetail | None]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_business_hours(self, company_id: str) -> GatewayResult[list[BusinessHour]]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_service_areas(self, company_id: str) -> GatewayResult[list[ServiceArea]]:
        raise NotImplementedError

    @abstractmethod
    async def login(self, email: str, password: str) -> GatewayResult[UserProfile | None]:
        raise NotImplementedError

    @abstractmethod
    async def create_account(
        self, name: str, surname: str, email: str, cell_phone: str
    ) -> GatewayResult[str | None]:
        """Returns the server description on success."""
        raise NotImplementedError

    @abstractmethod
    async def update_user(self, user: UserProfile) -> GatewayResult[UserProfile | None]:
        raise NotImplementedError

    @abstractmethod
    async def save_booking(self, request: BookingRequest) -> GatewayResult[Booking | None]:
        """Creates when request.booking_id is None, otherwise updates."""
        raise NotImplementedError

    @abstractmethod
    async def list_user_bookings(self, user_id: str, month: int, year: int) -> GatewayResult[list[Booking]]:
        raise NotImplementedError

    @abstractmethod
    async def list_company_bookings(self, company_id: str) -> GatewayResult[list[Booking]]:
        raise NotImplementedError

    @abstractmethod
    async def list_user_company_bookings(self, user_id: str, company_id: str) -> GatewayResult[list[Booking]]:
        raise NotImplementedError

    @abstractmethod
    async def delete_booking(self, booking_id: str) -> GatewayResult[str | None]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_contribution_stats(self, user_id: str) -> GatewayResult[ContributionStats | None]:
        raise NotImplementedError
