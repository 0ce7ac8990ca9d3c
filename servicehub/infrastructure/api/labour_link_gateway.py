from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import httpx
from pydantic import ValidationError

from servicehub.application.dto.envelopes import (
    BookingEnvelope,
    BookingListEnvelope,
    BusinessHoursEnvelope,
    CatalogEnvelope,
    CompanyAreasEnvelope,
    CompanyDetailEnvelope,
    CompanyListEnvelope,
    ContributionStatsEnvelope,
    EnvelopeDTO,
    PlaceEnvelope,
    ResponseCode,
    StatusEnvelope,
    UserEnvelope,
)
from servicehub.application.exceptions import ApplicationError, TransportError, UnauthorizedError
from servicehub.application.ports.gateway import GatewayResult, RemoteGatewayPort
from servicehub.application.utils.time_slots import to_local_timestamp
from servicehub.core.config import settings
from servicehub.domain.entities.booking import Booking, BookingRequest
from servicehub.domain.entities.business_hour import BusinessHour
from servicehub.domain.entities.catalog import CatalogItem
from servicehub.domain.entities.company import CompanyDetail, CompanyPage
from servicehub.domain.entities.contribution import ContributionStats
from servicehub.domain.entities.place import Place
from servicehub.domain.entities.search_filters import SearchFilters
from servicehub.domain.entities.service_area import ServiceArea
from servicehub.domain.entities.user import UserProfile

E = TypeVar("E", bound=EnvelopeDTO)

INVALID_RESPONSE = "The server response was invalid."


def build_search_body(filters: SearchFilters, page: int, size: int) -> dict[str, Any]:
    """Filter map understood by companies/getAllCompanies; the server does the geo-radius filtering."""
    filter_payload: dict[str, Any] = {
        "search": {"value": filters.free_text, "matchMode": "CONTAINS"},
        "rating": {"value": filters.minimum_rating, "matchMode": "GREATER_THAN_OR_EQUAL_TO"},
        "location": {
            "value": {
                "latitude": filters.center.latitude,
                "longitude": filters.center.longitude,
                "radius": filters.radius_meters,
            },
            "matchMode": "EQUALS",
        },
    }
    if filters.selected_service_tags:
        filter_payload["catalogItems"] = {
            "value": sorted(filters.selected_service_tags),
            "matchMode": "CONTAINS",
        }
    return {
        "filter": filter_payload,
        "sortBy": "name",
        "direction": "ASC",
        "page": page,
        "size": size,
    }


class LabourLinkGateway(RemoteGatewayPort):
    def __init__(
        self,
        token_provider: Callable[[], str | None] = lambda: None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._base_url = (base_url or settings.LABOUR_LINK_BASE_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search_companies(
        self, filters: SearchFilters, page: int = 0, size: int = 20
    ) -> GatewayResult[CompanyPage]:
        return await self._send(
            "POST", "companies/getAllCompanies", CompanyListEnvelope, json=build_search_body(filters, page, size)
        )

    async def find_places(self, query: str) -> GatewayResult[list[Place]]:
        return await self._send("GET", "location/findLocation", PlaceEnvelope, params={"searchString": query})

    async def list_catalogs(self, search_string: str = "") -> GatewayResult[list[CatalogItem]]:
        return await self._send(
            "GET", "catalog/getAllCatalogs", CatalogEnvelope, params={"searchString": search_string}
        )

    async def fetch_company_detail(self, company_id: str) -> GatewayResult[CompanyDetail | None]:
        return await self._send("GET", f"companies/{company_id}", CompanyDetailEnvelope)

    async def fetch_business_hours(self, company_id: str) -> GatewayResult[list[BusinessHour]]:
        return await self._send("GET", f"businessHours/{company_id}", BusinessHoursEnvelope)

    async def fetch_service_areas(self, company_id: str) -> GatewayResult[list[ServiceArea]]:
        return await self._send("GET", f"area/findAllCompanyAreas/{company_id}", CompanyAreasEnvelope)

    async def login(self, email: str, password: str) -> GatewayResult[UserProfile | None]:
        return await self._send(
            "POST",
            "user/login",
            UserEnvelope,
            json={"emailAddress": email, "password": password},
            authorize=False,
        )

    async def create_account(
        self, name: str, surname: str, email: str, cell_phone: str
    ) -> GatewayResult[str | None]:
        return await self._send(
            "POST",
            "user/createAccount",
            StatusEnvelope,
            json={"name": name, "surname": surname, "email": email, "cellPhone": cell_phone},
            authorize=False,
        )

    async def update_user(self, user: UserProfile) -> GatewayResult[UserProfile | None]:
        return await self._send("PUT", "user/updateUser", UserEnvelope, json=user.to_payload())

    async def save_booking(self, request: BookingRequest) -> GatewayResult[Booking | None]:
        path = "booking/createBooking" if request.booking_id is None else "booking/updateBooking"
        payload = {
            "bookingUuid": request.booking_id,
            "userUuid": request.user_id,
            "companyUuid": request.company_id,
            "bookingTime": to_local_timestamp(request.booking_time),
        }
        return await self._send("POST", path, BookingEnvelope, json=payload)

    async def list_user_bookings(self, user_id: str, month: int, year: int) -> GatewayResult[list[Booking]]:
        return await self._send(
            "GET",
            "booking/getUserBookings",
            BookingListEnvelope,
            params={"userUuid": user_id, "month": month, "year": year},
        )

    async def list_company_bookings(self, company_id: str) -> GatewayResult[list[Booking]]:
        return await self._send(
            "GET", "booking/getCompanyBookings", BookingListEnvelope, params={"companyUuid": company_id}
        )

    async def list_user_company_bookings(self, user_id: str, company_id: str) -> GatewayResult[list[Booking]]:
        return await self._send(
            "GET",
            "booking/getUserCompanyBookings",
            BookingListEnvelope,
            params={"userUuid": user_id, "companyUuid": company_id},
        )

    async def delete_booking(self, booking_id: str) -> GatewayResult[str | None]:
        return await self._send("DELETE", f"booking/deleteBooking/{booking_id}", StatusEnvelope)

    async def fetch_contribution_stats(self, user_id: str) -> GatewayResult[ContributionStats | None]:
        return await self._send(
            "GET", "contribution/getContributionStats", ContributionStatsEnvelope, params={"userUuid": user_id}
        )

    def _headers(self, authorize: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if not authorize:
            return headers
        token = (self._token_provider() or "").strip()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        envelope_cls: type[E],
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        authorize: bool = True,
    ) -> GatewayResult[Any]:
        url = f"{self._base_url}/{path}"
        self._logger.debug("Gateway request", extra={"endpoint": f"{method} {path}"})
        try:
            response = await self._client.request(
                method, url, params=params, json=json, headers=self._headers(authorize)
            )
        except httpx.HTTPError as e:
            self._logger.warning("Gateway transport failure", extra={"endpoint": path, "error": str(e)})
            raise TransportError(str(e) or "The network connection failed.") from e

        if response.status_code == 401:
            self._logger.info("Gateway unauthorized", extra={"endpoint": path, "status": 401})
            raise UnauthorizedError()
        if not 200 <= response.status_code < 300:
            self._logger.error("Gateway HTTP error", extra={"endpoint": path, "status": response.status_code})
            raise TransportError(f"The server returned status code {response.status_code}.")

        try:
            envelope = envelope_cls.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            self._logger.error("Gateway response invalid", extra={"endpoint": path, "error": str(e)})
            raise TransportError(INVALID_RESPONSE) from e

        code = envelope.effective_code()
        if code is None:
            self._logger.error("Gateway response without code", extra={"endpoint": path})
            raise TransportError(INVALID_RESPONSE)
        if code == ResponseCode.TOKEN_EXPIRED:
            raise UnauthorizedError(envelope.description, token=envelope.token)
        if code != ResponseCode.SUCCESSFUL:
            self._logger.warning(
                "Gateway application error", extra={"endpoint": path, "status": code.value, "reason": envelope.description}
            )
            raise ApplicationError(code.value, envelope.description, token=envelope.token)

        return GatewayResult(
            payload=envelope.payload(),
            token=envelope.token,
            title=envelope.title,
            description=envelope.description,
        )
