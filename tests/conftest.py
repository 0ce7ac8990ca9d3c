from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any

import pytest

from servicehub.application.ports.gateway import GatewayResult, RemoteGatewayPort
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.domain.entities.company import CompanyPage, CompanyResult
from servicehub.domain.entities.coordinate import Coordinate
from servicehub.domain.entities.user import UserProfile
from servicehub.infrastructure.store.memory_store import MemoryKeyValueStore

DEFAULT_PAYLOADS: dict[str, Any] = {
    "search_companies": CompanyPage(),
    "find_places": [],
    "list_catalogs": [],
    "fetch_business_hours": [],
    "fetch_service_areas": [],
    "list_user_bookings": [],
    "list_company_bookings": [],
    "list_user_company_bookings": [],
}


class FakeGateway(RemoteGatewayPort):
    """
    Records every call. A response may be a GatewayResult, an exception to
    raise, or a callable taking the call arguments. Deferred methods park each
    call on a future that the test resolves explicitly.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.responses: dict[str, Any] = {}
        self.deferred: set[str] = set()
        self.pending: dict[str, list[asyncio.Future[Any]]] = defaultdict(list)

    def respond(self, name: str, response: Any) -> None:
        self.responses[name] = response

    def defer(self, name: str) -> None:
        self.deferred.add(name)

    def resolve(self, name: str, index: int, response: Any) -> None:
        future = self.pending[name][index]
        if future.done():
            return
        if isinstance(response, BaseException):
            future.set_exception(response)
        else:
            future.set_result(response)

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def args(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    async def _call(self, name: str, *args: Any) -> GatewayResult[Any]:
        self.calls.append((name, args))
        if name in self.deferred:
            future = asyncio.get_running_loop().create_future()
            self.pending[name].append(future)
            response = await future
        else:
            response = self.responses.get(name, GatewayResult(payload=DEFAULT_PAYLOADS.get(name)))
        if callable(response) and not isinstance(response, GatewayResult):
            response = response(*args)
        if isinstance(response, BaseException):
            raise response
        return response

    async def search_companies(self, filters, page=0, size=20):
        return await self._call("search_companies", filters, page, size)

    async def find_places(self, query):
        return await self._call("find_places", query)

    async def list_catalogs(self, search_string=""):
        return await self._call("list_catalogs", search_string)

    async def fetch_company_detail(self, company_id):
        return await self._call("fetch_company_detail", company_id)

    async def fetch_business_hours(self, company_id):
        return await self._call("fetch_business_hours", company_id)

    async def fetch_service_areas(self, company_id):
        return await self._call("fetch_service_areas", company_id)

    async def login(self, email, password):
        return await self._call("login", email, password)

    async def create_account(self, name, surname, email, cell_phone):
        return await self._call("create_account", name, surname, email, cell_phone)

    async def update_user(self, user):
        return await self._call("update_user", user)

    async def save_booking(self, request):
        return await self._call("save_booking", request)

    async def list_user_bookings(self, user_id, month, year):
        return await self._call("list_user_bookings", user_id, month, year)

    async def list_company_bookings(self, company_id):
        return await self._call("list_company_bookings", company_id)

    async def list_user_company_bookings(self, user_id, company_id):
        return await self._call("list_user_company_bookings", user_id, company_id)

    async def delete_booking(self, booking_id):
        return await self._call("delete_booking", booking_id)

    async def fetch_contribution_stats(self, user_id):
        return await self._call("fetch_contribution_stats", user_id)


def make_user(uuid: str = "user-1") -> UserProfile:
    return UserProfile(
        uuid=uuid,
        name="Thandi",
        surname="Mokoena",
        cell_phone="0821234567",
        email="thandi@example.com",
        username="thandi",
        status_type="ENABLED",
        user_type="USER",
    )


def make_company(uuid: str, name: str | None = None, coordinate: Coordinate | None = None) -> CompanyResult:
    return CompanyResult(uuid=uuid, name=name or f"Company {uuid}", coordinate=coordinate)


def page_of(*companies: CompanyResult) -> GatewayResult[CompanyPage]:
    return GatewayResult(
        payload=CompanyPage(companies=tuple(companies), total_elements=len(companies), total_pages=1)
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def storage() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def session(storage: MemoryKeyValueStore) -> SessionStore:
    return SessionStore(storage=storage, namespace="test.session")


@pytest.fixture
def signed_in_session(session: SessionStore) -> SessionStore:
    session.update("token-1", make_user())
    return session


@pytest.fixture
def expiry(session: SessionStore) -> SessionExpiryPolicy:
    return SessionExpiryPolicy(session=session)
