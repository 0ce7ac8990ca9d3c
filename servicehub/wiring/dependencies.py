from functools import lru_cache
import logging

from servicehub.core.config import settings
from servicehub.application.ports.gateway import RemoteGatewayPort
from servicehub.application.ports.key_value_store import KeyValueStorePort
from servicehub.application.use_cases.auth import AuthOrchestrator
from servicehub.application.use_cases.company_booking import BookingOrchestrator
from servicehub.application.use_cases.company_detail import DetailOrchestrator
from servicehub.application.use_cases.company_search import SearchOrchestrator
from servicehub.application.use_cases.contribution_stats import ContributionStatsOrchestrator
from servicehub.application.use_cases.profile_bookings import ProfileBookingsOrchestrator
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.infrastructure.api.labour_link_gateway import LabourLinkGateway
from servicehub.infrastructure.store.json_store import JsonKeyValueStore
from servicehub.infrastructure.store.memory_store import MemoryKeyValueStore


@lru_cache
def get_key_value_store() -> KeyValueStorePort:
    if settings.ENV.lower() in {"dev", "local"}:
        return JsonKeyValueStore(data_dir=settings.SESSION_DATA_DIR)
    return MemoryKeyValueStore()


@lru_cache
def get_session() -> SessionStore:
    session = SessionStore(storage=get_key_value_store())
    state = session.load()
    logging.getLogger(__name__).info("Session restored authenticated=%s", state.is_authenticated)
    return session


@lru_cache
def get_gateway() -> RemoteGatewayPort:
    session = get_session()
    return LabourLinkGateway(token_provider=session.get_token)


@lru_cache
def get_expiry_policy() -> SessionExpiryPolicy:
    return SessionExpiryPolicy(session=get_session())


def get_search_orchestrator() -> SearchOrchestrator:
    return SearchOrchestrator(gateway=get_gateway(), session=get_session(), expiry=get_expiry_policy())


def get_detail_orchestrator() -> DetailOrchestrator:
    return DetailOrchestrator(gateway=get_gateway(), session=get_session(), expiry=get_expiry_policy())


def get_booking_orchestrator(company_id: str) -> BookingOrchestrator:
    return BookingOrchestrator(
        company_id=company_id,
        gateway=get_gateway(),
        session=get_session(),
        expiry=get_expiry_policy(),
    )


def get_auth_orchestrator() -> AuthOrchestrator:
    return AuthOrchestrator(gateway=get_gateway(), session=get_session(), expiry=get_expiry_policy())


def get_contribution_stats_orchestrator() -> ContributionStatsOrchestrator:
    return ContributionStatsOrchestrator(gateway=get_gateway(), session=get_session(), expiry=get_expiry_policy())


def get_profile_bookings_orchestrator() -> ProfileBookingsOrchestrator:
    return ProfileBookingsOrchestrator(gateway=get_gateway(), session=get_session(), expiry=get_expiry_policy())


def get_container() -> dict[str, object]:
    return {
        "session": get_session(),
        "gateway": get_gateway(),
        "search": get_search_orchestrator(),
        "detail": get_detail_orchestrator(),
    }
