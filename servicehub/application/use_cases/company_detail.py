from __future__ import annotations

import asyncio
import logging
from typing import Any

from servicehub.application.exceptions import GatewayError
from servicehub.application.ports.gateway import RemoteGatewayPort
from servicehub.application.use_cases.base import SessionBoundOrchestrator
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.application.utils.task_slots import TaskSlots
from servicehub.domain.entities.business_hour import order_business_hours
from servicehub.domain.entities.company import CompanyResult
from servicehub.domain.entities.detail_state import DetailState

DETAIL = "detail"


class DetailOrchestrator(SessionBoundOrchestrator[DetailState]):
    """
    Loads the detail bundle (detail, business hours, service areas) for the
    selected company.

    The three legs run concurrently and each commits its own result, so a
    failure in one leaves the others intact. Before committing, a leg checks
    that both the generation it started with and the selected id are still
    current; otherwise its result is dropped without touching state.
    """

    def __init__(self, gateway: RemoteGatewayPort, session: SessionStore, expiry: SessionExpiryPolicy) -> None:
        super().__init__(DetailState(), session, expiry)
        self._gateway = gateway
        self._slots = TaskSlots()
        self._generation = 0
        self._logger = logging.getLogger(__name__)

    def select(self, company: CompanyResult) -> asyncio.Task[Any]:
        self._generation += 1
        generation = self._generation
        self._publish(
            selected=company,
            detail=None,
            hours=(),
            areas=(),
            is_loading=True,
            error_message=None,
        )
        return self._slots.start(DETAIL, self._load(company.uuid, generation))

    def deselect(self) -> None:
        self._generation += 1
        self._slots.cancel(DETAIL)
        self._publish(
            selected=None,
            detail=None,
            hours=(),
            areas=(),
            is_loading=False,
            error_message=None,
        )

    def refresh(self) -> asyncio.Task[Any] | None:
        selected = self.state.selected
        if selected is None:
            return None
        return self.select(selected)

    def close(self) -> None:
        self._generation += 1
        self._slots.cancel_all()

    def _is_current(self, company_id: str, generation: int) -> bool:
        return generation == self._generation and self.state.selected_id == company_id

    async def _load(self, company_id: str, generation: int) -> None:
        await asyncio.gather(
            self._load_detail(company_id, generation),
            self._load_hours(company_id, generation),
            self._load_areas(company_id, generation),
        )
        if self._is_current(company_id, generation):
            self._publish(is_loading=False)

    async def _load_detail(self, company_id: str, generation: int) -> None:
        try:
            result = await self._gateway.fetch_company_detail(company_id)
        except GatewayError as e:
            self._leg_failed(e, company_id, generation, "detail", fallback="Unable to load company details.")
            return
        if not self._is_current(company_id, generation):
            self._logger.debug("Discarding stale company detail", extra={"company_id": company_id})
            return
        self._absorb_token(result.token)
        self._publish(detail=result.payload)

    async def _load_hours(self, company_id: str, generation: int) -> None:
        try:
            result = await self._gateway.fetch_business_hours(company_id)
        except GatewayError as e:
            self._leg_failed(e, company_id, generation, "hours")
            return
        if not self._is_current(company_id, generation):
            self._logger.debug("Discarding stale business hours", extra={"company_id": company_id})
            return
        self._absorb_token(result.token)
        self._publish(hours=order_business_hours(result.payload))

    async def _load_areas(self, company_id: str, generation: int) -> None:
        try:
            result = await self._gateway.fetch_service_areas(company_id)
        except GatewayError as e:
            self._leg_failed(e, company_id, generation, "areas")
            return
        if not self._is_current(company_id, generation):
            self._logger.debug("Discarding stale service areas", extra={"company_id": company_id})
            return
        self._absorb_token(result.token)
        self._publish(areas=tuple(result.payload))

    def _leg_failed(
        self,
        error: GatewayError,
        company_id: str,
        generation: int,
        leg: str,
        fallback: str | None = None,
    ) -> None:
        if not self._is_current(company_id, generation):
            return
        if self._expiry.applies_to(error):
            # Remaining legs of this generation must not repopulate the cleared bundle.
            self._generation += 1
            self._handle_failure(error, "")
            return
        self._logger.warning(
            "Company %s request failed",
            leg,
            extra={"company_id": company_id, "error": error.message or type(error).__name__},
        )
        if fallback is not None:
            self._handle_failure(error, fallback)
        else:
            self._absorb_token(error.token)

    def _cached_state_reset(self) -> dict[str, Any]:
        return {"detail": None, "hours": (), "areas": ()}
