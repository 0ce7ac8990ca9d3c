from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable

from servicehub.application.exceptions import GatewayError
from servicehub.application.ports.gateway import GatewayResult, RemoteGatewayPort
from servicehub.application.use_cases.base import SessionBoundOrchestrator
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.application.utils.task_slots import TaskSlots
from servicehub.application.utils.time_slots import combine_date_and_time, snap_to_quarter_hour
from servicehub.domain.entities.booking import Booking, BookingRequest
from servicehub.domain.entities.booking_state import BookingState

BOOKINGS = "bookings"
CHANGE_IN_PROGRESS_MESSAGE = "Please wait for the current booking change to finish."


class BookingOrchestrator(SessionBoundOrchestrator[BookingState]):
    """
    Books the signed-in user against one company.

    After any successful create, update or delete the list is fetched again
    from the server instead of being patched locally.
    """

    def __init__(
        self,
        company_id: str,
        gateway: RemoteGatewayPort,
        session: SessionStore,
        expiry: SessionExpiryPolicy,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        now = snap_to_quarter_hour(clock())
        super().__init__(BookingState(selected_date=now.date(), selected_time=now), session, expiry)
        self._company_id = company_id
        self._gateway = gateway
        self._mutating = False
        self._slots = TaskSlots()
        self._logger = logging.getLogger(__name__)

    @property
    def company_id(self) -> str:
        return self._company_id

    @property
    def combined_datetime(self) -> datetime:
        return combine_date_and_time(self.state.selected_date, self.state.selected_time)

    def set_date(self, value: date) -> None:
        if isinstance(value, datetime):
            value = value.date()
        self._publish(selected_date=value)

    def set_time(self, value: datetime) -> None:
        self._publish(selected_time=snap_to_quarter_hour(value))

    def begin_edit(self, booking: Booking) -> None:
        self._publish(
            editing=booking,
            selected_date=booking.booking_time.date(),
            selected_time=snap_to_quarter_hour(booking.booking_time),
        )

    def clear_selection(self) -> None:
        self._publish(editing=None)

    async def list(self) -> None:
        """Fetch the list again; a list already in flight is cancelled."""
        user = self._session.user
        if user is None:
            self._slots.cancel(BOOKINGS)
            self._publish(bookings=())
            return
        self._publish(is_loading=True, error_message=None)
        await self._slots.run(BOOKINGS, self._run_list(user.uuid))

    def close(self) -> None:
        self._slots.cancel_all()

    async def _run_list(self, user_id: str) -> None:
        try:
            result = await self._gateway.list_user_company_bookings(user_id, self._company_id)
        except GatewayError as e:
            if self._slots.is_current(BOOKINGS):
                self._handle_failure(e, "Unable to load bookings.", bookings=(), is_loading=False)
            return
        if not self._slots.is_current(BOOKINGS):
            return
        self._absorb_token(result.token)
        self._publish(bookings=tuple(result.payload), is_loading=False)

    async def create(self) -> bool:
        return await self._submit(None, "Unable to create booking.")

    async def update(self) -> bool:
        editing = self.state.editing
        if editing is None:
            return False
        return await self._submit(editing.uuid, "Unable to update booking.")

    async def delete(self, booking: Booking) -> bool:
        succeeded = await self._mutate(
            lambda: self._gateway.delete_booking(booking.uuid),
            "Unable to cancel booking.",
        )
        if succeeded and self.state.editing is not None and self.state.editing.uuid == booking.uuid:
            self._publish(editing=None)
        return succeeded

    async def _submit(self, booking_id: str | None, fallback: str) -> bool:
        user = self._session.user
        if user is None:
            return False
        request = BookingRequest(
            booking_id=booking_id,
            user_id=user.uuid,
            company_id=self._company_id,
            booking_time=self.combined_datetime,
        )
        succeeded = await self._mutate(lambda: self._gateway.save_booking(request), fallback)
        if succeeded:
            self._publish(editing=None)
        return succeeded

    async def _mutate(self, send: Callable[[], Awaitable[GatewayResult[Any]]], fallback: str) -> bool:
        if self._mutating:
            self._logger.debug("Booking change already in flight", extra={"company_id": self._company_id})
            self._publish(error_message=CHANGE_IN_PROGRESS_MESSAGE)
            return False
        self._mutating = True
        try:
            self._publish(is_loading=True, error_message=None)
            try:
                result = await send()
            except GatewayError as e:
                self._handle_failure(e, fallback, is_loading=False)
                return False
            self._absorb_token(result.token)
            await self.list()
            if not self._slots.is_running(BOOKINGS):
                self._publish(is_loading=False)
            return True
        finally:
            self._mutating = False

    def _cached_state_reset(self) -> dict[str, Any]:
        return {"bookings": (), "editing": None}
