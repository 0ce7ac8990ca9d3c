from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from servicehub.application.exceptions import GatewayError
from servicehub.application.ports.gateway import RemoteGatewayPort
from servicehub.application.use_cases.base import SessionBoundOrchestrator
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.domain.entities.account_state import ProfileBookingsState


class ProfileBookingsOrchestrator(SessionBoundOrchestrator[ProfileBookingsState]):
    """The signed-in user's bookings for the current calendar month."""

    def __init__(
        self,
        gateway: RemoteGatewayPort,
        session: SessionStore,
        expiry: SessionExpiryPolicy,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(ProfileBookingsState(), session, expiry)
        self._gateway = gateway
        self._clock = clock

    async def load_current_month(self) -> None:
        user = self._session.user
        if user is None:
            self._publish(bookings=())
            return
        now = self._clock()
        self._publish(is_loading=True, error_message=None)
        try:
            result = await self._gateway.list_user_bookings(user.uuid, month=now.month, year=now.year)
        except GatewayError as e:
            self._handle_failure(e, "Unable to load bookings.", bookings=(), is_loading=False)
            return
        self._absorb_token(result.token)
        self._publish(bookings=tuple(result.payload), is_loading=False)

    def _cached_state_reset(self) -> dict[str, Any]:
        return {"bookings": ()}
