from __future__ import annotations

import logging

from servicehub.application.exceptions import GatewayError, UnauthorizedError
from servicehub.application.ports.gateway import RemoteGatewayPort
from servicehub.application.use_cases.base import SessionBoundOrchestrator
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.domain.entities.account_state import AuthState
from servicehub.domain.entities.user import UserProfile

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


class AuthOrchestrator(SessionBoundOrchestrator[AuthState]):
    def __init__(self, gateway: RemoteGatewayPort, session: SessionStore, expiry: SessionExpiryPolicy) -> None:
        super().__init__(AuthState(), session, expiry)
        self._gateway = gateway
        self._logger = logging.getLogger(__name__)

    async def login(self, email: str, password: str) -> bool:
        self._begin()
        try:
            result = await self._gateway.login(email.strip(), password)
        except UnauthorizedError:
            # Rejected credentials, not an expired session.
            self._publish(is_loading=False, error_message=INVALID_CREDENTIALS_MESSAGE)
            return False
        except GatewayError as e:
            self._absorb_token(e.token)
            self._publish(is_loading=False, error_message=e.message or "Unable to log in.")
            return False
        self._session.update(result.token, result.payload)
        self._logger.info("Signed in", extra={"endpoint": "user/login"})
        self._publish(is_loading=False, success_message=result.description, needs_login=False)
        return True

    async def create_account(self, name: str, surname: str, email: str, cell_phone: str) -> bool:
        self._begin()
        try:
            result = await self._gateway.create_account(name, surname, email, cell_phone)
        except GatewayError as e:
            self._publish(is_loading=False, error_message=e.message or "Unable to create account.")
            return False
        self._publish(
            is_loading=False,
            success_message=result.description or "Account created. Check your email to set your password.",
        )
        return True

    async def update_profile(self, user: UserProfile) -> bool:
        self._begin()
        try:
            result = await self._gateway.update_user(user)
        except GatewayError as e:
            self._handle_failure(e, "Unable to update profile.", is_loading=False)
            return False
        self._session.update(result.token, result.payload)
        self._publish(is_loading=False, success_message=result.description or "Profile updated.")
        return True

    def logout(self) -> None:
        self._session.clear()
        self._publish(error_message=None, success_message=None)

    def _begin(self) -> None:
        self._publish(is_loading=True, error_message=None, success_message=None)
