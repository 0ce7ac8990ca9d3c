from __future__ import annotations

import logging

from servicehub.application.dto.envelopes import ResponseCode
from servicehub.application.exceptions import ApplicationError, GatewayError, UnauthorizedError
from servicehub.application.use_cases.session import SessionStore

SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."


def is_session_expiring(error: BaseException) -> bool:
    if isinstance(error, UnauthorizedError):
        return True
    return isinstance(error, ApplicationError) and error.code == ResponseCode.TOKEN_EXPIRED.value


class SessionExpiryPolicy:
    """Shared recovery for authorization failures: clear the session, report why."""

    def __init__(self, session: SessionStore) -> None:
        self._session = session
        self._logger = logging.getLogger(__name__)

    def applies_to(self, error: BaseException) -> bool:
        return is_session_expiring(error)

    def recover(self, error: GatewayError) -> str:
        self._logger.info("Session expired, clearing credentials", extra={"reason": type(error).__name__})
        self._session.clear()
        return error.message or SESSION_EXPIRED_MESSAGE
