from __future__ import annotations

from typing import Any, TypeVar

from servicehub.application.exceptions import GatewayError
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.application.utils.observable import Observable

S = TypeVar("S")


class SessionBoundOrchestrator(Observable[S]):
    """
    Shared failure handling for orchestrators whose state carries
    `error_message`, `is_loading` and `needs_login`.
    """

    def __init__(self, initial: S, session: SessionStore, expiry: SessionExpiryPolicy) -> None:
        super().__init__(initial)
        self._session = session
        self._expiry = expiry

    def dismiss_login_prompt(self) -> None:
        self._publish(needs_login=False)

    def _absorb_token(self, token: str | None) -> None:
        self._session.set_token(token)

    def _cached_state_reset(self) -> dict[str, Any]:
        """Field values that drop whatever this orchestrator has cached locally."""
        return {}

    def _handle_failure(self, error: GatewayError, fallback: str, **on_error: Any) -> bool:
        """Publish an error; returns True when it was a session expiry."""
        if self._expiry.applies_to(error):
            message = self._expiry.recover(error)
            self._publish(
                **self._cached_state_reset(),
                is_loading=False,
                error_message=message,
                needs_login=True,
            )
            return True
        self._absorb_token(error.token)
        self._publish(**on_error, error_message=error.message or fallback)
        return False
