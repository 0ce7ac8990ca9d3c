from __future__ import annotations

import json
import logging

from servicehub.application.ports.key_value_store import KeyValueStorePort
from servicehub.application.utils.observable import Observable
from servicehub.core.config import settings
from servicehub.domain.entities.session_state import SessionState
from servicehub.domain.entities.user import UserProfile


class SessionStore(Observable[SessionState]):
    """
    Current auth token and user profile, persisted under two independent keys.

    `set_token` and `set_user` ignore empty input so a response that omits a
    field never erases a value learned earlier. Nothing here touches the network.
    """

    def __init__(self, storage: KeyValueStorePort, namespace: str | None = None) -> None:
        super().__init__(SessionState())
        self._storage = storage
        prefix = namespace or settings.SESSION_NAMESPACE
        self._token_key = f"{prefix}.token"
        self._user_key = f"{prefix}.user"
        self._logger = logging.getLogger(__name__)

    @property
    def token(self) -> str | None:
        return self.state.token

    @property
    def user(self) -> UserProfile | None:
        return self.state.user

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    def get_token(self) -> str | None:
        return self.state.token

    def load(self) -> SessionState:
        token = self._storage.get(self._token_key) or None
        user = None
        raw_user = self._storage.get(self._user_key)
        if raw_user:
            try:
                user = UserProfile.from_payload(json.loads(raw_user))
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                self._logger.warning("Discarding unreadable stored user", extra={"error": str(e)})
        self._publish(token=token, user=user)
        return self.state

    def set_token(self, token: str | None) -> None:
        if not token or not token.strip():
            return
        self._storage.set(self._token_key, token)
        self._publish(token=token)

    def set_user(self, user: UserProfile | None) -> None:
        if user is None:
            return
        self._storage.set(self._user_key, json.dumps(user.to_payload()))
        self._publish(user=user)

    def update(self, token: str | None, user: UserProfile | None) -> None:
        self.set_token(token)
        self.set_user(user)

    def clear(self) -> None:
        self._storage.remove(self._token_key)
        self._storage.remove(self._user_key)
        self._publish(token=None, user=None)
