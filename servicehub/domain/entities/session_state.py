from __future__ import annotations

from dataclasses import dataclass

from servicehub.domain.entities.user import UserProfile


@dataclass(frozen=True)
class SessionState:
    token: str | None = None
    user: UserProfile | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None and bool(self.user.uuid)
