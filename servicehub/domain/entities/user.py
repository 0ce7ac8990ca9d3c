from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UserProfile:
    uuid: str
    name: str
    surname: str
    cell_phone: str
    email: str
    username: str | None = None
    status_type: str | None = None  # "ENABLED", "DISABLED", "VERIFY_EMAIL", "RESET"
    user_type: str | None = None  # "USER", "ADMIN"

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "UserProfile":
        return UserProfile(
            uuid=str(payload["uuid"]),
            name=(payload.get("name") or "").strip(),
            surname=(payload.get("surname") or "").strip(),
            cell_phone=(payload.get("cellPhone") or "").strip(),
            email=(payload.get("email") or "").strip(),
            username=payload.get("username"),
            status_type=payload.get("statusType"),
            user_type=payload.get("userType"),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "uuid": self.uuid,
            "username": self.username,
            "name": self.name,
            "surname": self.surname,
            "cellPhone": self.cell_phone,
            "email": self.email,
            "statusType": self.status_type,
            "userType": self.user_type,
        }
