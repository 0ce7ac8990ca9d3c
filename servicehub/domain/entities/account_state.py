from __future__ import annotations

from dataclasses import dataclass

from servicehub.domain.entities.booking import Booking
from servicehub.domain.entities.contribution import ContributionStats


@dataclass(frozen=True)
class AuthState:
    is_loading: bool = False
    error_message: str | None = None
    success_message: str | None = None
    needs_login: bool = False


@dataclass(frozen=True)
class StatsState:
    stats: ContributionStats | None = None
    is_loading: bool = False
    error_message: str | None = None
    needs_login: bool = False


@dataclass(frozen=True)
class ProfileBookingsState:
    bookings: tuple[Booking, ...] = ()
    is_loading: bool = False
    error_message: str | None = None
    needs_login: bool = False
