from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from servicehub.domain.entities.booking import Booking


@dataclass(frozen=True)
class BookingState:
    selected_date: date
    selected_time: datetime  # always on a quarter hour; only hour/minute are used
    bookings: tuple[Booking, ...] = ()
    editing: Booking | None = None
    is_loading: bool = False
    error_message: str | None = None
    needs_login: bool = False
