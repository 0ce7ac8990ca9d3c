from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class BookingStatus(str, Enum):
    UNCONFIRMED = "UNCONFIRMED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class Booking:
    uuid: str
    user_id: str
    company_id: str
    booking_time: datetime
    status: BookingStatus
    user_email: str | None = None
    company_name: str | None = None


@dataclass(frozen=True)
class BookingRequest:
    booking_id: str | None  # None creates a new booking
    user_id: str
    company_id: str
    booking_time: datetime
