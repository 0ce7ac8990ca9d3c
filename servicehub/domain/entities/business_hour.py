from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

WEEKDAY_ORDER = (
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
)


def _truncate_time(value: str | None) -> str | None:
    if not value:
        return None
    return value[:5]


@dataclass(frozen=True)
class BusinessHour:
    day_of_week: str
    available: bool
    start_time: str | None = None
    end_time: str | None = None
    uuid: str | None = None

    @property
    def day_key(self) -> str:
        return self.day_of_week.strip().upper()

    @property
    def sort_order(self) -> int:
        """Monday is 0, Sunday is 6; unrecognized days sort after Sunday."""
        try:
            return WEEKDAY_ORDER.index(self.day_key)
        except ValueError:
            return len(WEEKDAY_ORDER)

    @property
    def display_day_name(self) -> str:
        return self.day_key.capitalize() or self.day_of_week

    @property
    def display_range(self) -> str:
        if not self.available:
            return "Closed"
        return f"{_truncate_time(self.start_time) or '--'} - {_truncate_time(self.end_time) or '--'}"


def order_business_hours(hours: Iterable[BusinessHour]) -> tuple[BusinessHour, ...]:
    """Deduplicate by weekday (first entry wins) and sort Monday..Sunday."""
    seen: set[str] = set()
    unique: list[BusinessHour] = []
    for hour in hours:
        if hour.day_key in seen:
            continue
        seen.add(hour.day_key)
        unique.append(hour)
    return tuple(sorted(unique, key=lambda h: h.sort_order))
