from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta

QUARTER_HOUR = 15


def snap_to_quarter_hour(value: datetime) -> datetime:
    """Round minutes to the nearest multiple of 15; 60 rolls into the next hour."""
    minute = int(math.floor(value.minute / QUARTER_HOUR + 0.5)) * QUARTER_HOUR
    base = value.replace(minute=0, second=0, microsecond=0)
    return base + timedelta(minutes=minute)


def combine_date_and_time(selected_date: date, selected_time: datetime) -> datetime:
    """Apply the snapped hour/minute of `selected_time` to `selected_date`."""
    snapped = snap_to_quarter_hour(selected_time)
    if isinstance(selected_date, datetime):
        selected_date = selected_date.date()
    return datetime.combine(selected_date, time(hour=snapped.hour, minute=snapped.minute))


def to_local_timestamp(value: datetime) -> str:
    """Timezone-naive local timestamp string used on the wire."""
    return value.replace(tzinfo=None, microsecond=0).strftime("%Y-%m-%dT%H:%M:%S")
