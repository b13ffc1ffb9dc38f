"""
Slot generator

Produces the bookable start instants of a salon day. Shared by the dashboard booking
form, the landing page and the Instagram bot, so every consumer gets the same
(instant, label) pairs.

No double-booking check happens here; overlap rules live in the assignment engine.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Optional

from ... import config
from ...shared.timezone import (
    format_time_label,
    local_to_utc,
    parse_closed_days,
    parse_date_key,
    today_key,
    utcnow,
)

CLOSED_WEEKDAYS = parse_closed_days(config.CLOSED_DAYS)


@dataclass(frozen=True)
class Slot:
    start: datetime  # naive UTC
    label: str


def generate_slots(
    date_key: str,
    now: Optional[datetime] = None,
    opening_hour: int = config.OPENING_HOUR,
    closing_hour: int = config.CLOSING_HOUR,
    slot_minutes: int = config.SLOT_MINUTES,
    closed_days: Optional[Iterable[int]] = None,
) -> Iterator[Slot]:
    """
    Yield the slots of a salon day in ascending order.

    Args:
        date_key: Salon day as YYYY-MM-DD
        now: Reference instant (naive UTC), defaults to the current time
        opening_hour: First slot hour, salon wall clock
        closing_hour: Exclusive end hour, salon wall clock
        slot_minutes: Granularity between slot starts
        closed_days: Python weekday numbers the salon is closed

    Raises:
        ValidationError: If date_key is malformed
    """
    day = parse_date_key(date_key)
    now = now or utcnow()
    closed = CLOSED_WEEKDAYS if closed_days is None else set(closed_days)

    current_key = today_key(now)
    if date_key < current_key or day.weekday() in closed:
        return

    is_today = date_key == current_key
    for minutes in range(opening_hour * 60, closing_hour * 60, slot_minutes):
        start = local_to_utc(day, minutes)
        if is_today and start <= now:
            continue
        yield Slot(start=start, label=format_time_label(start))
