"""
Salon clock utilities

Every "salon day" boundary and wall-clock conversion goes through this module so the
dashboard, the landing page and the Instagram bot all see identical slot semantics,
independent of the server's own timezone.

Instants are stored as naive UTC datetimes; API responses attach the UTC offset.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import SALON_TIMEZONE
from ..exceptions import ValidationError

SALON_TZ = ZoneInfo(SALON_TIMEZONE)

DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WEEKDAY_ABBREVIATIONS = {
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
}


def utcnow() -> datetime:
    """Current instant as naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach the UTC offset to a stored naive UTC instant"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_storage(value: datetime) -> datetime:
    """
    Normalize an incoming datetime to naive UTC.

    Naive values are salon wall-clock time; aware values are converted.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=SALON_TZ)
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_salon(value: datetime) -> datetime:
    """Convert a stored naive UTC instant to an aware salon-local datetime"""
    return as_utc(value).astimezone(SALON_TZ)


def parse_date_key(value: str) -> date:
    """Parse a YYYY-MM-DD salon day key"""
    if not value or not DATE_KEY_PATTERN.match(value):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}': {e}") from e


def to_date_key(instant: datetime) -> str:
    """Salon-local day key of a stored instant"""
    return to_salon(instant).date().isoformat()


def today_key(now: Optional[datetime] = None) -> str:
    return to_date_key(now or utcnow())


def local_to_utc(day: date, minutes_from_midnight: int = 0) -> datetime:
    """
    Convert a salon wall-clock instant to naive UTC.

    The zone offset is resolved for that specific instant, so days that cross a DST
    change get the right offset per slot.
    """
    wall_clock = datetime.combine(day, time(0, 0)) + timedelta(minutes=minutes_from_midnight)
    return wall_clock.replace(tzinfo=SALON_TZ).astimezone(timezone.utc).replace(tzinfo=None)


def start_of_day(day: date) -> datetime:
    return local_to_utc(day, 0)


def end_of_day(day: date) -> datetime:
    """Last instant of the salon day, as naive UTC"""
    return start_of_day(day + timedelta(days=1)) - timedelta(microseconds=1)


def day_range(from_key: Optional[str], to_key: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive [from, to] salon day keys as a naive UTC instant range"""
    start = start_of_day(parse_date_key(from_key)) if from_key else None
    end = end_of_day(parse_date_key(to_key)) if to_key else None
    if start and end and start > end:
        raise ValidationError("'from' must not be after 'to'")
    return start, end


def format_time_label(instant: datetime) -> str:
    """Human label for a slot, e.g. '09:00'"""
    return to_salon(instant).strftime("%H:%M")


def parse_closed_days(value: str) -> set[int]:
    """Parse 'sun,mon' into Python weekday numbers, ignoring unknown entries"""
    days = set()
    for part in (value or "").split(","):
        key = part.strip().lower()[:3]
        if key in WEEKDAY_ABBREVIATIONS:
            days.add(WEEKDAY_ABBREVIATIONS[key])
    return days
