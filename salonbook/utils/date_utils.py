"""Date and time helpers for the scheduling engine.

Appointment, schedule and time-block instants are naive datetimes in the
salon's wall-clock time. Audit stamps (created_at, notified_at, expires_at)
are naive UTC. Every function here is pure apart from the ``*now`` helpers.
"""

import calendar
import secrets
import string
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

from salonbook.core.exceptions import BookingValidationError

DateLike = Union[date, datetime]

CONFIRMATION_CODE_ALPHABET = string.ascii_uppercase + string.digits
CONFIRMATION_CODE_LENGTH = 8


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (matches the DB columns)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in ``tz_name`` as a naive datetime."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def do_time_slots_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Half-open overlap test: back-to-back intervals do not overlap."""
    return start1 < end2 and end1 > start2


def add_minutes(value: datetime, minutes: int) -> datetime:
    return value + timedelta(minutes=minutes)


def add_hours(value: datetime, hours: int) -> datetime:
    return value + timedelta(hours=hours)


def add_days(value: DateLike, days: int) -> DateLike:
    return value + timedelta(days=days)


def sub_minutes(value: datetime, minutes: int) -> datetime:
    return add_minutes(value, -minutes)


def sub_hours(value: datetime, hours: int) -> datetime:
    return add_hours(value, -hours)


def difference_in_minutes(later: datetime, earlier: datetime) -> int:
    """Whole minutes from ``earlier`` to ``later``, floored."""
    return int((later - earlier).total_seconds() // 60)


def difference_in_hours(later: datetime, earlier: datetime) -> int:
    """Whole hours from ``earlier`` to ``later``, floored."""
    return int((later - earlier).total_seconds() // 3600)


def start_of_day(value: DateLike) -> datetime:
    return datetime.combine(_as_datetime(value).date(), time.min)


def end_of_day(value: DateLike) -> datetime:
    return datetime.combine(_as_datetime(value).date(), time.max)


def is_same_day(first: DateLike, second: DateLike) -> bool:
    return _as_datetime(first).date() == _as_datetime(second).date()


def format_time(value: datetime) -> str:
    """Format as HH:MM."""
    return value.strftime("%H:%M")


def parse_hh_mm(value: str) -> time:
    """Parse an ``HH:MM`` string into a time of day."""
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (ValueError, AttributeError):
        raise BookingValidationError(f"Invalid time of day '{value}', expected HH:MM")


def parse_time_string(value: str, base_date: Optional[DateLike] = None) -> datetime:
    """Combine an ``HH:MM`` time of day with the calendar date of ``base_date``.

    ``24:00`` is accepted as the end of the day so a schedule can close at
    midnight.
    """
    day = _as_datetime(base_date).date() if base_date is not None else date.today()
    if value == "24:00":
        return datetime.combine(day + timedelta(days=1), time.min)
    return datetime.combine(day, parse_hh_mm(value))


def get_day_of_week(value: DateLike) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return (_as_datetime(value).weekday() + 1) % 7


def generate_time_slots(start: datetime, end: datetime, interval_minutes: int) -> list[datetime]:
    """Slot starts from ``start`` (inclusive) to ``end`` (exclusive), stepped by the interval."""
    if interval_minutes <= 0:
        return []
    slots = []
    current = start
    step = timedelta(minutes=interval_minutes)
    while current < end:
        slots.append(current)
        current += step
    return slots


def is_past(value: datetime, now: Optional[datetime] = None) -> bool:
    return value < (now or datetime.now())


def is_future(value: datetime, now: Optional[datetime] = None) -> bool:
    return value > (now or datetime.now())


def get_week_range(value: DateLike) -> tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59:59.999999 of the week containing ``value``."""
    day = _as_datetime(value).date()
    monday = day - timedelta(days=day.weekday())
    return start_of_day(monday), end_of_day(monday + timedelta(days=6))


def get_month_range(value: DateLike) -> tuple[datetime, datetime]:
    day = _as_datetime(value).date()
    last = calendar.monthrange(day.year, day.month)[1]
    return start_of_day(day.replace(day=1)), end_of_day(day.replace(day=last))


def generate_confirmation_code() -> str:
    """8-character uppercase alphanumeric code handed to clients."""
    return "".join(secrets.choice(CONFIRMATION_CODE_ALPHABET) for _ in range(CONFIRMATION_CODE_LENGTH))


def calculate_duration(start: datetime, end: datetime) -> int:
    """Duration in minutes, rounded."""
    return round((end - start).total_seconds() / 60)


def is_time_in_range(value: datetime, range_start: datetime, range_end: datetime) -> bool:
    """Closed-interval membership."""
    return range_start <= value <= range_end


def round_to_interval(value: datetime, interval_minutes: int) -> datetime:
    """Round to the nearest multiple of ``interval_minutes`` within the day."""
    midnight = start_of_day(value)
    step = interval_minutes * 60
    seconds = (value - midnight).total_seconds()
    return midnight + timedelta(seconds=round(seconds / step) * step)
