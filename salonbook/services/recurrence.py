"""Recurrence engine.

Rules are the tagged union in ``salonbook.schemas.recurrence``; the RRULE
text form (``FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;UNTIL=20261231``) is what
gets stored on appointments and time blocks.
"""

import calendar
import itertools
import logging
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from pydantic import TypeAdapter, ValidationError

from salonbook.core.config import settings
from salonbook.core.exceptions import RecurrenceValidationError
from salonbook.schemas.recurrence import (
    DailyRecurrence,
    MonthlyRecurrence,
    RecurrenceRule,
    WeeklyRecurrence,
)
from salonbook.utils.date_utils import get_day_of_week

logger = logging.getLogger(__name__)

DAY_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
RRULE_KEYS = {"FREQ", "INTERVAL", "BYDAY", "UNTIL", "COUNT"}
DEFAULT_HORIZON_DAYS = 365

_rule_adapter = TypeAdapter(RecurrenceRule)


def validate_recurrence_rule(rule) -> Optional[str]:
    """Return the reason a rule is invalid, or None when it is usable."""
    if rule.interval < 1:
        return "Interval must be at least 1"
    if isinstance(rule, WeeklyRecurrence) and any(day < 0 or day > 6 for day in rule.days_of_week):
        return "Days of week must be between 0 (Sunday) and 6 (Saturday)"
    if rule.end_date is not None and rule.occurrences is not None:
        return "A rule cannot have both an end date and a number of occurrences"
    if rule.occurrences is not None and rule.occurrences < 1:
        return "Number of occurrences must be at least 1"
    return None


def ensure_valid_rule(rule) -> None:
    error = validate_recurrence_rule(rule)
    if error:
        raise RecurrenceValidationError(error)


def generate_rrule(rule) -> str:
    ensure_valid_rule(rule)
    parts = [f"FREQ={rule.frequency}", f"INTERVAL={rule.interval}"]
    if isinstance(rule, WeeklyRecurrence) and rule.days_of_week:
        parts.append("BYDAY=" + ",".join(DAY_CODES[day] for day in rule.days_of_week))
    if rule.end_date is not None:
        parts.append("UNTIL=" + rule.end_date.strftime("%Y%m%d"))
    elif rule.occurrences is not None:
        parts.append(f"COUNT={rule.occurrences}")
    return ";".join(parts)


def _parse_int(key: str, value: str) -> int:
    if not value.isdigit():
        raise RecurrenceValidationError(f"{key} must be a positive integer, got '{value}'")
    return int(value)


def parse_rrule(text: str):
    """Parse an RRULE string produced by ``generate_rrule`` back into a rule."""
    if not text or not text.strip():
        raise RecurrenceValidationError("Empty recurrence rule")

    values: dict = {}
    for part in text.strip().split(";"):
        key, sep, value = part.partition("=")
        key = key.strip().upper()
        value = value.strip()
        if not sep or not value:
            raise RecurrenceValidationError(f"Malformed recurrence rule part '{part}'")
        if key not in RRULE_KEYS:
            raise RecurrenceValidationError(f"Unsupported recurrence rule key '{key}'")
        if key in values:
            raise RecurrenceValidationError(f"Duplicate recurrence rule key '{key}'")

        if key == "FREQ":
            values["frequency"] = value.upper()
        elif key == "INTERVAL":
            values["interval"] = _parse_int(key, value)
        elif key == "COUNT":
            values["occurrences"] = _parse_int(key, value)
        elif key == "BYDAY":
            codes = [code.strip().upper() for code in value.split(",")]
            unknown = [code for code in codes if code not in DAY_CODES]
            if unknown:
                raise RecurrenceValidationError(f"Unknown day code(s): {', '.join(unknown)}")
            values["days_of_week"] = [DAY_CODES.index(code) for code in codes]
        elif key == "UNTIL":
            try:
                values["end_date"] = datetime.strptime(value[:8], "%Y%m%d").date()
            except ValueError:
                raise RecurrenceValidationError(f"UNTIL must be YYYYMMDD, got '{value}'")

    if "frequency" not in values:
        raise RecurrenceValidationError("Recurrence rule is missing FREQ")
    if values["frequency"] not in ("DAILY", "WEEKLY", "MONTHLY"):
        raise RecurrenceValidationError(f"Unsupported frequency '{values['frequency']}'")
    if "days_of_week" in values and values["frequency"] != "WEEKLY":
        raise RecurrenceValidationError("BYDAY is only supported for WEEKLY rules")

    try:
        rule = _rule_adapter.validate_python(values)
    except ValidationError as exc:
        raise RecurrenceValidationError(f"Invalid recurrence rule: {exc.errors()[0]['msg']}")
    ensure_valid_rule(rule)
    return rule


def _week_index(value: date) -> int:
    """Monday-based week number, comparable across years."""
    return (value - timedelta(days=value.weekday())).toordinal() // 7


def _add_months(value: datetime, months: int) -> Optional[datetime]:
    """Same day-of-month ``months`` later, or None when that month is too short."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    if value.day > calendar.monthrange(year, month)[1]:
        return None
    return value.replace(year=year, month=month)


def _candidates(start: datetime, rule) -> Iterator[datetime]:
    """Occurrences after the anchor, in order, without any stop condition."""
    if isinstance(rule, DailyRecurrence):
        for step in itertools.count(1):
            yield start + timedelta(days=step * rule.interval)

    elif isinstance(rule, WeeklyRecurrence) and rule.days_of_week:
        anchor_week = _week_index(start.date())
        for offset in itertools.count(1):
            candidate = start + timedelta(days=offset)
            weeks = _week_index(candidate.date()) - anchor_week
            if weeks % rule.interval == 0 and get_day_of_week(candidate) in rule.days_of_week:
                yield candidate

    elif isinstance(rule, WeeklyRecurrence):
        for step in itertools.count(1):
            yield start + timedelta(days=7 * step * rule.interval)

    elif isinstance(rule, MonthlyRecurrence):
        for step in itertools.count(1):
            candidate = _add_months(start, step * rule.interval)
            if candidate is not None:
                yield candidate


def generate_occurrences(start: datetime, rule, max_occurrences: Optional[int] = None) -> list[datetime]:
    """Materialize the occurrences of ``rule`` anchored at ``start``.

    The anchor is always the first occurrence. Expansion stops at the
    explicit ``occurrences`` count, otherwise at ``max_occurrences``
    (default 52); ``end_date`` (inclusive by date) truncates either. A rule
    with neither bound also stops one year after the anchor.
    """
    ensure_valid_rule(rule)
    limit = rule.occurrences or max_occurrences or settings.RECURRENCE_MAX_OCCURRENCES
    unbounded = rule.occurrences is None and rule.end_date is None
    horizon = start + timedelta(days=DEFAULT_HORIZON_DAYS) if unbounded else None

    occurrences = [start]
    if rule.end_date is not None and start.date() > rule.end_date:
        return occurrences

    for candidate in _candidates(start, rule):
        if len(occurrences) >= limit:
            break
        if rule.end_date is not None and candidate.date() > rule.end_date:
            break
        if horizon is not None and candidate > horizon:
            break
        occurrences.append(candidate)
    return occurrences


def matches_recurrence(value: datetime, start: datetime, rule) -> bool:
    """Whether ``value`` falls on an occurrence date of the rule.

    Compares calendar dates and ignores the occurrence count.
    """
    day = value.date()
    anchor = start.date()
    if day < anchor:
        return False
    if rule.end_date is not None and day > rule.end_date:
        return False
    if day == anchor:
        return True

    days_diff = (day - anchor).days
    if isinstance(rule, DailyRecurrence):
        return days_diff % rule.interval == 0
    if isinstance(rule, WeeklyRecurrence):
        if rule.days_of_week:
            weeks = _week_index(day) - _week_index(anchor)
            return weeks % rule.interval == 0 and get_day_of_week(day) in rule.days_of_week
        return days_diff % (7 * rule.interval) == 0
    if isinstance(rule, MonthlyRecurrence):
        months = (day.year - anchor.year) * 12 + day.month - anchor.month
        return months % rule.interval == 0 and day.day == anchor.day
    return False


def get_next_occurrence(from_dt: datetime, start: datetime, rule) -> Optional[datetime]:
    for occurrence in generate_occurrences(start, rule):
        if occurrence > from_dt:
            return occurrence
    return None


def get_recurrence_summary(rule) -> str:
    units = {"DAILY": ("day", "days"), "WEEKLY": ("week", "weeks"), "MONTHLY": ("month", "months")}
    singular, plural = units[rule.frequency]
    parts = [f"Every {singular}" if rule.interval == 1 else f"Every {rule.interval} {plural}"]

    if isinstance(rule, WeeklyRecurrence) and rule.days_of_week:
        parts.append("on " + ", ".join(DAY_NAMES[day] for day in rule.days_of_week))
    if rule.end_date is not None:
        parts.append(f"until {rule.end_date.isoformat()}")
    elif rule.occurrences is not None:
        parts.append(f"({rule.occurrences} times)")
    return " ".join(parts)
