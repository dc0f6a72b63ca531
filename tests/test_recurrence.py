"""Tests for the recurrence engine and its RRULE text form."""

from datetime import date, datetime, timedelta

import pytest

from salonbook.core.exceptions import RecurrenceValidationError
from salonbook.schemas.recurrence import DailyRecurrence, MonthlyRecurrence, WeeklyRecurrence
from salonbook.services.recurrence import (
    generate_occurrences,
    generate_rrule,
    get_next_occurrence,
    get_recurrence_summary,
    matches_recurrence,
    parse_rrule,
    validate_recurrence_rule,
)

ANCHOR = datetime(2030, 1, 7, 10, 0)  # Monday


def test_rrule_round_trip():
    rule = WeeklyRecurrence(interval=2, days_of_week=[3, 1], end_date=date(2030, 12, 31))
    text = generate_rrule(rule)
    assert text == "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;UNTIL=20301231"
    assert parse_rrule(text) == rule


def test_count_limits_occurrences():
    occurrences = generate_occurrences(ANCHOR, DailyRecurrence(occurrences=5))
    assert len(occurrences) == 5
    assert occurrences[0] == ANCHOR
    assert occurrences[-1] == datetime(2030, 1, 11, 10, 0)


def test_until_is_inclusive_by_date():
    occurrences = generate_occurrences(ANCHOR, DailyRecurrence(interval=2, end_date=date(2030, 1, 11)))
    assert [o.day for o in occurrences] == [7, 9, 11]


def test_weekly_days_with_interval():
    rule = WeeklyRecurrence(interval=2, days_of_week=[1, 3], occurrences=4)
    occurrences = generate_occurrences(ANCHOR, rule)
    assert [o.date() for o in occurrences] == [
        date(2030, 1, 7),
        date(2030, 1, 9),
        date(2030, 1, 21),
        date(2030, 1, 23),
    ]


def test_monthly_skips_short_months():
    start = datetime(2030, 1, 31, 9, 0)
    occurrences = generate_occurrences(start, MonthlyRecurrence(occurrences=3))
    assert [o.date() for o in occurrences] == [date(2030, 1, 31), date(2030, 3, 31), date(2030, 5, 31)]


def test_unbounded_rule_is_capped():
    occurrences = generate_occurrences(ANCHOR, DailyRecurrence())
    assert len(occurrences) == 52

    weekly = generate_occurrences(ANCHOR, WeeklyRecurrence(), max_occurrences=500)
    assert weekly[-1] <= datetime(2031, 1, 7, 10, 0)


def test_end_date_rule_is_capped():
    occurrences = generate_occurrences(ANCHOR, DailyRecurrence(end_date=date(2040, 1, 7)))
    assert len(occurrences) == 52

    weekly = generate_occurrences(ANCHOR, WeeklyRecurrence(end_date=date(2040, 1, 7)), max_occurrences=5)
    assert len(weekly) == 5
    assert weekly[-1] == datetime(2030, 2, 4, 10, 0)


def test_explicit_count_beyond_default_cap():
    occurrences = generate_occurrences(ANCHOR, WeeklyRecurrence(occurrences=60))
    assert len(occurrences) == 60
    assert occurrences[-1] == ANCHOR + timedelta(weeks=59)


def test_matches_recurrence_compares_dates():
    rule = WeeklyRecurrence(days_of_week=[1], occurrences=2)
    assert matches_recurrence(datetime(2030, 1, 14, 18, 0), ANCHOR, rule)
    # The count is ignored.
    assert matches_recurrence(datetime(2030, 3, 4, 10, 0), ANCHOR, rule)
    assert not matches_recurrence(datetime(2030, 1, 15, 10, 0), ANCHOR, rule)
    assert not matches_recurrence(datetime(2029, 12, 31, 10, 0), ANCHOR, rule)


def test_next_occurrence():
    rule = DailyRecurrence(interval=3, occurrences=3)
    assert get_next_occurrence(datetime(2030, 1, 8), ANCHOR, rule) == datetime(2030, 1, 10, 10, 0)
    assert get_next_occurrence(datetime(2030, 2, 1), ANCHOR, rule) is None


def test_summary():
    assert get_recurrence_summary(WeeklyRecurrence(interval=2, days_of_week=[1, 3], end_date=date(2030, 12, 31))) == (
        "Every 2 weeks on Mon, Wed until 2030-12-31"
    )
    assert get_recurrence_summary(DailyRecurrence(occurrences=5)) == "Every day (5 times)"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "INTERVAL=2",
        "FREQ=YEARLY",
        "FREQ=DAILY;BYDAY=MO",
        "FREQ=WEEKLY;BYDAY=XX",
        "FREQ=DAILY;INTERVAL=abc",
        "FREQ=DAILY;FREQ=WEEKLY",
        "FREQ=DAILY;BYHOUR=9",
    ],
)
def test_parse_rejects_malformed_rules(text):
    with pytest.raises(RecurrenceValidationError):
        parse_rrule(text)


def test_validate_rejects_zero_interval():
    assert validate_recurrence_rule(DailyRecurrence(interval=0)) is not None
    assert validate_recurrence_rule(DailyRecurrence(occurrences=3, end_date=date(2030, 2, 1))) is not None
    assert validate_recurrence_rule(DailyRecurrence()) is None
