"""Tests for the pure date helpers."""

from datetime import date, datetime

import pytest

from salonbook.core.exceptions import BookingValidationError
from salonbook.utils.date_utils import (
    CONFIRMATION_CODE_ALPHABET,
    calculate_duration,
    difference_in_hours,
    do_time_slots_overlap,
    generate_confirmation_code,
    generate_time_slots,
    get_day_of_week,
    get_month_range,
    get_week_range,
    parse_hh_mm,
    parse_time_string,
    round_to_interval,
)


def test_back_to_back_slots_do_not_overlap():
    assert do_time_slots_overlap(
        datetime(2030, 1, 7, 10), datetime(2030, 1, 7, 11),
        datetime(2030, 1, 7, 11), datetime(2030, 1, 7, 12),
    ) is False
    assert do_time_slots_overlap(
        datetime(2030, 1, 7, 10), datetime(2030, 1, 7, 11),
        datetime(2030, 1, 7, 10, 30), datetime(2030, 1, 7, 11, 30),
    ) is True


@pytest.mark.parametrize(
    "first, second, expected",
    [
        ((10, 0, 11, 0), (11, 0, 12, 0), False),
        ((10, 0, 11, 0), (10, 30, 11, 30), True),
        ((10, 0, 12, 0), (10, 30, 11, 0), True),
        ((10, 0, 11, 0), (12, 0, 13, 0), False),
        ((10, 0, 11, 0), (10, 0, 11, 0), True),
    ],
)
def test_overlap_is_symmetric(first, second, expected):
    def interval(h1, m1, h2, m2):
        return datetime(2030, 1, 7, h1, m1), datetime(2030, 1, 7, h2, m2)

    a, b = interval(*first), interval(*second)
    assert do_time_slots_overlap(*a, *b) is expected
    assert do_time_slots_overlap(*b, *a) is expected

def test_day_of_week_starts_on_sunday():
    assert get_day_of_week(date(2030, 1, 6)) == 0  # Sunday
    assert get_day_of_week(date(2030, 1, 7)) == 1
    assert get_day_of_week(datetime(2030, 1, 12, 15)) == 6


def test_generate_time_slots_excludes_end():
    slots = generate_time_slots(datetime(2030, 1, 7, 9), datetime(2030, 1, 7, 10), 15)
    assert [s.minute for s in slots] == [0, 15, 30, 45]
    assert generate_time_slots(datetime(2030, 1, 7, 9), datetime(2030, 1, 7, 10), 0) == []


def test_parse_time_string_accepts_midnight_close():
    assert parse_time_string("09:30", date(2030, 1, 7)) == datetime(2030, 1, 7, 9, 30)
    assert parse_time_string("24:00", date(2030, 1, 7)) == datetime(2030, 1, 8, 0, 0)


def test_parse_hh_mm_rejects_garbage():
    with pytest.raises(BookingValidationError):
        parse_hh_mm("9h30")


def test_week_and_month_ranges():
    week_start, week_end = get_week_range(date(2030, 1, 9))
    assert week_start == datetime(2030, 1, 7)
    assert week_end.date() == date(2030, 1, 13)

    month_start, month_end = get_month_range(date(2030, 2, 14))
    assert month_start == datetime(2030, 2, 1)
    assert month_end.date() == date(2030, 2, 28)


def test_durations_and_rounding():
    assert calculate_duration(datetime(2030, 1, 7, 9), datetime(2030, 1, 7, 10, 30)) == 90
    assert difference_in_hours(datetime(2030, 1, 7, 20, 59), datetime(2030, 1, 7, 9)) == 11
    assert round_to_interval(datetime(2030, 1, 7, 9, 7), 15) == datetime(2030, 1, 7, 9, 0)
    assert round_to_interval(datetime(2030, 1, 7, 9, 8), 15) == datetime(2030, 1, 7, 9, 15)


def test_confirmation_code_shape():
    code = generate_confirmation_code()
    assert len(code) == 8
    assert all(ch in CONFIRMATION_CODE_ALPHABET for ch in code)
