from datetime import date, time

import pytest

from utils.shift_hours import calculate_shift_hours, worked_hours
from utils.workdays import count_weekdays

# 2 March 2026 is a Monday
MONDAY = date(2026, 3, 2)


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2026, 3, 2), date(2026, 3, 6), 5),  # Mon-Fri
        (date(2026, 3, 2), date(2026, 3, 8), 5),  # full week, weekend ignored
        (date(2026, 3, 6), date(2026, 3, 9), 2),  # Fri-Mon across a weekend
        (date(2026, 3, 7), date(2026, 3, 8), 0),  # Sat-Sun only
        (date(2026, 3, 4), date(2026, 3, 4), 1),  # single Wednesday
        (date(2026, 3, 2), date(2026, 3, 15), 10),  # two weeks
        (date(2026, 2, 23), date(2026, 3, 6), 10),  # across a month boundary
    ],
)
def test_count_weekdays(start, end, expected):
    assert count_weekdays(start, end) == expected


def test_count_weekdays_inverted_range_is_zero():
    assert count_weekdays(date(2026, 3, 6), date(2026, 3, 2)) == 0


def test_count_weekdays_matches_day_by_day_walk():
    for length in range(0, 40):
        end = date.fromordinal(MONDAY.toordinal() + length)
        expected = sum(
            1
            for offset in range(length + 1)
            if date.fromordinal(MONDAY.toordinal() + offset).weekday() < 5
        )
        assert count_weekdays(MONDAY, end) == expected


def test_shift_hours_deducts_break():
    assert calculate_shift_hours(time(9, 0), time(17, 0), 30) == 7.5


def test_shift_hours_overnight():
    assert calculate_shift_hours(time(22, 0), time(6, 0)) == 8.0


def test_shift_hours_never_negative():
    assert calculate_shift_hours(time(9, 0), time(9, 30), 60) == 0.0


def test_worked_hours_open_registration():
    assert worked_hours(time(9, 0), None) is None
    assert worked_hours(time(8, 0), time(12, 15), 15) == 4.0
