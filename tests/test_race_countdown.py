from datetime import date, datetime

import pytest

from pacer.errors import InvalidInput
from pacer.services.race_countdown import days_to_race, parse_calendar_date


def test_days_to_race_one_week_out():
    assert days_to_race("2025-01-01", date(2024, 12, 25)) == 7


def test_days_to_race_ignores_time_of_day():
    assert days_to_race("2025-01-01", datetime(2024, 12, 31, 23, 59)) == 1
    assert days_to_race("2025-01-01", datetime(2025, 1, 1, 0, 1)) == 0


def test_days_to_race_after_race_is_negative():
    assert days_to_race("2025-01-01", date(2025, 1, 4)) == -3


def test_days_to_race_without_race_date():
    assert days_to_race(None, date(2025, 1, 1)) == 0
    assert days_to_race("", date(2025, 1, 1)) == 0


def test_parse_calendar_date():
    assert parse_calendar_date("2025-03-09") == date(2025, 3, 9)


@pytest.mark.parametrize("value", ["2025-13-01", "2025-02-30", "03/09/2025", "2025-3-9", "tomorrow"])
def test_parse_calendar_date_rejects_invalid(value):
    with pytest.raises(InvalidInput):
        parse_calendar_date(value)
