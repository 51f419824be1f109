from datetime import date, datetime

import pytest

from scheduler.models import Weekday
from scheduler.weekday import WeekdayClock, native_weekday, to_app_day, to_native_day


@pytest.mark.parametrize("day", range(1, 8))
def test_conversions_are_inverse(day: int) -> None:
    assert to_app_day(to_native_day(day)) == day
    assert to_native_day(to_app_day(day)) == day


def test_sunday_and_monday_mapping() -> None:
    assert to_app_day(1) == 7  # native Sunday
    assert to_app_day(2) == 1  # native Monday
    assert to_native_day(7) == 1
    assert to_native_day(1) == 2


def test_native_weekday_of_dates() -> None:
    assert native_weekday(date(2024, 1, 7)) == 1  # Sunday
    assert native_weekday(date(2024, 1, 8)) == 2  # Monday
    assert native_weekday(date(2024, 1, 13)) == 7  # Saturday


def test_clock_uses_injected_now() -> None:
    clock = WeekdayClock(now=lambda: datetime(2024, 1, 7, 12, 0))
    assert clock.now() == datetime(2024, 1, 7, 12, 0)
    assert clock.today() == Weekday.sun
    assert clock.app_day(date(2024, 1, 10)) == Weekday.wed
