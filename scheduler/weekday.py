"""Conversion between native (Sunday=1) and app (Monday=1) weekday numbers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

from scheduler.models import Weekday

Clock = Callable[[], datetime]


def to_app_day(native_day: int) -> int:
    return 7 if native_day == 1 else native_day - 1


def to_native_day(app_day: int) -> int:
    return 1 if app_day == 7 else app_day + 1


def native_weekday(d: date) -> int:
    # isoweekday: Monday=1 .. Sunday=7
    return d.isoweekday() % 7 + 1


class WeekdayClock:
    """Source of "now" and "today" in the app weekday convention.

    The clock callable is injectable so that reminder computation can be
    tested against a fixed moment.
    """

    def __init__(self, now: Optional[Clock] = None) -> None:
        self._now = now or datetime.now

    def now(self) -> datetime:
        return self._now()

    def app_day(self, d: date) -> Weekday:
        return Weekday(to_app_day(native_weekday(d)))

    def today(self) -> Weekday:
        return self.app_day(self.now())
