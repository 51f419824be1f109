from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from scheduler.models import AppSettings, ScheduledClass
from scheduler.weekday import WeekdayClock


def rotation_week(iso_week: int, number_of_weeks: int) -> int:
    return ((iso_week - 1) % number_of_weeks) + 1


def active_week(settings: AppSettings, on_date: Optional[date] = None, selected_week: int = 1) -> int:
    """Week slot in effect.

    Without repeating weeks the user's selected week is used as is. With
    repeating weeks the slot follows the ISO week of ``on_date``.
    """
    if not settings.repeating_weeks_enabled:
        return selected_week
    on_date = on_date or date.today()
    return rotation_week(on_date.isocalendar()[1], settings.number_of_weeks)


def current_cycle_week(settings: AppSettings, clock: WeekdayClock, selected_week: int = 1) -> int:
    return active_week(settings, clock.now().date(), selected_week)


def is_active_in_week(cls: ScheduledClass, week: int) -> bool:
    return cls.week_index == week


def classes_for_day(classes: Iterable[ScheduledClass], day: int, week: int) -> List[ScheduledClass]:
    out = [c for c in classes if c.day_of_week == day and is_active_in_week(c, week)]
    out.sort(key=lambda c: c.start_time)
    return out


def classes_for_week(classes: Iterable[ScheduledClass], week: int) -> List[ScheduledClass]:
    out = [c for c in classes if is_active_in_week(c, week)]
    out.sort(key=lambda c: (c.day_of_week, c.start_time))
    return out
