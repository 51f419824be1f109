from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Dict, Iterable, List, Optional

from scheduler.models import (
    DAYS_IN_ORDER,
    WORKDAYS,
    AppSettings,
    ScheduledClass,
    Weekday,
    overlaps,
    time_to_minutes,
)


@dataclass(frozen=True)
class Slot:
    day_of_week: int
    week_index: int
    start_time: time
    end_time: time

    @property
    def start(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def is_valid(self) -> bool:
        return self.start < self.end


def slot_for(cls: ScheduledClass) -> Slot:
    return Slot(
        day_of_week=cls.day_of_week,
        week_index=cls.week_index,
        start_time=cls.start_time,
        end_time=cls.end_time,
    )


def _same_rotation(a: int, b: int, number_of_weeks: int) -> bool:
    if number_of_weeks <= 1:
        return True
    return a == b


def find_conflicts(
    candidate: Slot,
    classes: Iterable[ScheduledClass],
    exclude_id: Optional[str] = None,
    number_of_weeks: int = 1,
) -> List[ScheduledClass]:
    """Existing classes whose time range intersects ``candidate``.

    Ranges are half-open: a class ending at 10:00 does not clash with one
    starting at 10:00. Week indices only matter when the timetable rotates
    over more than one week. A degenerate candidate never conflicts.
    """
    if not candidate.is_valid:
        return []

    out: List[ScheduledClass] = []
    for cls in classes:
        if exclude_id is not None and cls.id == exclude_id:
            continue
        if cls.day_of_week != candidate.day_of_week:
            continue
        if not _same_rotation(cls.week_index, candidate.week_index, number_of_weeks):
            continue
        if overlaps(candidate.start, candidate.end, cls.start, cls.end):
            out.append(cls)

    out.sort(key=lambda c: c.start_time)
    return out


def has_conflict(
    candidate: Slot,
    classes: Iterable[ScheduledClass],
    exclude_id: Optional[str] = None,
    number_of_weeks: int = 1,
) -> bool:
    return bool(find_conflicts(candidate, classes, exclude_id, number_of_weeks))


def all_conflicts(classes: Iterable[ScheduledClass], number_of_weeks: int = 1) -> Dict[str, List[ScheduledClass]]:
    """Map of class id to the other classes it clashes with, for every clashing class."""
    snapshot = list(classes)
    out: Dict[str, List[ScheduledClass]] = {}
    for cls in snapshot:
        clashes = find_conflicts(slot_for(cls), snapshot, exclude_id=cls.id, number_of_weeks=number_of_weeks)
        if clashes:
            out[cls.id] = clashes
    return out


def visible_days(settings: AppSettings) -> List[Weekday]:
    return list(DAYS_IN_ORDER) if settings.show_weekends else list(WORKDAYS)
