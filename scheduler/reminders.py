"""Pre-class reminders.

``next_reminder`` is a pure function of a class and the current moment.
``ReminderService`` hands its result to a notification backend, keyed by
class id so that re-registering a class replaces its previous reminder.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Protocol

from scheduler.models import ScheduledClass, time_to_minutes
from scheduler.weekday import WeekdayClock, native_weekday, to_native_day

logger = logging.getLogger(__name__)

REMINDER_OFFSET_MINUTES = 15


@dataclass(frozen=True)
class Reminder:
    identifier: str
    fire_at: datetime
    title: str
    body: str


def reminder_body(cls: ScheduledClass, offset_minutes: int = REMINDER_OFFSET_MINUTES) -> str:
    parts: List[str] = []
    if cls.room:
        parts.append(f"Room: {cls.room}")
    if cls.teacher:
        parts.append(cls.teacher)
    if not parts:
        return f"Starting in {offset_minutes} minutes"
    return " · ".join(parts) + f" · in {offset_minutes} min"


def next_trigger(
    cls: ScheduledClass,
    now: datetime,
    offset_minutes: int = REMINDER_OFFSET_MINUTES,
) -> Optional[datetime]:
    """Next moment strictly after ``now`` at which the reminder should fire.

    Returns None when the class starts too early in the day for the offset
    to land on the same day.
    """
    at = time_to_minutes(cls.start_time) - offset_minutes
    if at < 0:
        return None
    hour, minute = divmod(at, 60)

    target = to_native_day(cls.day_of_week)
    days_ahead = (target - native_weekday(now)) % 7
    fire_at = now.replace(hour=hour, minute=minute, second=0, microsecond=0) + timedelta(days=days_ahead)
    if fire_at <= now:
        fire_at += timedelta(days=7)
    return fire_at


def next_reminder(
    cls: ScheduledClass,
    now: datetime,
    offset_minutes: int = REMINDER_OFFSET_MINUTES,
) -> Optional[Reminder]:
    fire_at = next_trigger(cls, now, offset_minutes)
    if fire_at is None:
        return None
    return Reminder(
        identifier=cls.id,
        fire_at=fire_at,
        title=cls.name,
        body=reminder_body(cls, offset_minutes),
    )


class NotificationBackend(Protocol):
    def schedule(self, reminder: Reminder) -> None: ...

    def cancel(self, identifier: str) -> None: ...

    def cancel_all(self) -> None: ...


class InMemoryBackend:
    """Backend that only records pending reminders."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Dict[str, Reminder] = {}

    def schedule(self, reminder: Reminder) -> None:
        with self._lock:
            self._pending[reminder.identifier] = reminder

    def cancel(self, identifier: str) -> None:
        with self._lock:
            self._pending.pop(identifier, None)

    def cancel_all(self) -> None:
        with self._lock:
            self._pending.clear()

    def pending(self) -> List[Reminder]:
        with self._lock:
            return sorted(self._pending.values(), key=lambda r: r.fire_at)

    def get(self, identifier: str) -> Optional[Reminder]:
        with self._lock:
            return self._pending.get(identifier)


class ReminderService:
    def __init__(
        self,
        backend: NotificationBackend,
        clock: Optional[WeekdayClock] = None,
        enabled: bool = True,
        offset_minutes: int = REMINDER_OFFSET_MINUTES,
    ) -> None:
        self.backend = backend
        self.clock = clock or WeekdayClock()
        self.enabled = enabled
        self.offset_minutes = offset_minutes

    def schedule_class(self, cls: ScheduledClass) -> Optional[Reminder]:
        self.backend.cancel(cls.id)
        if not self.enabled:
            return None

        reminder = next_reminder(cls, self.clock.now(), self.offset_minutes)
        if reminder is None:
            logger.debug("no reminder for %s: starts before %d minutes past midnight", cls.id, self.offset_minutes)
            return None

        self.backend.schedule(reminder)
        logger.debug("reminder for %s at %s", cls.id, reminder.fire_at.isoformat())
        return reminder

    def cancel_class(self, class_id: str) -> None:
        self.backend.cancel(class_id)

    def cancel_all(self) -> None:
        self.backend.cancel_all()

    def reschedule_all(self, classes: Iterable[ScheduledClass]) -> List[Reminder]:
        scheduled: List[Reminder] = []
        for cls in list(classes):
            reminder = self.schedule_class(cls)
            if reminder is not None:
                scheduled.append(reminder)
        logger.info("rescheduled %d reminders", len(scheduled))
        return scheduled
