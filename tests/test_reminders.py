from datetime import datetime, timedelta, timezone

from scheduler.reminders import (
    InMemoryBackend,
    ReminderService,
    next_reminder,
    next_trigger,
    reminder_body,
)
from scheduler.weekday import WeekdayClock

# 2024-01-08 is a Monday
MONDAY = datetime(2024, 1, 8)


def test_passed_trigger_moves_to_next_week(class_factory) -> None:
    cls = class_factory(day=1, start="08:00", end="09:00")
    now = MONDAY.replace(hour=7, minute=50)
    assert next_trigger(cls, now) == datetime(2024, 1, 15, 7, 45)


def test_upcoming_trigger_same_day(class_factory) -> None:
    cls = class_factory(day=1, start="08:00", end="09:00")
    now = MONDAY.replace(hour=7, minute=0)
    assert next_trigger(cls, now) == datetime(2024, 1, 8, 7, 45)


def test_trigger_at_exactly_now_is_next_week(class_factory) -> None:
    cls = class_factory(day=1, start="08:00", end="09:00")
    now = MONDAY.replace(hour=7, minute=45)
    assert next_trigger(cls, now) == datetime(2024, 1, 15, 7, 45)


def test_trigger_later_in_week_and_wraparound(class_factory) -> None:
    friday = class_factory(day=5, start="10:10", end="11:00")
    assert next_trigger(friday, MONDAY.replace(hour=12)) == datetime(2024, 1, 12, 9, 55)

    sunday = class_factory(day=7, start="18:00", end="19:00")
    assert next_trigger(sunday, MONDAY) == datetime(2024, 1, 14, 17, 45)

    monday = class_factory(day=1, start="09:00", end="10:00")
    saturday = datetime(2024, 1, 13, 20, 0)
    assert next_trigger(monday, saturday) == datetime(2024, 1, 15, 8, 45)


def test_hour_borrow(class_factory) -> None:
    cls = class_factory(day=2, start="10:05", end="11:00")
    assert next_trigger(cls, MONDAY) == datetime(2024, 1, 9, 9, 50)


def test_too_early_class_is_skipped(class_factory) -> None:
    cls = class_factory(day=2, start="00:10", end="01:00")
    assert next_trigger(cls, MONDAY) is None
    assert next_reminder(cls, MONDAY) is None

    midnight = class_factory(day=2, start="00:15", end="01:00")
    assert next_trigger(midnight, MONDAY) == datetime(2024, 1, 9, 0, 0)


def test_timezone_is_preserved(class_factory) -> None:
    cls = class_factory(day=1, start="08:00", end="09:00")
    now = datetime(2024, 1, 8, 6, 0, tzinfo=timezone.utc)
    fire_at = next_trigger(cls, now)
    assert fire_at == datetime(2024, 1, 8, 7, 45, tzinfo=timezone.utc)
    assert fire_at.tzinfo is timezone.utc


def test_trigger_is_always_in_the_future(class_factory) -> None:
    cls = class_factory(day=3, start="12:30", end="13:30")
    for hours in range(0, 24 * 7, 5):
        now = MONDAY + timedelta(hours=hours, minutes=17)
        fire_at = next_trigger(cls, now)
        assert now < fire_at <= now + timedelta(days=7)
        assert fire_at.isoweekday() == 3


def test_reminder_content(class_factory) -> None:
    plain = class_factory("Math")
    assert reminder_body(plain) == "Starting in 15 minutes"

    full = class_factory("Math", room="B12", teacher="Ms. Ray")
    assert reminder_body(full) == "Room: B12 · Ms. Ray · in 15 min"

    reminder = next_reminder(full, MONDAY)
    assert reminder.identifier == full.id
    assert reminder.title == "Math"


def test_service_replaces_previous_registration(class_factory) -> None:
    backend = InMemoryBackend()
    now = [MONDAY]
    service = ReminderService(backend, WeekdayClock(now=lambda: now[0]))
    cls = class_factory(day=1, start="08:00", end="09:00")

    first = service.schedule_class(cls)
    assert first.fire_at == datetime(2024, 1, 8, 7, 45)

    now[0] = MONDAY.replace(hour=8)
    second = service.schedule_class(cls)
    assert second.fire_at == datetime(2024, 1, 15, 7, 45)
    assert backend.pending() == [second]


def test_service_is_idempotent(class_factory) -> None:
    backend = InMemoryBackend()
    service = ReminderService(backend, WeekdayClock(now=lambda: MONDAY))
    cls = class_factory()
    assert service.schedule_class(cls) == service.schedule_class(cls)
    assert len(backend.pending()) == 1


def test_skipped_class_clears_old_registration(class_factory) -> None:
    backend = InMemoryBackend()
    service = ReminderService(backend, WeekdayClock(now=lambda: MONDAY))
    cls = class_factory(start="09:00", end="10:00")
    service.schedule_class(cls)

    moved = cls.model_copy(update={"start_time": cls.start_time.replace(hour=0, minute=5)})
    assert service.schedule_class(moved) is None
    assert backend.get(cls.id) is None


def test_reschedule_all_and_cancel(class_factory) -> None:
    backend = InMemoryBackend()
    service = ReminderService(backend, WeekdayClock(now=lambda: MONDAY))
    classes = [
        class_factory("A", day=1, start="09:00", end="10:00"),
        class_factory("B", day=2, start="09:00", end="10:00"),
        class_factory("C", day=3, start="00:05", end="01:00"),
    ]
    scheduled = service.reschedule_all(classes)
    assert [r.title for r in scheduled] == ["A", "B"]
    assert [r.title for r in backend.pending()] == ["A", "B"]

    service.cancel_class(classes[0].id)
    assert [r.title for r in backend.pending()] == ["B"]

    service.cancel_all()
    assert backend.pending() == []


def test_disabled_service_only_cancels(class_factory) -> None:
    backend = InMemoryBackend()
    cls = class_factory()
    ReminderService(backend, WeekdayClock(now=lambda: MONDAY)).schedule_class(cls)

    disabled = ReminderService(backend, WeekdayClock(now=lambda: MONDAY), enabled=False)
    assert disabled.schedule_class(cls) is None
    assert backend.pending() == []
