#!/usr/bin/env python3
"""Command-line shell around the timetable and grade engine.

Reads a timetable export (classes, tasks, settings) and prints today's
classes, clashes, upcoming reminders and grade averages.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from grades.analytics import overall_average, subject_averages, summarize
from grades.averages import AverageType, average_type_from_raw
from grades.scales import SCALES, scale_from_id
from scheduler.engine import Slot, all_conflicts, find_conflicts, visible_days
from scheduler.models import ScheduledClass, Weekday, hhmm_to_time, minutes_to_hhmm
from scheduler.recurrence import classes_for_day, current_cycle_week
from scheduler.reminders import InMemoryBackend, ReminderService
from scheduler.weekday import WeekdayClock
from storage.repo import TimetableExport, load_data, save_data, with_fresh_ids

logger = logging.getLogger("timetable")


def _format_class(cls: ScheduledClass) -> str:
    line = f"{minutes_to_hhmm(cls.start)}-{minutes_to_hhmm(cls.end)}  {cls.name}"
    if cls.room:
        line += f" ({cls.room})"
    return line


def _load(path: Path) -> TimetableExport:
    return load_data(path) or TimetableExport()


def cmd_today(args: argparse.Namespace, clock: WeekdayClock) -> int:
    data = _load(args.data)
    week = current_cycle_week(data.settings, clock, args.week)
    day = clock.today()
    classes = classes_for_day(data.classes, day, week)

    print(f"{day.short_name}, week {week}")
    if not classes:
        print("No classes.")
    for cls in classes:
        print(f"  {_format_class(cls)}")
    return 0


def cmd_week(args: argparse.Namespace, clock: WeekdayClock) -> int:
    data = _load(args.data)
    week = current_cycle_week(data.settings, clock, args.week)
    print(f"Week {week}")
    for day in visible_days(data.settings):
        classes = classes_for_day(data.classes, day, week)
        print(f"{day.short_name}:")
        for cls in classes:
            print(f"  {_format_class(cls)}")
    return 0


def cmd_conflicts(args: argparse.Namespace, clock: WeekdayClock) -> int:
    data = _load(args.data)
    clashes = all_conflicts(data.classes, data.settings.number_of_weeks)
    if not clashes:
        print("No conflicts.")
        return 0
    by_id = {c.id: c for c in data.classes}
    for class_id, others in clashes.items():
        cls = by_id[class_id]
        names = ", ".join(o.name for o in others)
        print(f"{cls.weekday.short_name} {_format_class(cls)} clashes with {names}")
    return 0


def cmd_check(args: argparse.Namespace, clock: WeekdayClock) -> int:
    data = _load(args.data)
    candidate = Slot(
        day_of_week=args.day,
        week_index=args.week,
        start_time=hhmm_to_time(args.start),
        end_time=hhmm_to_time(args.end),
    )
    if not candidate.is_valid:
        print("Error: start time must be before end time.", file=sys.stderr)
        return 1

    clashes = find_conflicts(candidate, data.classes, args.exclude, data.settings.number_of_weeks)
    if not clashes:
        print("No conflicts.")
        return 0
    for cls in clashes:
        print(f"Conflicts with {_format_class(cls)}")
    return 2


def cmd_reminders(args: argparse.Namespace, clock: WeekdayClock) -> int:
    data = _load(args.data)
    backend = InMemoryBackend()
    service = ReminderService(backend, clock)
    service.reschedule_all(data.classes)

    pending = backend.pending()
    if not pending:
        print("No reminders.")
    for reminder in pending:
        print(f"{reminder.fire_at:%a %Y-%m-%d %H:%M}  {reminder.title}: {reminder.body}")
    return 0


def cmd_grades(args: argparse.Namespace, clock: WeekdayClock) -> int:
    data = _load(args.data)
    average_type = average_type_from_raw(args.average or data.settings.average_type)
    scale = scale_from_id(args.scale or data.settings.grade_scale)

    subjects = subject_averages(data.tasks, average_type)
    print(f"{average_type.display_name}, {scale.display_name}")
    for subject in subjects:
        s = summarize(subject.subject_name, subject.average, scale)
        print(f"  {s.subject_name}: {s.display} ({s.band.value}, {len(subject.grades)} grades)")
    overall = summarize("Overall", overall_average(subjects, average_type), scale)
    print(f"Overall: {overall.display}")
    return 0


def cmd_import(args: argparse.Namespace, clock: WeekdayClock) -> int:
    incoming = load_data(args.source)
    if incoming is None:
        print(f"Error: {args.source} does not exist.", file=sys.stderr)
        return 1

    incoming = with_fresh_ids(incoming)
    current = _load(args.data)
    merged = TimetableExport(
        export_date=current.export_date,
        classes=current.classes + incoming.classes,
        tasks=current.tasks + incoming.tasks,
        settings=current.settings,
    )
    save_data(merged, args.data)
    print(f"Imported {len(incoming.classes)} classes and {len(incoming.tasks)} tasks.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Timetable and grade tracker.")
    parser.add_argument(
        "--data",
        type=Path,
        default=Path(os.getenv("TIMETABLE_DATA", "timetable.json")),
        help="Timetable data file (default: $TIMETABLE_DATA or timetable.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("today", help="Classes for today")
    p.add_argument("--week", type=int, default=1, help="Week shown when repeating weeks are off")
    p.set_defaults(func=cmd_today)

    p = sub.add_parser("week", help="Classes for the whole week")
    p.add_argument("--week", type=int, default=1, help="Week shown when repeating weeks are off")
    p.set_defaults(func=cmd_week)

    p = sub.add_parser("conflicts", help="List clashing classes")
    p.set_defaults(func=cmd_conflicts)

    p = sub.add_parser("check", help="Check a time slot against the timetable")
    p.add_argument("--day", type=int, required=True, choices=[d.value for d in Weekday], help="1=Monday ... 7=Sunday")
    p.add_argument("--start", required=True, help="HH:MM")
    p.add_argument("--end", required=True, help="HH:MM")
    p.add_argument("--week", type=int, default=1)
    p.add_argument("--exclude", default=None, help="Class id to ignore")
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("reminders", help="Upcoming class reminders")
    p.set_defaults(func=cmd_reminders)

    p = sub.add_parser("grades", help="Grade averages per subject")
    p.add_argument("--average", choices=[t.value for t in AverageType], default=None)
    p.add_argument("--scale", choices=sorted(SCALES), default=None)
    p.set_defaults(func=cmd_grades)

    p = sub.add_parser("import", help="Import an exported timetable")
    p.add_argument("source", type=Path)
    p.set_defaults(func=cmd_import)

    return parser


def main(argv: Optional[List[str]] = None, clock: Optional[WeekdayClock] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args, clock or WeekdayClock())
    except ValidationError as e:
        print(f"Error: invalid timetable data: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
