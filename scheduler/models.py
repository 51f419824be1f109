from __future__ import annotations

import uuid
from datetime import datetime, time, tzinfo
from enum import IntEnum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Minute = int

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}([0-9A-Fa-f]{2})?$"
MAX_WEEKS = 4

# Zone that timestamped class times are read in; None means the system zone.
LOCAL_ZONE: Optional[tzinfo] = None

# Exports written by the mobile apps use camelCase keys.
EXPORT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Weekday(IntEnum):
    """App weekday numbering, Monday first."""

    mon = 1
    tue = 2
    wed = 3
    thu = 4
    fri = 5
    sat = 6
    sun = 7

    @property
    def short_name(self) -> str:
        return self.name.capitalize()


DAYS_IN_ORDER: List[Weekday] = list(Weekday)
WORKDAYS: List[Weekday] = DAYS_IN_ORDER[:5]


def time_to_minutes(t: time) -> Minute:
    return t.hour * 60 + t.minute


def minutes_to_hhmm(m: int) -> str:
    h = (m // 60) % 24
    mm = m % 60
    return f"{h:02d}:{mm:02d}"


def hhmm_to_time(hhmm: str) -> time:
    hh, mm = hhmm.strip().split(":")
    return time(int(hh), int(mm))


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end


def _new_id() -> str:
    return str(uuid.uuid4())


def _time_of_day(value):
    # Older exports carry full timestamps; only the local time-of-day is meaningful.
    if isinstance(value, str) and "T" in value:
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(LOCAL_ZONE)
        return value.time()
    return value


class ScheduledClass(BaseModel):
    model_config = EXPORT_CONFIG

    id: str = Field(default_factory=_new_id)
    name: str
    room: Optional[str] = None
    teacher: Optional[str] = None
    notes: Optional[str] = None
    day_of_week: int = Field(ge=1, le=7)
    week_index: int = Field(default=1, ge=1, le=MAX_WEEKS)
    start_time: time
    end_time: time
    hex_color: str = Field(default="#3498db", pattern=HEX_COLOR_PATTERN)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value):
        return _time_of_day(value)

    @model_validator(mode="after")
    def _check_times(self) -> "ScheduledClass":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @property
    def weekday(self) -> Weekday:
        return Weekday(self.day_of_week)

    @property
    def start(self) -> Minute:
        return time_to_minutes(self.start_time)

    @property
    def end(self) -> Minute:
        return time_to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start


class StudyTask(BaseModel):
    model_config = EXPORT_CONFIG

    id: str = Field(default_factory=_new_id)
    title: str
    detail: Optional[str] = None
    due_date: datetime
    is_completed: bool = False
    grade: Optional[float] = None
    subject_name: str = ""
    linked_class_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("linked_class_id", "linkedClassId", "linkedClassID"),
    )
    hex_color: str = Field(default="#e74c3c", pattern=HEX_COLOR_PATTERN)

    @model_validator(mode="after")
    def _grade_needs_completion(self) -> "StudyTask":
        if self.grade is not None and not self.is_completed:
            raise ValueError("a grade can only be recorded on a completed task")
        return self

    def complete(self, grade: Optional[float] = None) -> "StudyTask":
        return self.model_copy(update={"is_completed": True, "grade": grade})


class AppSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    show_weekends: bool = True
    number_of_weeks: int = Field(default=1, ge=1, le=MAX_WEEKS)
    repeating_weeks_enabled: bool = False
    average_type: str = "arithmetic"
    grade_scale: str = "out_of_10"
    notifications_enabled: bool = False
