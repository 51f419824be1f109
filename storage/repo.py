from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from scheduler.models import AppSettings, ScheduledClass, StudyTask

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path("timetable.json")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimetableExport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    export_date: datetime = Field(default_factory=_utcnow)
    classes: List[ScheduledClass] = Field(default_factory=list)
    tasks: List[StudyTask] = Field(default_factory=list)
    settings: AppSettings = Field(default_factory=AppSettings)


def build_export(
    classes: Iterable[ScheduledClass],
    tasks: Iterable[StudyTask],
    settings: Optional[AppSettings] = None,
    now: Optional[datetime] = None,
) -> TimetableExport:
    return TimetableExport(
        export_date=now or _utcnow(),
        classes=list(classes),
        tasks=list(tasks),
        settings=settings or AppSettings(),
    )


def export_filename(now: Optional[datetime] = None) -> str:
    stamp = int((now or _utcnow()).timestamp())
    return f"timetable_export_{stamp}.json"


def save_data(data: TimetableExport, path: Path = DEFAULT_PATH) -> None:
    path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
    logger.info("saved %d classes and %d tasks to %s", len(data.classes), len(data.tasks), path)


def load_data(path: Path = DEFAULT_PATH) -> Optional[TimetableExport]:
    if not path.exists():
        logger.info("no timetable data at %s", path)
        return None
    return TimetableExport.model_validate_json(path.read_text(encoding="utf-8"))


def with_fresh_ids(data: TimetableExport) -> TimetableExport:
    """Copy of ``data`` with new identities, task links pointing at the new class ids.

    Links to classes that are not part of the bundle are dropped.
    """
    id_map: Dict[str, str] = {}
    classes: List[ScheduledClass] = []
    for cls in data.classes:
        new_id = str(uuid.uuid4())
        id_map[cls.id] = new_id
        classes.append(cls.model_copy(update={"id": new_id}))

    tasks: List[StudyTask] = []
    for task in data.tasks:
        link = id_map.get(task.linked_class_id) if task.linked_class_id else None
        if task.linked_class_id and link is None:
            logger.warning("task %s links to unknown class %s", task.id, task.linked_class_id)
        tasks.append(task.model_copy(update={"id": str(uuid.uuid4()), "linked_class_id": link}))

    return TimetableExport(export_date=data.export_date, classes=classes, tasks=tasks, settings=data.settings)
