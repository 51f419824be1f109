from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from grades.averages import AverageType, compute_average
from grades.scales import GradeBand, GradeBands, GradeScale
from scheduler.models import StudyTask

NO_AVERAGE = "-"


class GradeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject_name: str
    value: float
    weight: float = Field(default=1.0, ge=0.0)
    label: Optional[str] = None
    recorded_at: Optional[datetime] = None


class SubjectGrades(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject_name: str
    hex_color: str
    grades: List[float]
    average: Optional[float]


class GradeSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject_name: str
    average: Optional[float]
    display: str
    performance: Optional[float]
    band: Optional[GradeBand]


def _group_grades(tasks: Iterable[StudyTask]) -> Dict[str, List[StudyTask]]:
    groups: Dict[str, List[StudyTask]] = {}
    for task in tasks:
        if task.grade is None:
            continue
        groups.setdefault(task.subject_name, []).append(task)
    return groups


def subject_averages(tasks: Iterable[StudyTask], average_type: AverageType) -> List[SubjectGrades]:
    """Average per subject over graded tasks, sorted by subject name."""
    out: List[SubjectGrades] = []
    for subject, graded in _group_grades(tasks).items():
        grades = [t.grade for t in graded]
        out.append(
            SubjectGrades(
                subject_name=subject,
                hex_color=graded[0].hex_color,
                grades=grades,
                average=compute_average(average_type, grades),
            )
        )
    out.sort(key=lambda s: s.subject_name)
    return out


def overall_average(subjects: Iterable[SubjectGrades], average_type: AverageType) -> Optional[float]:
    all_grades = [g for s in subjects for g in s.grades]
    return compute_average(average_type, all_grades)


def weighted_average(entries: Iterable[GradeEntry]) -> Optional[float]:
    entries = list(entries)
    total_weight = sum(e.weight for e in entries)
    if total_weight == 0:
        return None
    return sum(e.value * e.weight for e in entries) / total_weight


def weighted_subject_averages(entries: Iterable[GradeEntry]) -> Dict[str, Optional[float]]:
    groups: Dict[str, List[GradeEntry]] = {}
    for e in entries:
        groups.setdefault(e.subject_name, []).append(e)
    return {name: weighted_average(groups[name]) for name in sorted(groups)}


def summarize(
    subject_name: str,
    average: Optional[float],
    scale: GradeScale,
    bands: Optional[GradeBands] = None,
) -> GradeSummary:
    if average is None:
        return GradeSummary(subject_name=subject_name, average=None, display=NO_AVERAGE, performance=None, band=None)

    bands = bands or GradeBands()
    perf = scale.performance(average)
    return GradeSummary(
        subject_name=subject_name,
        average=average,
        display=scale.display_value(average),
        performance=perf,
        band=bands.band(perf),
    )
