from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


class LetterGrade(BaseModel):
    """A letter label, the value stored when it is picked, and the lowest value it covers."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: float
    threshold: float


LETTER_GRADES: Tuple[LetterGrade, ...] = (
    LetterGrade(label="A+", value=4.3, threshold=4.15),
    LetterGrade(label="A", value=4.0, threshold=3.85),
    LetterGrade(label="A−", value=3.7, threshold=3.5),
    LetterGrade(label="B+", value=3.3, threshold=3.15),
    LetterGrade(label="B", value=3.0, threshold=2.85),
    LetterGrade(label="B−", value=2.7, threshold=2.5),
    LetterGrade(label="C+", value=2.3, threshold=2.15),
    LetterGrade(label="C", value=2.0, threshold=1.85),
    LetterGrade(label="C−", value=1.7, threshold=1.5),
    LetterGrade(label="D", value=1.0, threshold=0.85),
    LetterGrade(label="F", value=0.0, threshold=0.0),
)


class GradeScale(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    min: float
    max: float
    inverted: bool = False
    letter: bool = False
    letter_grades: Tuple[LetterGrade, ...] = ()

    @model_validator(mode="after")
    def _check_bounds(self) -> "GradeScale":
        if self.max <= self.min:
            raise ValueError(f"grade scale {self.id!r} needs max > min")
        if self.letter and not self.letter_grades:
            raise ValueError(f"letter scale {self.id!r} needs a letter table")
        return self

    def performance(self, value: float) -> float:
        """Normalised 0.0-1.0 score, 1.0 being the best grade on this scale."""
        ratio = (value - self.min) / (self.max - self.min)
        if self.inverted:
            ratio = 1.0 - ratio
        return max(0.0, min(1.0, ratio))

    def display_value(self, value: float) -> str:
        if self.letter:
            return self.letter_label(value)
        if value == math.floor(value):
            return str(int(value))
        return f"{value:.1f}"

    def letter_label(self, value: float) -> str:
        grades = sorted(self.letter_grades, key=lambda g: g.threshold, reverse=True)
        for g in grades:
            if value >= g.threshold:
                return g.label
        return grades[-1].label

    @property
    def letter_options(self) -> Optional[List[Tuple[str, float]]]:
        if not self.letter:
            return None
        return [(g.label, g.value) for g in self.letter_grades]


OUT_OF_10 = GradeScale(id="out_of_10", display_name="Numeric (0 - 10)", min=0.0, max=10.0)
ONE_TO_10 = GradeScale(id="1_to_10", display_name="Italian (1 - 10)", min=1.0, max=10.0)
ONE_TO_6 = GradeScale(id="1_to_6", display_name="Numeric (1 - 6)", min=1.0, max=6.0)
GERMAN = GradeScale(id="german", display_name="German (1 - 6, best = 1)", min=1.0, max=6.0, inverted=True)
PERCENTAGE = GradeScale(id="percentage", display_name="Percentage (0 - 100 %)", min=0.0, max=100.0)
OUT_OF_20 = GradeScale(id="out_of_20", display_name="French (0 - 20)", min=0.0, max=20.0)
OUT_OF_30 = GradeScale(id="out_of_30", display_name="University (0 - 30)", min=0.0, max=30.0)
GPA = GradeScale(id="gpa", display_name="GPA (0.0 - 4.0)", min=0.0, max=4.0)
LETTER = GradeScale(
    id="letter",
    display_name="Letter (A - F)",
    min=0.0,
    max=4.3,
    letter=True,
    letter_grades=LETTER_GRADES,
)

ALL_SCALES: List[GradeScale] = [OUT_OF_10, ONE_TO_10, ONE_TO_6, GERMAN, PERCENTAGE, OUT_OF_20, OUT_OF_30, GPA, LETTER]
SCALES: Dict[str, GradeScale] = {s.id: s for s in ALL_SCALES}
DEFAULT_SCALE = OUT_OF_10


def scale_from_id(scale_id: Optional[str], scales: Optional[Dict[str, GradeScale]] = None) -> GradeScale:
    registry = SCALES if scales is None else scales
    scale = registry.get(scale_id or "")
    if scale is None:
        logger.warning("unknown grade scale %r, using %s", scale_id, DEFAULT_SCALE.id)
        return DEFAULT_SCALE
    return scale


class GradeBand(str, Enum):
    good = "good"
    warning = "warning"
    poor = "poor"


class GradeBands(BaseModel):
    model_config = ConfigDict(frozen=True)

    good: float = Field(default=0.7, ge=0.0, le=1.0)
    warning: float = Field(default=0.6, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_order(self) -> "GradeBands":
        if self.warning > self.good:
            raise ValueError("warning threshold must not exceed good threshold")
        return self

    def band(self, performance: float) -> GradeBand:
        if performance >= self.good:
            return GradeBand.good
        if performance >= self.warning:
            return GradeBand.warning
        return GradeBand.poor
