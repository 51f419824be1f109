"""The ten grade average strategies.

Every strategy takes a non-empty sequence of floats. ``compute_average``
returns None for an empty sequence regardless of strategy, so "no grades"
is never confused with a zero grade.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

EPSILON = 1e-10
TRIM_FRACTION = 0.1


class AverageType(str, Enum):
    arithmetic = "arithmetic"
    geometric = "geometric"
    harmonic = "harmonic"
    quadratic = "quadratic"
    median = "median"
    mode = "mode"
    trimmed = "trimmed"
    midrange = "midrange"
    cubic = "cubic"
    contraharmonic = "contraharmonic"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES: Dict[AverageType, str] = {
    AverageType.arithmetic: "Arithmetic Mean",
    AverageType.geometric: "Geometric Mean",
    AverageType.harmonic: "Harmonic Mean",
    AverageType.quadratic: "Quadratic Mean (RMS)",
    AverageType.median: "Median",
    AverageType.mode: "Mode",
    AverageType.trimmed: "Trimmed Mean (10%)",
    AverageType.midrange: "Midrange",
    AverageType.cubic: "Cubic Mean",
    AverageType.contraharmonic: "Contraharmonic Mean",
}

DEFAULT_AVERAGE_TYPE = AverageType.arithmetic


def _mean(values: Sequence[float]) -> float:
    return math.fsum(values) / len(values)


def _geometric(values: Sequence[float]) -> float:
    return math.exp(_mean([math.log(max(v, EPSILON)) for v in values]))


def _harmonic(values: Sequence[float]) -> float:
    return len(values) / math.fsum(1.0 / max(v, EPSILON) for v in values)


def _quadratic(values: Sequence[float]) -> float:
    return math.sqrt(_mean([v * v for v in values]))


def _median(values: Sequence[float]) -> float:
    s = sorted(values)
    mid = len(s) // 2
    if len(s) % 2 == 0:
        return (s[mid - 1] + s[mid]) / 2.0
    return s[mid]


def _round_half_up(v: float) -> float:
    return math.floor(v * 10 + 0.5) / 10


def _mode(values: Sequence[float]) -> float:
    counts = Counter(_round_half_up(v) for v in values)
    # max() keeps the first key with the top count; Counter keeps insertion order
    return max(counts, key=counts.__getitem__)


def _trimmed(values: Sequence[float]) -> float:
    s = sorted(values)
    trim = int(len(s) * TRIM_FRACTION)
    kept = s[trim : len(s) - trim] if len(s) > trim * 2 else s
    if not kept:
        return _mean(values)
    return _mean(kept)


def _midrange(values: Sequence[float]) -> float:
    return (min(values) + max(values)) / 2.0


def _cubic(values: Sequence[float]) -> float:
    m = _mean([v * v * v for v in values])
    return math.copysign(abs(m) ** (1.0 / 3.0), m)


def _contraharmonic(values: Sequence[float]) -> float:
    total = math.fsum(values)
    if total == 0:
        return 0.0
    return math.fsum(v * v for v in values) / total


STRATEGIES: Dict[AverageType, Callable[[Sequence[float]], float]] = {
    AverageType.arithmetic: _mean,
    AverageType.geometric: _geometric,
    AverageType.harmonic: _harmonic,
    AverageType.quadratic: _quadratic,
    AverageType.median: _median,
    AverageType.mode: _mode,
    AverageType.trimmed: _trimmed,
    AverageType.midrange: _midrange,
    AverageType.cubic: _cubic,
    AverageType.contraharmonic: _contraharmonic,
}


def compute_average(kind: AverageType, values: Iterable[float]) -> Optional[float]:
    data: List[float] = [float(v) for v in values]
    if not data:
        return None
    return STRATEGIES[kind](data)


def average_type_from_raw(raw: Optional[str]) -> AverageType:
    try:
        return AverageType(raw)
    except ValueError:
        logger.warning("unknown average type %r, using %s", raw, DEFAULT_AVERAGE_TYPE.value)
        return DEFAULT_AVERAGE_TYPE
