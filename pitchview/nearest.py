"""
Nearest-sample lookups by field position or by time.

Both lookups are linear scans; sample volumes per entity are in the hundreds
to low thousands, so no spatial index is needed. Ties go to the sample that
appears first in the input. The engine never invents a sample: on empty input
the caller-supplied ``fallback`` is returned, and calling without one is a
precondition violation.
"""

from __future__ import annotations

from math import hypot
from typing import Callable, Optional, Sequence

from .data_structures import PositionSample


def _argmin(
    samples: Sequence[PositionSample],
    distance: Callable[[PositionSample], float],
    fallback: Optional[PositionSample],
    lookup: str,
) -> PositionSample:
    if not samples:
        if fallback is None:
            raise ValueError(f"{lookup} requires at least one sample or a fallback sample")
        return fallback
    best = samples[0]
    best_dist = distance(best)
    for sample in samples[1:]:
        dist = distance(sample)
        if dist < best_dist:
            best = sample
            best_dist = dist
    return best


def nearest_by_position(
    samples: Sequence[PositionSample],
    query_x: float,
    query_y: float,
    fallback: Optional[PositionSample] = None,
) -> PositionSample:
    """
    Return the sample closest (Euclidean, field-percent units) to a point.
    """
    return _argmin(
        samples,
        lambda s: hypot(s.x - query_x, s.y - query_y),
        fallback,
        "nearest_by_position",
    )


def nearest_by_time(
    samples: Sequence[PositionSample],
    query_time: float,
    fallback: Optional[PositionSample] = None,
) -> PositionSample:
    """
    Return the sample whose timestamp is closest to ``query_time``.
    """
    return _argmin(
        samples,
        lambda s: abs(s.t - query_time),
        fallback,
        "nearest_by_time",
    )
