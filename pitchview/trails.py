"""
Motion trails: the most recent samples of one entity as an ordered polyline.
"""

from __future__ import annotations

from typing import List, Tuple

from .data_structures import PositionSample, TrackedEntity
from .temporal import WindowMode, filter_window
from .utils.geometry import field_to_pixels

PixelPoint = Tuple[float, float]


def build_trail(
    entity: TrackedEntity,
    current_time: float,
    window_seconds: float,
    trail_length: int,
) -> List[PositionSample]:
    """
    Build the trail of ``entity`` at ``current_time``.

    Only samples in the trailing window ``[t - w, t]`` are considered, so the
    trail never shows future positions. The result is sorted ascending by time
    and keeps the ``trail_length`` most recent samples.
    """
    if trail_length < 1:
        return []
    recent = filter_window(
        entity.samples,
        current_time,
        window_seconds,
        WindowMode.TRAILING,
        sort=True,
    )
    return recent[-trail_length:]


def trail_to_pixels(trail: List[PositionSample], width: float, height: float) -> List[PixelPoint]:
    """
    Convert trail samples to surface pixel coordinates.
    """
    return [field_to_pixels(s.x, s.y, width, height) for s in trail]
