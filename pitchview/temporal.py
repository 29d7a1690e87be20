"""
Time-window selection of position samples.

Two explicit modes cover the two ways the product looks at "recent" data:

- ``SYMMETRIC``: ``[t - w, t + w]``. Used for heat zones, which summarise
  activity around the playback position.
- ``TRAILING``: ``[t - w, t]``. Used for trails, which must never show where
  an entity is going to be.

Both bounds are inclusive. The filter keeps input order unless sorting is
requested explicitly.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List

from .data_structures import PositionSample


class WindowMode(str, Enum):
    SYMMETRIC = "symmetric"
    TRAILING = "trailing"


def window_bounds(
    current_time: float,
    window_seconds: float,
    mode: WindowMode = WindowMode.SYMMETRIC,
) -> tuple[float, float]:
    """
    Return the inclusive ``(start, end)`` time range for a window.
    """
    start = current_time - window_seconds
    end = current_time if mode is WindowMode.TRAILING else current_time + window_seconds
    return start, end


def filter_window(
    samples: Iterable[PositionSample],
    current_time: float,
    window_seconds: float,
    mode: WindowMode = WindowMode.SYMMETRIC,
    sort: bool = False,
) -> List[PositionSample]:
    """
    Select the samples whose timestamp falls inside the window.

    Args:
        samples: Samples in any order.
        current_time: Playback time in seconds.
        window_seconds: Half-width (symmetric) or length (trailing) of the window.
        mode: Which window shape to apply.
        sort: Return the result sorted ascending by time (stable).

    Returns:
        Matching samples, in input order unless ``sort`` is set.
    """
    start, end = window_bounds(current_time, window_seconds, WindowMode(mode))
    selected = [s for s in samples if start <= s.t <= end]
    if sort:
        selected.sort(key=lambda s: s.t)
    return selected
