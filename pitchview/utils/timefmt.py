"""
Playback time formatting.
"""

from __future__ import annotations

import math


def format_timestamp(seconds: float) -> str:
    """
    Format seconds as ``m:ss`` (minutes are not wrapped into hours).
    """
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    minutes = int(seconds // 60)
    remaining = int(seconds % 60)
    return f"{minutes}:{remaining:02d}"
