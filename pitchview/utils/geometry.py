"""
Geometry helper functions for coordinate transforms and distances.

This module contains reusable geometric operations that are shared
between the heat grid, trails, formation layouts, and the renderer.
Field coordinates are percentages (0-100); surface coordinates are pixels.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..data_structures import FieldPoint


def euclidean_distance(a: FieldPoint, b: FieldPoint) -> float:
    """
    Compute Euclidean distance between two 2D points.
    """
    ax, ay = a
    bx, by = b
    return float(np.hypot(ax - bx, ay - by))


def field_to_pixels(x: float, y: float, width: float, height: float) -> Tuple[float, float]:
    """
    Map a field-percent coordinate to surface pixels.
    """
    return x / 100.0 * width, y / 100.0 * height


def pixels_to_field(px: float, py: float, width: float, height: float) -> FieldPoint:
    """
    Map a surface pixel coordinate back to field percentages.
    """
    if width <= 0 or height <= 0:
        raise ValueError("Surface width and height must be positive.")
    return px / width * 100.0, py / height * 100.0


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
