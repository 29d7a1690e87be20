"""
Heat-intensity grids for visualizing where entities spend their time.

Samples are binned into a 2-D grid whose size follows the render surface
(``ceil(surface_px / cell_size)`` per axis) and is recomputed on every draw.
Each in-bounds sample adds its ``intensity`` to one cell; out-of-range or
non-finite samples are dropped. The reduction is associative, so partial grids
built from disjoint sample partitions can simply be added together.

TODO: Support kernel density estimation for smoother heat zones, as an option
next to the plain cell accumulation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .colormap import color_ramp_array
from .data_structures import GridCell, PositionSample

logger = logging.getLogger(__name__)

HeatArray = np.ndarray[Any, np.dtype[np.float64]]
HeatmapImage = np.ndarray[Any, np.dtype[np.uint8]]

DEFAULT_CELL_SIZE = 15


@dataclass
class HeatGrid:
    """
    Accumulated heat for one draw.

    Attributes:
        grid: Array of shape ``(grid_height, grid_width)``.
        max_value: Largest accumulated cell value (0 when nothing landed).
        cell_size: Cell size in surface pixels used to lay the grid out.
    """

    grid: HeatArray
    max_value: float
    cell_size: int = DEFAULT_CELL_SIZE

    @property
    def shape(self) -> Tuple[int, int]:
        rows, cols = self.grid.shape
        return int(rows), int(cols)

    def total(self) -> float:
        return float(self.grid.sum())

    def normalized(self) -> HeatArray:
        """
        Grid divided by ``max_value``; all zeros when there is nothing to draw.
        """
        if self.max_value == 0:
            return np.zeros_like(self.grid)
        return self.grid / self.max_value

    def cells(self, threshold: float = 0.1) -> List[GridCell]:
        """
        Cells whose normalized value is strictly above ``threshold``, row-major.
        """
        if self.max_value == 0:
            return []
        norm = self.normalized()
        rows, cols = np.nonzero(norm > threshold)
        return [
            GridCell(row=int(r), col=int(c), accumulated=float(self.grid[r, c]))
            for r, c in zip(rows, cols)
        ]


def grid_dimensions(width_px: float, height_px: float, cell_size: int = DEFAULT_CELL_SIZE) -> Tuple[int, int]:
    """
    Compute ``(grid_width, grid_height)`` for a surface of the given pixel size.
    """
    if cell_size < 1:
        raise ValueError("cell_size must be >= 1")
    grid_w = max(1, int(math.ceil(width_px / cell_size)))
    grid_h = max(1, int(math.ceil(height_px / cell_size)))
    return grid_w, grid_h


def cell_index(x: float, y: float, grid_width: int, grid_height: int) -> Optional[Tuple[int, int]]:
    """
    Map a field-percent coordinate to ``(row, col)``, or None when it falls off
    the grid. A coordinate exactly on the far edge (100) indexes one past the
    last cell and is dropped, never clamped into a neighbouring cell.
    """
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    col = int(math.floor(x / 100.0 * grid_width))
    row = int(math.floor(y / 100.0 * grid_height))
    if not (0 <= col < grid_width and 0 <= row < grid_height):
        return None
    return row, col


def _accumulate(
    target: HeatArray,
    samples: Iterable[PositionSample],
) -> int:
    grid_height, grid_width = target.shape
    rows: List[int] = []
    cols: List[int] = []
    weights: List[float] = []
    for sample in samples:
        idx = cell_index(sample.x, sample.y, grid_width, grid_height)
        if idx is None:
            continue
        rows.append(idx[0])
        cols.append(idx[1])
        weights.append(float(sample.intensity or 0.0))
    if rows:
        np.add.at(target, (np.asarray(rows), np.asarray(cols)), np.asarray(weights, dtype=np.float64))
    return len(rows)


def aggregate(
    samples: Iterable[PositionSample],
    grid_width: int,
    grid_height: int,
    cell_size: int = DEFAULT_CELL_SIZE,
    out: Optional[HeatArray] = None,
) -> HeatGrid:
    """
    Bin samples into a heat grid.

    Args:
        samples: Position samples; out-of-range ones are dropped silently.
        grid_width: Number of columns.
        grid_height: Number of rows.
        cell_size: Cell size in surface pixels (carried along for rendering).
        out: Optional scratch array of the right shape; zeroed and reused.

    Returns:
        A :class:`HeatGrid` holding the grid and its maximum value.
    """
    if out is not None and out.shape == (grid_height, grid_width):
        grid = out
        grid.fill(0.0)
    else:
        grid = np.zeros((grid_height, grid_width), dtype=np.float64)
    landed = _accumulate(grid, samples)
    max_value = float(grid.max()) if landed else 0.0
    logger.debug("Aggregated %d samples into %dx%d grid (max=%.3f)", landed, grid_width, grid_height, max_value)
    return HeatGrid(grid=grid, max_value=max_value, cell_size=cell_size)


def merge_grids(partials: Sequence[HeatGrid]) -> HeatGrid:
    """
    Sum partial grids of identical shape into a single grid.
    """
    if not partials:
        raise ValueError("merge_grids requires at least one partial grid")
    shape = partials[0].grid.shape
    total = np.zeros(shape, dtype=np.float64)
    for part in partials:
        if part.grid.shape != shape:
            raise ValueError("All partial grids must share the same shape")
        total += part.grid
    max_value = float(total.max()) if total.size else 0.0
    return HeatGrid(grid=total, max_value=max_value, cell_size=partials[0].cell_size)


def aggregate_partitioned(
    samples: Sequence[PositionSample],
    grid_width: int,
    grid_height: int,
    partitions: int = 4,
    cell_size: int = DEFAULT_CELL_SIZE,
) -> HeatGrid:
    """
    Aggregate by splitting samples into contiguous partitions and merging.

    Produces the same grid as :func:`aggregate` up to floating point summation
    order; useful when partitions are built by independent workers.
    """
    partitions = max(1, partitions)
    chunk = max(1, math.ceil(len(samples) / partitions))
    parts = [
        aggregate(samples[i:i + chunk], grid_width, grid_height, cell_size)
        for i in range(0, len(samples), chunk)
    ]
    if not parts:
        return aggregate([], grid_width, grid_height, cell_size)
    return merge_grids(parts)


class HeatmapBuffer:
    """
    Reusable scratch grid for one caller.

    The buffer is reallocated when the surface size changes and zeroed before
    each use. Do not share a buffer between draws that may run concurrently.
    """

    def __init__(self) -> None:
        self._grid: Optional[HeatArray] = None

    def aggregate(
        self,
        samples: Iterable[PositionSample],
        grid_width: int,
        grid_height: int,
        cell_size: int = DEFAULT_CELL_SIZE,
    ) -> HeatGrid:
        if self._grid is None or self._grid.shape != (grid_height, grid_width):
            self._grid = np.zeros((grid_height, grid_width), dtype=np.float64)
        return aggregate(samples, grid_width, grid_height, cell_size, out=self._grid)


def render_heat_image(
    heat: HeatGrid,
    width_px: int,
    height_px: int,
    threshold: float = 0.0,
) -> HeatmapImage:
    """
    Rasterize a heat grid into a BGR image of the requested size.

    Cells at or below ``threshold`` are left black. Nearest-neighbour scaling
    keeps cell edges crisp.
    """
    norm = heat.normalized()
    rgb = color_ramp_array(norm)
    rgb[norm <= threshold] = 0
    bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    image: HeatmapImage = cv2.resize(bgr, (width_px, height_px), interpolation=cv2.INTER_NEAREST)  # type: ignore[assignment]
    return image
