"""
Summary statistics and basic movement metrics in field-percent units.

Coverage is measured on a fixed reference grid (20x20 by default) rather than
on the render surface's pixel grid, so the number does not change when the
surface is resized.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Set, Tuple

from .data_structures import EntitySummary, HeatmapStats, PositionSample, TrackedEntity
from .utils.geometry import euclidean_distance

DEFAULT_REFERENCE_GRID: Tuple[int, int] = (20, 20)


def reference_cell(sample: PositionSample, reference_grid: Tuple[int, int]) -> Tuple[int, int] | None:
    """
    ``(col, row)`` of a sample on the reference grid, or None when off the grid.

    A coordinate of exactly 100 falls one past the last cell and is dropped,
    matching the heat grid.
    """
    if not sample.in_bounds:
        return None
    cols, rows = reference_grid
    col = int(math.floor(sample.x / 100.0 * cols))
    row = int(math.floor(sample.y / 100.0 * rows))
    if col >= cols or row >= rows:
        return None
    return col, row


def coverage_percent(
    samples: Sequence[PositionSample],
    reference_grid: Tuple[int, int] = DEFAULT_REFERENCE_GRID,
) -> float:
    """
    Percentage of reference-grid cells touched by at least one sample.
    """
    cols, rows = reference_grid
    if cols < 1 or rows < 1:
        raise ValueError("reference_grid dimensions must be >= 1")
    occupied: Set[Tuple[int, int]] = set()
    for sample in samples:
        cell = reference_cell(sample, reference_grid)
        if cell is not None:
            occupied.add(cell)
    return len(occupied) / float(cols * rows) * 100.0


def compute_statistics(
    all_samples: Sequence[PositionSample],
    window_samples: Sequence[PositionSample],
    reference_grid: Tuple[int, int] = DEFAULT_REFERENCE_GRID,
) -> HeatmapStats:
    """
    Compute the statistics record returned by every render.

    Args:
        all_samples: Every sample of the entities in scope.
        window_samples: The subset inside the heat-zone time window.
        reference_grid: (columns, rows) of the coverage grid.
    """
    if not all_samples:
        return HeatmapStats(window_samples=len(window_samples))
    intensities = [float(s.intensity or 0.0) for s in all_samples]
    return HeatmapStats(
        total_samples=len(all_samples),
        window_samples=len(window_samples),
        average_intensity=sum(intensities) / len(intensities),
        max_intensity=max(intensities),
        coverage_percent=coverage_percent(all_samples, reference_grid),
    )


def path_length(samples: Sequence[PositionSample]) -> float:
    """
    Total polyline length of time-ordered samples, in field-percent units.

    Segments touching an out-of-field or non-finite sample are skipped.
    """
    ordered = sorted(samples, key=lambda s: s.t)
    if len(ordered) < 2:
        return 0.0
    total = 0.0
    for p0, p1 in zip(ordered[:-1], ordered[1:]):
        if not (p0.in_bounds and p1.in_bounds):
            continue
        total += euclidean_distance(p0.point, p1.point)
    return total


def summarize_entity(entity: TrackedEntity) -> EntitySummary:
    """
    Per-entity movement summary.
    """
    samples = entity.samples
    times: List[float] = [s.t for s in samples]
    avg = sum(float(s.intensity or 0.0) for s in samples) / len(samples) if samples else 0.0
    return EntitySummary(
        entity_id=entity.entity_id,
        sample_count=len(samples),
        path_length=path_length(samples),
        average_intensity=avg,
        first_seen=min(times) if times else None,
        last_seen=max(times) if times else None,
    )
