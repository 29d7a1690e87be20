"""
Heat Grid Tests
===============
"""

import math

import numpy as np
import pytest

from pitchview.data_structures import PositionSample
from pitchview.heatmap import (
    HeatmapBuffer,
    aggregate,
    aggregate_partitioned,
    cell_index,
    grid_dimensions,
    merge_grids,
    render_heat_image,
)


class TestGridDimensions:
    """Grid size follows the surface size and cell size."""

    def test_ceil_per_axis(self):
        assert grid_dimensions(800, 520, 15) == (54, 35)
        assert grid_dimensions(600, 400, 15) == (40, 27)

    def test_minimum_one_cell(self):
        assert grid_dimensions(1, 1, 15) == (1, 1)

    def test_rejects_bad_cell_size(self):
        with pytest.raises(ValueError):
            grid_dimensions(800, 520, 0)


class TestCellIndex:
    """Coordinate to cell mapping."""

    def test_origin(self):
        assert cell_index(0.0, 0.0, 10, 10) == (0, 0)

    def test_far_edge_is_dropped(self):
        """x = 100 or y = 100 index one past the grid and are not clamped back."""
        assert cell_index(100.0, 50.0, 10, 8) is None
        assert cell_index(50.0, 100.0, 10, 8) is None
        assert cell_index(99.99, 99.99, 10, 8) == (7, 9)

    def test_out_of_range_and_non_finite(self):
        assert cell_index(-0.1, 50.0, 10, 10) is None
        assert cell_index(50.0, 100.1, 10, 10) is None
        assert cell_index(float("nan"), 50.0, 10, 10) is None
        assert cell_index(50.0, float("inf"), 10, 10) is None


class TestAggregate:
    """Accumulation into the grid."""

    def test_conserves_intensity_of_in_bounds_samples(self, sample_factory):
        """Grid total equals the intensity sum of in-range samples."""
        samples = sample_factory(
            [(10, 10, 0, 0.5), (10.5, 10.5, 1, 0.25), (90, 40, 2, 1.0), (33, 66, 3, 0.75)]
        )
        heat = aggregate(samples, 20, 20)
        assert heat.total() == pytest.approx(2.5)

    def test_drops_out_of_range_samples(self, sample_factory):
        samples = sample_factory([(50, 50, 0, 1.0), (120, 50, 1, 1.0), (-5, 20, 2, 1.0)])
        samples.append(PositionSample(x=float("nan"), y=10, t=3, confidence=1.0))
        heat = aggregate(samples, 10, 10)
        assert heat.total() == pytest.approx(1.0)
        assert heat.grid[5, 5] == pytest.approx(1.0)

    def test_far_edge_sample_is_dropped(self, sample_factory):
        """A sample at x = 100 adds nothing to the grid."""
        heat = aggregate(sample_factory([(100, 50, 0, 1.0), (50, 100, 1, 1.0)]), 10, 10)
        assert heat.total() == 0.0
        assert heat.max_value == 0.0
        assert heat.cells() == []

    def test_same_cell_accumulates(self, sample_factory):
        heat = aggregate(sample_factory([(1, 1, 0, 0.4), (2, 2, 1, 0.4), (3, 3, 2, 0.4)]), 10, 10)
        assert heat.grid[0, 0] == pytest.approx(1.2)
        assert heat.max_value == pytest.approx(1.2)

    def test_idempotent(self, timeline_samples):
        """Aggregating the same input twice yields identical grids."""
        first = aggregate(timeline_samples, 40, 27)
        second = aggregate(timeline_samples, 40, 27)
        assert np.array_equal(first.grid, second.grid)
        assert first.max_value == second.max_value

    def test_empty_input(self):
        """Nothing to draw: zero max and no cells above threshold."""
        heat = aggregate([], 10, 10)
        assert heat.max_value == 0.0
        assert heat.cells() == []
        assert not heat.normalized().any()

    def test_cells_strictly_above_threshold(self, sample_factory):
        samples = sample_factory([(5, 5, 0, 1.0), (55, 55, 1, 0.1), (95, 95, 2, 0.5)])
        heat = aggregate(samples, 10, 10)
        cells = heat.cells(threshold=0.1)
        assert [(c.row, c.col) for c in cells] == [(0, 0), (9, 9)]
        assert all(c.accumulated / heat.max_value > 0.1 for c in cells)

    def test_out_array_is_reused(self, timeline_samples):
        scratch = np.full((27, 40), 7.0)
        heat = aggregate(timeline_samples, 40, 27, out=scratch)
        assert heat.grid is scratch
        assert heat.total() == pytest.approx(sum(s.intensity for s in timeline_samples))


class TestPartitionedAggregation:
    """Partial grids merge to the full result."""

    def test_partitioned_matches_single_pass(self, timeline_samples):
        full = aggregate(timeline_samples, 40, 27)
        merged = aggregate_partitioned(timeline_samples, 40, 27, partitions=4)
        assert np.allclose(full.grid, merged.grid)
        assert merged.max_value == pytest.approx(full.max_value)

    def test_partitioned_empty(self):
        heat = aggregate_partitioned([], 5, 5)
        assert heat.max_value == 0.0

    def test_merge_rejects_empty_and_mismatched(self, timeline_samples):
        with pytest.raises(ValueError):
            merge_grids([])
        with pytest.raises(ValueError):
            merge_grids([aggregate(timeline_samples, 10, 10), aggregate(timeline_samples, 5, 5)])


class TestHeatmapBuffer:
    """Scratch grid reuse across draws."""

    def test_reuses_until_shape_changes(self, timeline_samples):
        buffer = HeatmapBuffer()
        first = buffer.aggregate(timeline_samples, 20, 20)
        second = buffer.aggregate(timeline_samples[:5], 20, 20)
        assert second.grid is first.grid
        assert second.total() == pytest.approx(sum(s.intensity for s in timeline_samples[:5]))
        third = buffer.aggregate(timeline_samples, 30, 10)
        assert third.shape == (10, 30)


class TestRenderHeatImage:
    """Rasterization of a grid into an image."""

    def test_shape_and_dtype(self, timeline_samples):
        heat = aggregate(timeline_samples, 40, 27)
        image = render_heat_image(heat, 600, 400)
        assert image.shape == (400, 600, 3)
        assert image.dtype == np.uint8

    def test_hottest_cell_is_red_in_bgr(self, sample_factory):
        heat = aggregate(sample_factory([(5, 5, 0, 1.0)]), 10, 10)
        image = render_heat_image(heat, 100, 100, threshold=0.1)
        assert tuple(int(c) for c in image[5, 5]) == (0, 0, 255)
        assert not image[95, 95].any()
        assert math.isclose(heat.max_value, 1.0)
