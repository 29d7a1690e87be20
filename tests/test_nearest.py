"""
Nearest-Sample Lookup Tests
===========================
"""

import pytest

from pitchview.data_structures import PositionSample
from pitchview.nearest import nearest_by_position, nearest_by_time


class TestNearestByPosition:
    def test_two_sample_lookup(self, sample_factory):
        """Query (12, 11) between (10, 10, t=0) and (80, 80, t=5) picks the first."""
        samples = sample_factory([(10, 10, 0.0), (80, 80, 5.0)])
        nearest = nearest_by_position(samples, 12, 11)
        assert nearest is samples[0]
        assert (nearest.x, nearest.y, nearest.t) == (10, 10, 0.0)

    def test_closest_point(self, sample_factory):
        samples = sample_factory([(10, 10, 1.0), (50, 50, 2.0), (90, 90, 3.0)])
        assert nearest_by_position(samples, 12, 11) is samples[0]

    def test_first_occurrence_wins_ties(self, sample_factory):
        samples = sample_factory([(40, 50, 1.0), (60, 50, 2.0)])
        assert nearest_by_position(samples, 50, 50) is samples[0]

    def test_empty_returns_fallback(self):
        fallback = PositionSample(x=0, y=0, t=0)
        assert nearest_by_position([], 50, 50, fallback=fallback) is fallback

    def test_empty_without_fallback_raises(self):
        with pytest.raises(ValueError):
            nearest_by_position([], 50, 50)


class TestNearestByTime:
    def test_closest_time(self, striker):
        assert nearest_by_time(striker.samples, 26.0).t == 25.0

    def test_tie_keeps_input_order(self, sample_factory):
        samples = sample_factory([(0, 0, 12.0), (0, 0, 8.0)])
        assert nearest_by_time(samples, 10.0) is samples[0]

    def test_empty(self):
        fallback = PositionSample(x=1, y=1, t=1)
        assert nearest_by_time([], 5.0, fallback=fallback) is fallback
        with pytest.raises(ValueError):
            nearest_by_time([], 5.0)
