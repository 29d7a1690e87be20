"""
Colour Ramp Tests
=================
"""

import numpy as np
import pytest

from pitchview.colormap import (
    UNKNOWN_ROLE_COLOR,
    color_ramp,
    color_ramp_array,
    entity_color,
    role_color,
)
from pitchview.config import ColorKey


class TestColorRamp:
    """Heat ramp endpoints, range, and continuity."""

    def test_endpoints(self):
        """Ramp starts blue and ends red."""
        assert color_ramp(0.0) == (0, 0, 255)
        assert color_ramp(1.0) == (255, 0, 0)

    def test_segment_stops(self):
        """Stops land on cyan, green, yellow."""
        assert color_ramp(0.2) == (0, 255, 255)
        assert color_ramp(0.4) == (0, 255, 0)
        assert color_ramp(0.6) == (255, 255, 0)

    def test_channels_stay_in_range(self):
        """Every sampled intensity yields integer channels in [0, 255]."""
        for i in range(101):
            rgb = color_ramp(i / 100)
            assert len(rgb) == 3
            for channel in rgb:
                assert isinstance(channel, int)
                assert 0 <= channel <= 255

    @pytest.mark.parametrize("boundary", [0.2, 0.4, 0.6, 0.8])
    def test_continuous_at_boundaries(self, boundary):
        """Colours just below and at a segment boundary differ by at most one step."""
        below = color_ramp(boundary - 1e-9)
        at = color_ramp(boundary)
        assert all(abs(a - b) <= 1 for a, b in zip(below, at))

    def test_out_of_range_and_nan_are_clamped(self):
        """Values outside [0, 1] and NaN map to the ramp ends."""
        assert color_ramp(-0.5) == (0, 0, 255)
        assert color_ramp(3.0) == (255, 0, 0)
        assert color_ramp(float("nan")) == (0, 0, 255)

    def test_array_matches_scalar(self):
        """Vectorised ramp agrees with the scalar one within rounding."""
        values = np.linspace(0.0, 1.0, 51)
        rgb = color_ramp_array(values)
        assert rgb.shape == (51, 3)
        assert rgb.dtype == np.uint8
        for value, row in zip(values, rgb):
            expected = color_ramp(float(value))
            assert all(abs(int(a) - b) <= 1 for a, b in zip(row, expected))


class TestEntityColors:
    """Per-entity hues and role palette."""

    def test_render_order_hue(self):
        """Index 0 is red-ish, index 6 wraps back to the same hue."""
        first = entity_color(0)
        assert first[0] > first[1] and first[0] > first[2]
        assert entity_color(6) == first
        assert entity_color(1) != first

    def test_entity_id_key_is_stable(self):
        """Hash-keyed colours ignore the render index."""
        a = entity_color(0, "p9", ColorKey.ENTITY_ID)
        b = entity_color(5, "p9", ColorKey.ENTITY_ID)
        assert a == b

    def test_role_palette(self):
        """Known roles get their group colour; unknown roles are grey."""
        assert role_color("gk") == role_color("GK")
        assert role_color("CB") == role_color("LB")
        assert role_color("ST") != role_color("CB")
        assert role_color("Sweeper") == UNKNOWN_ROLE_COLOR
