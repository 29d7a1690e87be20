"""
Renderer Tests
==============

Draw behaviour checked against a RecordingSurface.
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from pitchview.config import ColorKey, EngineConfig, RenderConfig, RenderMode
from pitchview.data_structures import PositionSample, TrackedEntity
from pitchview.surface import RecordingSurface
from pitchview.visualization import HeatmapRenderer, draw_field


def filled_circles(surface):
    return [c for c in surface.ops("draw_circle") if c.args[3]]


def marker_colors(surface):
    """Map marker pixel position to its fill colour."""
    return {(c.args[0], c.args[1]): c.fill[:3] for c in filled_circles(surface)}


class TestEngineSettings:
    """Engine constants are not shared mutable state between renderers."""

    def test_default_engine_cannot_be_mutated(self):
        renderer = HeatmapRenderer()
        with pytest.raises(FrozenInstanceError):
            renderer.engine.heat_threshold = 0.5
        assert HeatmapRenderer().engine.heat_threshold == 0.1

    def test_variant_does_not_leak_into_other_renderers(self):
        tuned = HeatmapRenderer(replace(EngineConfig(), heat_threshold=0.5, cell_size=10))
        assert tuned.engine.heat_threshold == 0.5
        fresh = HeatmapRenderer()
        assert fresh.engine.heat_threshold == 0.1
        assert fresh.engine.cell_size == 15


class TestDrawField:
    def test_scaled_to_surface(self):
        surface = RecordingSurface(width=600, height=400)
        draw_field(surface)
        background = surface.ops("fill_rect")[0]
        assert background.args == (0, 0, 600.0, 400.0)
        arc = surface.ops("draw_arc")[0]
        assert arc.args[:3] == (300.0, 200.0, pytest.approx(48.0))
        # Border, two penalty boxes, two goals.
        assert len(surface.ops("stroke_rect")) == 5


class TestRender:
    """Full draws."""

    def test_starts_with_clear(self, squad, render_config, surface):
        HeatmapRenderer().render(squad, 30.0, render_config, surface)
        assert surface.commands[0].op == "clear"

    def test_empty_entities(self, render_config, surface):
        stats = HeatmapRenderer().render([], 30.0, render_config, surface)
        assert filled_circles(surface) == []
        assert stats.total_samples == 0
        assert stats.window_samples == 0
        assert stats.coverage_percent == 0.0

    def test_window_counts(self, squad, render_config, surface):
        """Symmetric window [20, 40] holds six striker samples and one keeper sample."""
        stats = HeatmapRenderer().render(squad, 30.0, render_config, surface)
        assert stats.total_samples == 9
        assert stats.window_samples == 7

    def test_heat_zones_toggle(self, squad, render_config, surface):
        renderer = HeatmapRenderer()
        renderer.render(squad, 30.0, render_config, surface)
        with_heat = len(surface.ops("fill_rect"))
        render_config.heat_zones_on = False
        renderer.render(squad, 30.0, render_config, surface)
        without_heat = len(surface.ops("fill_rect"))
        assert without_heat == 1
        assert with_heat > without_heat

    def test_heat_cell_alpha_scaled_by_opacity(self, squad, render_config, surface):
        HeatmapRenderer().render(squad, 30.0, render_config, surface)
        heat_cells = surface.ops("fill_rect")[1:]
        assert heat_cells
        assert max(c.fill[3] for c in heat_cells) == pytest.approx(render_config.opacity)
        assert all(c.args[2] == 15 and c.args[3] == 15 for c in heat_cells)

    def test_trails(self, squad, render_config, surface):
        """Striker has five trailing samples (four segments); the keeper only one."""
        HeatmapRenderer().render(squad, 30.0, render_config, surface)
        trail_lines = [c for c in surface.ops("draw_line") if c.stroke[3] == pytest.approx(0.6)]
        assert len(trail_lines) == 4
        assert all(c.line_width == 3.0 for c in trail_lines)

    def test_trails_toggle(self, squad, render_config, surface):
        render_config.trails_on = False
        HeatmapRenderer().render(squad, 30.0, render_config, surface)
        assert [c for c in surface.ops("draw_line") if c.stroke[3] == pytest.approx(0.6)] == []

    def test_markers(self, squad, render_config, surface):
        """Markers sit at the sample nearest in time; radius follows intensity."""
        HeatmapRenderer().render(squad, 30.0, render_config, surface)
        circles = filled_circles(surface)
        assert len(circles) == 2
        striker_marker, keeper_marker = circles
        assert striker_marker.args[:3] == (300.0, 200.0, 12.0)
        assert keeper_marker.args[2] == 6.0
        texts = [c.args[0] for c in surface.ops("draw_text")]
        assert texts == ["#9", "ST", "Jordan", "GK"]

    def test_single_entity_defaults_to_first(self, squad, render_config, surface):
        render_config.mode = RenderMode.SINGLE_ENTITY
        stats = HeatmapRenderer().render(squad, 30.0, render_config, surface)
        assert len(filled_circles(surface)) == 1
        assert stats.total_samples == 7

    def test_single_entity_selected(self, squad, render_config, surface):
        render_config.mode = RenderMode.SINGLE_ENTITY
        render_config.selected_entity_id = "gk1"
        stats = HeatmapRenderer().render(squad, 30.0, render_config, surface)
        assert stats.total_samples == 2
        assert stats.window_samples == 1

    def test_stats_independent_of_surface_size(self, squad, render_config):
        renderer = HeatmapRenderer()
        small = renderer.render(squad, 30.0, render_config, RecordingSurface(width=300, height=200))
        large = renderer.render(squad, 30.0, render_config, RecordingSurface(width=1200, height=780))
        assert small == large

    def test_entity_id_colors_survive_reordering(self, squad, render_config):
        render_config.color_key = ColorKey.ENTITY_ID
        renderer = HeatmapRenderer()
        first = RecordingSurface(width=600, height=400)
        second = RecordingSurface(width=600, height=400)
        renderer.render(squad, 30.0, render_config, first)
        renderer.render(list(reversed(squad)), 30.0, render_config, second)
        assert marker_colors(first) == marker_colors(second)

    def test_render_order_colors_follow_position(self, squad, render_config):
        renderer = HeatmapRenderer()
        first = RecordingSurface(width=600, height=400)
        second = RecordingSurface(width=600, height=400)
        renderer.render(squad, 30.0, render_config, first)
        renderer.render(list(reversed(squad)), 30.0, render_config, second)
        assert marker_colors(first) != marker_colors(second)

    def test_hot_sample_highlight(self, squad, render_config, surface):
        renderer = HeatmapRenderer(EngineConfig(highlight_hot_samples=True, hot_sample_threshold=0.9))
        renderer.render(squad, 30.0, render_config, surface)
        dots = [c for c in filled_circles(surface) if c.args[2] == 3]
        assert len(dots) == 1


class TestClicks:
    """Click-to-seek."""

    def test_click_seeks_to_nearest_sample_of_selected_entity(self, squad, render_config):
        seeks = []
        result = HeatmapRenderer().handle_click(squad, render_config, 59, 59, on_seek=seeks.append)
        assert result == 35.0
        assert seeks == [35.0]

    def test_click_in_pixels(self, squad, render_config, surface):
        result = HeatmapRenderer().handle_click_px(squad, render_config, surface, 120, 80)
        assert result == 5.0

    def test_click_without_samples(self, render_config):
        seeks = []
        empty = TrackedEntity(entity_id="e", display_name="Empty")
        assert HeatmapRenderer().handle_click([empty], render_config, 50, 50, seeks.append) is None
        assert HeatmapRenderer().handle_click([], render_config, 50, 50, seeks.append) is None
        assert seeks == []


class TestFormationView:
    def test_measured_formation(self, squad, render_config, surface):
        renderer = HeatmapRenderer()
        assignments = renderer.formation_assignments(squad, 30.0, render_config)
        assert not any(a.synthetic for a in assignments)
        renderer.render_formation(assignments, render_config, surface)
        assert "SIMULATED" not in [c.args[0] for c in surface.ops("draw_text")]
        assert len(filled_circles(surface)) == 2

    def test_synthetic_formation_is_captioned(self, render_config, surface):
        roster = [TrackedEntity(entity_id=f"p{i}", display_name=f"P {i}", numeric_label=i) for i in range(11)]
        renderer = HeatmapRenderer()
        assignments = renderer.formation_assignments(roster, 30.0, render_config)
        assert len(assignments) == 11
        assert all(a.synthetic for a in assignments)
        renderer.render_formation(assignments, render_config, surface)
        assert "SIMULATED" in [c.args[0] for c in surface.ops("draw_text")]
        outlines = [c for c in surface.ops("draw_circle") if not c.args[3]]
        assert all(c.stroke[3] == 0.5 for c in outlines)

    def test_formation_lines_toggle(self, render_config, surface):
        roster = [
            TrackedEntity(
                entity_id=f"p{i}",
                display_name=f"P {i}",
                samples=[PositionSample(x=10 + i * 7, y=10 + i * 7, t=0.0)],
            )
            for i in range(11)
        ]
        renderer = HeatmapRenderer()
        assignments = renderer.formation_assignments(roster, 0.0, render_config)
        renderer.render_formation(assignments, render_config, surface)
        with_lines = len(surface.ops("draw_line"))
        render_config.show_formation_lines = False
        renderer.render_formation(assignments, render_config, surface)
        assert len(surface.ops("draw_line")) == 1
        assert with_lines > 1
