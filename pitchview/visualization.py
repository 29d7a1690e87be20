"""
Render driver: draws the pitch, heat zones, trails, and markers on a surface.

Every draw is a synchronous function of ``(entities, current_time, config)``
and the surface size; nothing carries over between draws except an optional
scratch heat buffer owned by the renderer instance. Hosts re-invoke
:meth:`HeatmapRenderer.render` whenever an input changes and may throttle
that as they like.

Draw order:
1. Clear and draw the field geometry scaled to the surface.
2. Heat zones from the samples in the (symmetric) time window.
3. Trails from the trailing window.
4. Current markers at each entity's sample nearest to ``current_time``.
5. Return the statistics record.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

from .colormap import RGB, color_ramp, entity_color, role_color
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig, RenderConfig, RenderMode
from .data_structures import HeatmapStats, PositionSample, SlotAssignment, TrackedEntity
from .formation import formation_at_time, formation_lines, synthesize_formation
from .heatmap import HeatmapBuffer, grid_dimensions
from .metrics import compute_statistics
from .nearest import nearest_by_position, nearest_by_time
from .surface import RenderSurface
from .temporal import filter_window
from .trails import build_trail, trail_to_pixels
from .utils.geometry import clamp, field_to_pixels, pixels_to_field

logger = logging.getLogger(__name__)

WHITE: RGB = (255, 255, 255)
DEFENSIVE_LINE_COLOR = (59, 130, 246, 0.3)
MIDFIELD_LINE_COLOR = (34, 197, 94, 0.3)

SeekCallback = Callable[[float], None]
ScopedEntity = Tuple[int, TrackedEntity]


def draw_field(
    surface: RenderSurface,
    background: Tuple[int, int, int, float] = DEFAULT_ENGINE_CONFIG.field_background,
    lines: Tuple[int, int, int, float] = DEFAULT_ENGINE_CONFIG.field_lines,
) -> None:
    """
    Draw the pitch: background, border, centre line and circle, penalty boxes,
    and goals, all proportional to the surface size.
    """
    width = float(surface.width)
    height = float(surface.height)

    surface.set_fill_color(*background)
    surface.fill_rect(0, 0, width, height)

    surface.set_stroke_color(*lines)
    surface.set_line_width(2)
    surface.stroke_rect(0, 0, width, height)

    surface.draw_line(width / 2, 0, width / 2, height)
    surface.draw_arc(width / 2, height / 2, width * 0.08, 0, 2 * math.pi)

    penalty_w = width * 0.3
    penalty_h = height * 0.15
    surface.stroke_rect((width - penalty_w) / 2, 0, penalty_w, penalty_h)
    surface.stroke_rect((width - penalty_w) / 2, height - penalty_h, penalty_w, penalty_h)

    goal_w = width * 0.06
    goal_h = height * 0.08
    surface.stroke_rect((width - goal_w) / 2, 0, goal_w, goal_h)
    surface.stroke_rect((width - goal_w) / 2, height - goal_h, goal_w, goal_h)


class HeatmapRenderer:
    """
    Orchestrates aggregation, windowing, trails, and lookups for one view.

    Attributes:
        engine: Engine constants (cell size, thresholds, marker sizes).

    A renderer owns one scratch heat buffer; use one renderer per view if
    views are drawn concurrently.
    """

    def __init__(self, engine: EngineConfig = DEFAULT_ENGINE_CONFIG) -> None:
        self.engine = engine
        self._buffer = HeatmapBuffer()

    # ------------------------------------------------------------------ scope

    @staticmethod
    def selected_entity(
        entities: Sequence[TrackedEntity],
        config: RenderConfig,
    ) -> Optional[TrackedEntity]:
        """
        The selected entity, defaulting to the first when none (or an unknown
        id) is selected. None only when there are no entities.
        """
        if not entities:
            return None
        if config.selected_entity_id is not None:
            for entity in entities:
                if entity.entity_id == config.selected_entity_id:
                    return entity
            logger.debug("Selected entity %r not found; using first entity", config.selected_entity_id)
        return entities[0]

    def entities_in_scope(
        self,
        entities: Sequence[TrackedEntity],
        config: RenderConfig,
    ) -> List[ScopedEntity]:
        """
        Entities to draw, paired with their render index (used for colour).
        """
        if config.mode is RenderMode.SINGLE_ENTITY:
            entity = self.selected_entity(entities, config)
            return [] if entity is None else [(0, entity)]
        return list(enumerate(entities))

    def _color(self, index: int, entity: TrackedEntity, config: RenderConfig) -> RGB:
        return entity_color(index, entity.entity_id, config.color_key)

    # ----------------------------------------------------------------- render

    def render(
        self,
        entities: Sequence[TrackedEntity],
        current_time: float,
        config: RenderConfig,
        surface: RenderSurface,
    ) -> HeatmapStats:
        """
        Draw one frame and return its statistics.
        """
        surface.clear()
        draw_field(surface, self.engine.field_background, self.engine.field_lines)

        scope = self.entities_in_scope(entities, config)
        all_samples: List[PositionSample] = [s for _, e in scope for s in e.samples]
        window = filter_window(all_samples, current_time, config.window_seconds, self.engine.heat_window_mode)
        logger.debug(
            "Render t=%.2f: %d entities in scope, %d/%d samples in window",
            current_time,
            len(scope),
            len(window),
            len(all_samples),
        )

        if config.heat_zones_on:
            self.draw_heat_zones(surface, window, config.opacity)
        if config.trails_on:
            for index, entity in scope:
                self.draw_trail(surface, entity, current_time, config, self._color(index, entity, config))
        for index, entity in scope:
            self.draw_marker(surface, entity, current_time, self._color(index, entity, config))

        return compute_statistics(all_samples, window, self.engine.reference_grid)

    def draw_heat_zones(
        self,
        surface: RenderSurface,
        samples: Sequence[PositionSample],
        opacity: float,
    ) -> int:
        """
        Fill every grid cell above the heat threshold. Returns cells drawn.
        """
        if not samples:
            return 0
        cell = self.engine.cell_size
        grid_w, grid_h = grid_dimensions(surface.width, surface.height, cell)
        heat = self._buffer.aggregate(samples, grid_w, grid_h, cell)
        if heat.max_value == 0:
            return 0
        cells = heat.cells(self.engine.heat_threshold)
        for grid_cell in cells:
            norm = grid_cell.accumulated / heat.max_value
            r, g, b = color_ramp(norm)
            surface.set_fill_color(r, g, b, opacity * norm)
            surface.fill_rect(grid_cell.col * cell, grid_cell.row * cell, cell, cell)

        if self.engine.highlight_hot_samples:
            surface.set_fill_color(*WHITE, 0.8)
            for sample in samples:
                if sample.in_bounds and (sample.intensity or 0.0) > self.engine.hot_sample_threshold:
                    x, y = field_to_pixels(sample.x, sample.y, surface.width, surface.height)
                    surface.draw_circle(x, y, 3)
        return len(cells)

    def draw_trail(
        self,
        surface: RenderSurface,
        entity: TrackedEntity,
        current_time: float,
        config: RenderConfig,
        color: RGB,
    ) -> List[PositionSample]:
        """
        Stroke the entity's trail; trails of one point or less draw nothing.
        """
        trail = build_trail(entity, current_time, config.window_seconds, config.trail_length)
        if len(trail) <= 1:
            return trail
        points = trail_to_pixels(trail, surface.width, surface.height)
        surface.set_stroke_color(*color, self.engine.trail_alpha)
        surface.set_line_width(self.engine.trail_width)
        for (x0, y0), (x1, y1) in zip(points[:-1], points[1:]):
            surface.draw_line(x0, y0, x1, y1)
        return trail

    def marker_radius(self, intensity: float) -> float:
        lo, hi = self.engine.marker_radius_range
        return clamp(lo + intensity * (hi - lo), lo, hi)

    def draw_marker(
        self,
        surface: RenderSurface,
        entity: TrackedEntity,
        current_time: float,
        color: RGB,
    ) -> Optional[PositionSample]:
        """
        Draw the entity at its sample nearest to ``current_time``.
        """
        if not entity.samples:
            return None
        sample = nearest_by_time(entity.samples, current_time)
        x, y = field_to_pixels(sample.x, sample.y, surface.width, surface.height)
        radius = self.marker_radius(float(sample.intensity or 0.0))

        surface.set_fill_color(*color, 1.0)
        surface.draw_circle(x, y, radius)
        surface.set_stroke_color(*WHITE, 1.0)
        surface.set_line_width(2)
        surface.draw_circle(x, y, radius, fill=False)

        surface.set_fill_color(*WHITE, 1.0)
        surface.draw_text(entity.label, x, y + 3, self.engine.label_font)
        if entity.role_label:
            surface.draw_text(entity.role_label, x, y + radius + 12, self.engine.role_font)
        return sample

    # ---------------------------------------------------------------- clicks

    def handle_click(
        self,
        entities: Sequence[TrackedEntity],
        config: RenderConfig,
        field_x: float,
        field_y: float,
        on_seek: Optional[SeekCallback] = None,
    ) -> Optional[float]:
        """
        Translate a click (field percentages) into the timestamp of the
        selected entity's nearest sample and hand it to ``on_seek``.

        Returns the timestamp, or None when there is nothing to seek to.
        """
        entity = self.selected_entity(entities, config)
        if entity is None or not entity.samples:
            return None
        sample = nearest_by_position(entity.samples, field_x, field_y)
        logger.debug("Click (%.1f, %.1f) -> %s at t=%.2f", field_x, field_y, entity.entity_id, sample.t)
        if on_seek is not None:
            on_seek(sample.t)
        return sample.t

    def handle_click_px(
        self,
        entities: Sequence[TrackedEntity],
        config: RenderConfig,
        surface: RenderSurface,
        px: float,
        py: float,
        on_seek: Optional[SeekCallback] = None,
    ) -> Optional[float]:
        """
        Same as :meth:`handle_click` for a click in surface pixels.
        """
        field_x, field_y = pixels_to_field(px, py, surface.width, surface.height)
        return self.handle_click(entities, config, field_x, field_y, on_seek)

    # ------------------------------------------------------------- formation

    @staticmethod
    def formation_assignments(
        entities: Sequence[TrackedEntity],
        current_time: float,
        config: RenderConfig,
    ) -> List[SlotAssignment]:
        """
        Measured formation at ``current_time`` when any entity has samples,
        otherwise a synthetic layout of the configured scheme.
        """
        snapshot = formation_at_time(entities, current_time, config.formation_scheme)
        if snapshot is not None:
            return snapshot.assignments
        logger.debug("No samples for formation at t=%.2f; using synthetic layout", current_time)
        return synthesize_formation(config.formation_scheme, entities, current_time)

    def render_formation(
        self,
        assignments: Sequence[SlotAssignment],
        config: RenderConfig,
        surface: RenderSurface,
    ) -> None:
        """
        Draw a formation view: field, optional formation lines, and one
        role-coloured marker per assignment. Synthetic layouts are drawn with
        a faded outline and a caption so they are not read as measured data.
        """
        surface.clear()
        draw_field(surface, self.engine.field_background, self.engine.field_lines)
        width, height = surface.width, surface.height

        if config.show_formation_lines:
            lines = formation_lines([(a.x, a.y) for a in assignments])
            for line, color in zip(lines, (DEFENSIVE_LINE_COLOR, MIDFIELD_LINE_COLOR)):
                surface.set_stroke_color(*color)
                surface.set_line_width(2)
                pts = [field_to_pixels(x, y, width, height) for x, y in line]
                for (x0, y0), (x1, y1) in zip(pts[:-1], pts[1:]):
                    surface.draw_line(x0, y0, x1, y1)

        radius = self.engine.marker_radius_range[1] - 2
        for assignment in assignments:
            x, y = field_to_pixels(assignment.x, assignment.y, width, height)
            surface.set_fill_color(*role_color(assignment.slot.role_label), 1.0)
            surface.draw_circle(x, y, radius)
            surface.set_stroke_color(*WHITE, 0.5 if assignment.synthetic else 1.0)
            surface.set_line_width(2)
            surface.draw_circle(x, y, radius, fill=False)
            surface.set_fill_color(*WHITE, 1.0)
            surface.draw_text(assignment.entity.label, x, y + 3, self.engine.label_font)
            surface.draw_text(assignment.slot.role_label, x, y + radius + 12, self.engine.role_font)

        if any(a.synthetic for a in assignments):
            surface.set_fill_color(*WHITE, 0.7)
            surface.draw_text("SIMULATED", width / 2, 14, self.engine.label_font)
