"""
Configuration for the visualization engine.

This module centralizes configurable parameters such as:
- Per-draw render options the host toggles (mode, trails, window, opacity).
- Engine constants (heat cell size, thresholds, marker sizes, reference grid).
- Optional YAML overrides for the command-line renderer.

``RenderConfig`` is the only state the engine keeps between draws; the host
may mutate it freely between calls. ``EngineConfig`` holds the constants and
rarely changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, cast

import yaml

from .temporal import WindowMode

logger = logging.getLogger(__name__)


class RenderMode(str, Enum):
    ALL_ENTITIES = "all"
    SINGLE_ENTITY = "single"


class ColorKey(str, Enum):
    """
    How an entity's render colour is chosen.

    ``RENDER_ORDER`` keys the hue by position in the render list, so colours
    move when the roster order changes. ``ENTITY_ID`` keys it by a stable hash
    of the entity id instead.
    """

    RENDER_ORDER = "render_order"
    ENTITY_ID = "entity_id"


@dataclass
class RenderConfig:
    """
    Host-controlled options for a single draw.

    Attributes:
        mode: Draw every entity or only the selected one.
        selected_entity_id: Entity drawn in ``SINGLE_ENTITY`` mode. When missing
            or unknown, the first entity is used.
        trails_on: Whether to draw motion trails.
        trail_length: Maximum number of samples per trail (>= 1).
        window_seconds: Time window in seconds (> 0).
        heat_zones_on: Whether to draw heat zones.
        opacity: Heat-zone opacity in ``[0, 1]``.
        formation_scheme: Formation name such as "4-4-2"; unknown values fall
            back to the default scheme when resolved.
        color_key: How entity colours are assigned.
        show_formation_lines: Draw defensive/midfield lines in formation view.
    """

    mode: RenderMode = RenderMode.ALL_ENTITIES
    selected_entity_id: Optional[str] = None
    trails_on: bool = True
    trail_length: int = 20
    window_seconds: float = 30.0
    heat_zones_on: bool = True
    opacity: float = 0.7
    formation_scheme: str = "4-4-2"
    color_key: ColorKey = ColorKey.RENDER_ORDER
    show_formation_lines: bool = True

    def __post_init__(self) -> None:
        self.mode = RenderMode(self.mode)
        self.color_key = ColorKey(self.color_key)
        if int(self.trail_length) < 1:
            raise ValueError("trail_length must be >= 1")
        self.trail_length = int(self.trail_length)
        if not float(self.window_seconds) > 0:
            raise ValueError("window_seconds must be > 0")
        self.window_seconds = float(self.window_seconds)
        if not 0.0 <= float(self.opacity) <= 1.0:
            raise ValueError("opacity must be within [0, 1]")
        self.opacity = float(self.opacity)


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine constants shared by all draws. Frozen; derive variants with
    ``dataclasses.replace``.

    Attributes:
        cell_size: Heat-grid cell size in surface pixels.
        heat_threshold: Normalized intensity a cell must exceed to be drawn.
        reference_grid: (columns, rows) of the fixed coverage grid.
        trail_alpha: Stroke alpha of trails.
        trail_width: Stroke width of trails in pixels.
        marker_radius_range: (min, max) marker radius in pixels.
        heat_window_mode: Window shape used for heat zones and window counts.
        highlight_hot_samples: Draw a dot for samples with intensity above
            ``hot_sample_threshold`` on top of the heat zones.
        hot_sample_threshold: Intensity above which a sample is highlighted.
        label_font: Font spec passed to the surface for marker labels.
        role_font: Font spec passed to the surface for role labels.
    """

    cell_size: int = 15
    heat_threshold: float = 0.1
    reference_grid: Tuple[int, int] = (20, 20)
    trail_alpha: float = 0.6
    trail_width: float = 3.0
    marker_radius_range: Tuple[float, float] = (6.0, 12.0)
    heat_window_mode: WindowMode = WindowMode.SYMMETRIC
    highlight_hot_samples: bool = False
    hot_sample_threshold: float = 0.7
    label_font: str = "bold 10px Arial"
    role_font: str = "8px Arial"
    field_background: Tuple[int, int, int, float] = field(default=(34, 197, 94, 0.1))
    field_lines: Tuple[int, int, int, float] = field(default=(34, 197, 94, 0.3))

    def __post_init__(self) -> None:
        if self.cell_size < 1:
            raise ValueError("cell_size must be >= 1")
        object.__setattr__(self, "heat_window_mode", WindowMode(self.heat_window_mode))


DEFAULT_ENGINE_CONFIG = EngineConfig()


def load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file if it exists.

    The file is optional; when missing, an empty dict is returned.
    """
    if not config_path.exists():
        return {}
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a top-level mapping.")
    return cast(Dict[str, Any], data)


def _known_kwargs(cls: type, data: Mapping[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - names)
    if unknown:
        logger.warning("Ignoring unknown %s keys: %s", cls.__name__, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in names}


def render_config_from_mapping(data: Mapping[str, Any]) -> RenderConfig:
    """
    Build a :class:`RenderConfig` from the ``render`` section of a config mapping.
    """
    section = cast(Mapping[str, Any], data.get("render", {}) or {})
    return RenderConfig(**_known_kwargs(RenderConfig, section))


def engine_config_from_mapping(data: Mapping[str, Any]) -> EngineConfig:
    """
    Build an :class:`EngineConfig` from the ``engine`` section of a config mapping.
    """
    section = dict(cast(Mapping[str, Any], data.get("engine", {}) or {}))
    for key in ("reference_grid", "marker_radius_range", "field_background", "field_lines"):
        if key in section:
            section[key] = tuple(section[key])
    return EngineConfig(**_known_kwargs(EngineConfig, section))
