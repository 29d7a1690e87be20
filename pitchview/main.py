"""
Command-line renderer for recorded player tracks.

This script wires together:
- Track loading (JSON or CSV)
- Render options from code defaults, an optional YAML file, and CLI flags
- One heat-map frame rendered at a given playback time to an image
- Optional formation view for the same time
- Summary statistics printed to the console

It can be run from the command line, for example:

    python -m pitchview.main \\
        --tracks data/match_tracks.json \\
        --time 754.5 \\
        --window 30 \\
        --output outputs/frame.png \\
        --formation_output outputs/formation.png

Options can also be configured via ``config.yaml`` (``render:`` and
``engine:`` sections).
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .config import (
    EngineConfig,
    RenderConfig,
    RenderMode,
    engine_config_from_mapping,
    load_yaml_config,
    render_config_from_mapping,
)
from .data_structures import HeatmapStats
from .metrics import summarize_entity
from .surface import OpenCVSurface
from .tracking_data import TrackStore
from .utils.timefmt import format_timestamp
from .visualization import HeatmapRenderer

logger = logging.getLogger(__name__)


def build_config_from_args(args: argparse.Namespace) -> Tuple[RenderConfig, EngineConfig]:
    """
    Construct render/engine configs from CLI arguments and optional YAML.
    """
    default_config_path = Path.cwd() / "config.yaml"
    config_path = Path(args.config) if args.config is not None else default_config_path
    yaml_cfg: Dict[str, Any] = load_yaml_config(config_path)

    render = render_config_from_mapping(yaml_cfg)
    engine = engine_config_from_mapping(yaml_cfg)

    overrides: Dict[str, Any] = {}
    if args.entity is not None:
        overrides["mode"] = RenderMode.SINGLE_ENTITY
        overrides["selected_entity_id"] = args.entity
    if args.window is not None:
        overrides["window_seconds"] = args.window
    if args.trail_length is not None:
        overrides["trail_length"] = args.trail_length
    if args.opacity is not None:
        overrides["opacity"] = args.opacity
    if args.formation is not None:
        overrides["formation_scheme"] = args.formation
    if args.no_trails:
        overrides["trails_on"] = False
    if args.no_heat:
        overrides["heat_zones_on"] = False

    if overrides:
        render = replace(render, **overrides)
    if args.cell_size is not None:
        engine = replace(engine, cell_size=args.cell_size)
    return render, engine


def print_summary(stats: HeatmapStats, store: TrackStore, current_time: float) -> None:
    print(f"Frame at {format_timestamp(current_time)} ({current_time:.1f} s):")
    print(
        f"  samples {stats.total_samples} total, {stats.window_samples} in window, "
        f"avg intensity {stats.average_intensity:.2f}, max {stats.max_intensity:.2f}, "
        f"coverage {stats.coverage_percent:.1f}%"
    )
    print("Per-entity summary:")
    for entity in store.entities:
        summary = summarize_entity(entity)
        span = (
            f"{format_timestamp(summary.first_seen)}-{format_timestamp(summary.last_seen)}"
            if summary.first_seen is not None and summary.last_seen is not None
            else "no samples"
        )
        print(
            f"  {entity.label} {entity.display_name} ({entity.role_label or '?'}): "
            f"{summary.sample_count} samples, path {summary.path_length:.1f}, {span}"
        )


def run_render(
    tracks_path: Path,
    current_time: float,
    output_path: Path,
    render_config: RenderConfig,
    engine_config: EngineConfig,
    size: Tuple[int, int] = (800, 520),
    formation_output: Optional[Path] = None,
) -> HeatmapStats:
    """
    Render one frame (and optionally the formation view) to image files.
    """
    store = TrackStore.load(tracks_path)
    logger.info("Loaded %d entities from %s", len(store.entities), tracks_path)

    renderer = HeatmapRenderer(engine_config)
    surface = OpenCVSurface(*size)
    stats = renderer.render(store.entities, current_time, render_config, surface)
    surface.save(output_path)
    logger.info("Wrote frame to %s", output_path)

    if formation_output is not None:
        assignments = renderer.formation_assignments(store.entities, current_time, render_config)
        formation_surface = OpenCVSurface(*size)
        renderer.render_formation(assignments, render_config, formation_surface)
        formation_surface.save(formation_output)
        logger.info("Wrote formation view to %s", formation_output)

    print_summary(stats, store, current_time)
    return stats


def main(argv: Optional[list[str]] = None) -> None:
    """
    CLI entrypoint for rendering a single frame.

    Use ``python -m pitchview.main --help`` for available options.
    """
    parser = argparse.ArgumentParser(
        description="Render player-tracking heat maps, trails, and formations.",
    )
    parser.add_argument("--tracks", type=str, required=True, help="Path to tracks JSON or CSV file.")
    parser.add_argument("--time", type=float, default=0.0, help="Playback time in seconds.")
    parser.add_argument(
        "--output",
        type=str,
        default="outputs/frame.png",
        help="Image file for the rendered frame.",
    )
    parser.add_argument("--formation_output", type=str, help="Optional image file for the formation view.")
    parser.add_argument(
        "--config",
        type=str,
        help="Optional path to YAML config file (defaults to ./config.yaml).",
    )
    parser.add_argument("--entity", type=str, help="Render only this entity id.")
    parser.add_argument("--window", type=float, help="Time window in seconds.")
    parser.add_argument("--trail_length", type=int, help="Maximum samples per trail.")
    parser.add_argument("--opacity", type=float, help="Heat-zone opacity in [0, 1].")
    parser.add_argument("--formation", type=str, help="Formation scheme, e.g. 4-3-3.")
    parser.add_argument("--cell_size", type=int, help="Heat cell size in pixels.")
    parser.add_argument("--width", type=int, default=800, help="Output width in pixels.")
    parser.add_argument("--height", type=int, default=520, help="Output height in pixels.")
    parser.add_argument("--no_trails", action="store_true", help="Disable trails.")
    parser.add_argument("--no_heat", action="store_true", help="Disable heat zones.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    render_config, engine_config = build_config_from_args(args)
    run_render(
        tracks_path=Path(args.tracks),
        current_time=args.time,
        output_path=Path(args.output),
        render_config=render_config,
        engine_config=engine_config,
        size=(args.width, args.height),
        formation_output=Path(args.formation_output) if args.formation_output else None,
    )


if __name__ == "__main__":
    main()
