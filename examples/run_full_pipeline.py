"""
Demonstration of the data flow: tracks -> heat zones/trails/markers -> image + stats.

Assumptions:
- Tracks would normally come from an upstream tracker; here two synthetic
  players drift across the pitch so the example runs without any input data.
- Output images are written to outputs/demo/.
"""

from __future__ import annotations

import math
from pathlib import Path

import cv2

from pitchview.config import RenderConfig, RenderMode
from pitchview.data_structures import PositionSample, TrackedEntity
from pitchview.heatmap import aggregate, grid_dimensions, render_heat_image
from pitchview.main import print_summary
from pitchview.surface import OpenCVSurface
from pitchview.tracking_data import TrackStore
from pitchview.visualization import HeatmapRenderer


def synthetic_entity(entity_id: str, name: str, number: int, role: str, phase: float) -> TrackedEntity:
    samples = []
    for step in range(240):
        t = step * 0.5
        samples.append(
            PositionSample(
                x=50 + 35 * math.sin(t * 0.05 + phase),
                y=50 + 25 * math.cos(t * 0.08 + phase),
                t=t,
                confidence=0.6 + 0.4 * abs(math.sin(t * 0.3)),
            )
        )
    return TrackedEntity(entity_id=entity_id, display_name=name, role_label=role, numeric_label=number, samples=samples)


def main() -> None:
    out_dir = Path("outputs/demo")
    store = TrackStore(
        entities=[
            synthetic_entity("p9", "Alex Striker", 9, "ST", 0.0),
            synthetic_entity("p6", "Sam Holder", 6, "CDM", 2.0),
        ]
    )
    # 1) Persist the synthetic tracks so the CLI can render them too.
    store.to_json(out_dir / "tracks.json")

    renderer = HeatmapRenderer()
    current_time = 60.0

    # 2) All players, heat zones + trails.
    surface = OpenCVSurface(800, 520)
    stats = renderer.render(store.entities, current_time, RenderConfig(), surface)
    surface.save(out_dir / "all_players.png")

    # 3) Single player, narrower window.
    single = RenderConfig(mode=RenderMode.SINGLE_ENTITY, selected_entity_id="p6", window_seconds=10)
    renderer.render(store.entities, current_time, single, surface)
    surface.save(out_dir / "p6.png")

    # 4) Raw heat grid over the whole match, without field or markers.
    grid_w, grid_h = grid_dimensions(800, 520)
    heat = aggregate([s for e in store.entities for s in e.samples], grid_w, grid_h)
    cv2.imwrite(str(out_dir / "heat_grid.png"), render_heat_image(heat, 800, 520, threshold=0.1))

    # 5) A click near the centre seeks to the closest recorded observation.
    seek_to = renderer.handle_click(store.entities, single, 50.0, 50.0, on_seek=lambda t: print(f"seek -> {t:.1f}s"))
    print("Clicked timestamp:", seek_to)

    print_summary(stats, store, current_time)


if __name__ == "__main__":
    main()
