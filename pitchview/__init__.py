"""
Top-level package for the pitchview player-tracking visualization engine.

This package turns timestamped on-field position samples into:
- Normalized heat-intensity grids over the pitch.
- Time-bounded motion trails per tracked entity.
- Nearest-sample lookups (click position or playback time -> observation).
- Canonical formation layouts for an ordered roster.
- Draw commands against an abstract render surface, plus summary statistics.

Coordinates are always percentages of the field width/height (0-100), never
pixels. Modules are intentionally small; see individual submodules for more
detailed documentation.
"""

__version__ = "0.1.0"
