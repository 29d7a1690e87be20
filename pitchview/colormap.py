"""
Colour helpers: heat ramp, per-entity hues, and role palette.

The heat ramp is a 5-segment gradient blue -> cyan -> green -> yellow ->
orange -> red over ``[0, 1]``. Each segment spans 0.2 and interpolates
linearly between its two stop colours with ``factor = (i - start) * 5``.
Adjacent segments share their boundary colour, so the ramp is continuous at
0.2, 0.4, 0.6 and 0.8.
"""

from __future__ import annotations

import colorsys
import math
import zlib
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .config import ColorKey

RGB = Tuple[int, int, int]
ColorArray = np.ndarray[Any, np.dtype[np.uint8]]

SEGMENT_WIDTH = 0.2

# Stop colours at 0.0, 0.2, 0.4, 0.6, 0.8, 1.0.
RAMP_STOPS: Tuple[Tuple[float, float, float], ...] = (
    (0.0, 0.0, 255.0),  # blue
    (0.0, 255.0, 255.0),  # cyan
    (0.0, 255.0, 0.0),  # green
    (255.0, 255.0, 0.0),  # yellow
    (255.0, 127.5, 0.0),  # orange
    (255.0, 0.0, 0.0),  # red
)
_STOP_POSITIONS = np.linspace(0.0, 1.0, len(RAMP_STOPS))
_STOP_TABLE = np.asarray(RAMP_STOPS, dtype=np.float64)

ROLE_GROUPS: Dict[str, str] = {
    "GK": "goalkeeper",
    "CB": "defender",
    "LB": "defender",
    "RB": "defender",
    "LWB": "defender",
    "RWB": "defender",
    "CDM": "midfielder",
    "CM": "midfielder",
    "CAM": "midfielder",
    "LM": "midfielder",
    "RM": "midfielder",
    "LW": "forward",
    "RW": "forward",
    "CF": "forward",
    "ST": "forward",
}

GROUP_COLORS: Dict[str, RGB] = {
    "goalkeeper": (59, 130, 246),
    "defender": (34, 197, 94),
    "midfielder": (234, 179, 8),
    "forward": (239, 68, 68),
}
UNKNOWN_ROLE_COLOR: RGB = (107, 114, 128)


def _channel(value: float) -> int:
    return int(min(255, max(0, round(value))))


def color_ramp(intensity: float) -> RGB:
    """
    Map a normalized intensity to an RGB triple.

    Defined for every value; inputs are clamped to ``[0, 1]`` and NaN maps to
    the bottom of the ramp. Channels are rounded and clamped to ``[0, 255]``.
    """
    if math.isnan(intensity):
        intensity = 0.0
    intensity = min(1.0, max(0.0, float(intensity)))
    segment = min(int(intensity / SEGMENT_WIDTH), len(RAMP_STOPS) - 2)
    factor = (intensity - segment * SEGMENT_WIDTH) * 5
    factor = min(1.0, max(0.0, factor))
    lo = RAMP_STOPS[segment]
    hi = RAMP_STOPS[segment + 1]
    r, g, b = (lo[i] + (hi[i] - lo[i]) * factor for i in range(3))
    return _channel(r), _channel(g), _channel(b)


def color_ramp_array(values: np.ndarray) -> ColorArray:
    """
    Vectorised :func:`color_ramp` returning an RGB ``uint8`` array of shape
    ``values.shape + (3,)``.
    """
    v = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0)
    v = np.clip(v, 0.0, 1.0)
    channels = [np.interp(v, _STOP_POSITIONS, _STOP_TABLE[:, i]) for i in range(3)]
    rgb = np.stack(channels, axis=-1)
    return np.clip(np.rint(rgb), 0, 255).astype(np.uint8)


def _hsl_to_rgb(hue_deg: float, saturation: float = 0.7, lightness: float = 0.5) -> RGB:
    r, g, b = colorsys.hls_to_rgb((hue_deg % 360) / 360.0, lightness, saturation)
    return _channel(r * 255), _channel(g * 255), _channel(b * 255)


def entity_color(
    index: int,
    entity_id: Optional[str] = None,
    key: ColorKey = ColorKey.RENDER_ORDER,
) -> RGB:
    """
    Deterministic colour for an entity, ``hsl(hue, 70%, 50%)``.

    With ``RENDER_ORDER`` the hue is ``index * 60 mod 360``. With ``ENTITY_ID``
    it is derived from a CRC32 of the id so it survives roster reordering.
    """
    if key is ColorKey.ENTITY_ID and entity_id is not None:
        hue = zlib.crc32(entity_id.encode("utf-8")) % 360
    else:
        hue = (index * 60) % 360
    return _hsl_to_rgb(hue)


def role_color(role_label: str) -> RGB:
    """
    Palette colour for a playing role; unknown roles are grey.
    """
    group = ROLE_GROUPS.get(role_label.strip().upper())
    if group is None:
        return UNKNOWN_ROLE_COLOR
    return GROUP_COLORS[group]
