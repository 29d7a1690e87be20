"""
Render surfaces the visualization engine draws on.

The engine never touches a global drawing context; it receives a surface that
implements :class:`RenderSurface` for every draw. Two implementations ship
with the package:

- :class:`RecordingSurface` keeps an ordered list of draw commands. Hosts that
  render elsewhere (a browser canvas, a GUI toolkit) can replay them.
- :class:`OpenCVSurface` rasterizes onto a numpy BGR canvas with OpenCV and
  can save the result as an image.

Colours are RGB in ``[0, 255]`` with alpha in ``[0, 1]``. Angles are radians.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Protocol, Tuple

import cv2
import numpy as np

Frame = np.ndarray[Any, np.dtype[np.uint8]]
RGBA = Tuple[int, int, int, float]


class RenderSurface(Protocol):
    """
    Protocol for drawing targets.

    ``width`` and ``height`` are read on every draw, so a surface may be
    resized between draws.
    """

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def clear(self) -> None: ...

    def set_fill_color(self, r: int, g: int, b: int, a: float = 1.0) -> None: ...

    def set_stroke_color(self, r: int, g: int, b: int, a: float = 1.0) -> None: ...

    def set_line_width(self, width: float) -> None: ...

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None: ...

    def stroke_rect(self, x: float, y: float, w: float, h: float) -> None: ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def draw_arc(self, x: float, y: float, radius: float, start_angle: float, end_angle: float) -> None: ...

    def draw_circle(self, x: float, y: float, radius: float, fill: bool = True) -> None: ...

    def draw_text(self, text: str, x: float, y: float, font: str = "10px Arial") -> None: ...


@dataclass
class DrawCommand:
    """
    One recorded draw call with the style state active when it was issued.
    """

    op: str
    args: Tuple[Any, ...]
    fill: RGBA
    stroke: RGBA
    line_width: float


@dataclass
class RecordingSurface:
    """
    Surface that records draw calls instead of rasterizing them.

    Attributes:
        width: Surface width in pixels.
        height: Surface height in pixels.
        commands: Draw calls since the last :meth:`clear`, in order.
    """

    width: int = 800
    height: int = 520
    commands: List[DrawCommand] = field(default_factory=list)
    _fill: RGBA = field(default=(0, 0, 0, 1.0), init=False)
    _stroke: RGBA = field(default=(0, 0, 0, 1.0), init=False)
    _line_width: float = field(default=1.0, init=False)

    def _record(self, op: str, *args: Any) -> None:
        self.commands.append(DrawCommand(op, args, self._fill, self._stroke, self._line_width))

    def clear(self) -> None:
        self.commands = []
        self._record("clear")

    def set_fill_color(self, r: int, g: int, b: int, a: float = 1.0) -> None:
        self._fill = (int(r), int(g), int(b), float(a))

    def set_stroke_color(self, r: int, g: int, b: int, a: float = 1.0) -> None:
        self._stroke = (int(r), int(g), int(b), float(a))

    def set_line_width(self, width: float) -> None:
        self._line_width = float(width)

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("fill_rect", x, y, w, h)

    def stroke_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("stroke_rect", x, y, w, h)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._record("draw_line", x1, y1, x2, y2)

    def draw_arc(self, x: float, y: float, radius: float, start_angle: float, end_angle: float) -> None:
        self._record("draw_arc", x, y, radius, start_angle, end_angle)

    def draw_circle(self, x: float, y: float, radius: float, fill: bool = True) -> None:
        self._record("draw_circle", x, y, radius, fill)

    def draw_text(self, text: str, x: float, y: float, font: str = "10px Arial") -> None:
        self._record("draw_text", text, x, y, font)

    def ops(self, name: str) -> List[DrawCommand]:
        """
        Recorded commands with the given op name.
        """
        return [c for c in self.commands if c.op == name]


_FONT_PX = re.compile(r"(\d+(?:\.\d+)?)px")


def _font_scale(font: str) -> Tuple[float, int]:
    """
    Translate a CSS-like font spec ("bold 10px Arial") to OpenCV scale/thickness.
    """
    match = _FONT_PX.search(font)
    px = float(match.group(1)) if match else 10.0
    thickness = 2 if "bold" in font.lower() else 1
    return px / 22.0, thickness


class OpenCVSurface:
    """
    Raster surface backed by a numpy BGR image and OpenCV drawing calls.

    Translucent colours are blended onto the canvas with ``cv2.addWeighted``.
    Text is centred horizontally on ``x``, with ``y`` as the baseline.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 520,
        background: Tuple[int, int, int] = (17, 24, 39),
    ) -> None:
        if width < 1 or height < 1:
            raise ValueError("Surface width and height must be >= 1")
        self._background = background
        self._canvas: Frame = np.zeros((height, width, 3), dtype=np.uint8)
        self._fill: RGBA = (0, 0, 0, 1.0)
        self._stroke: RGBA = (0, 0, 0, 1.0)
        self._line_width = 1.0
        self.clear()

    @property
    def width(self) -> int:
        return int(self._canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self._canvas.shape[0])

    @property
    def image(self) -> Frame:
        """
        Current canvas as a BGR ``uint8`` array (not a copy).
        """
        return self._canvas

    def resize(self, width: int, height: int) -> None:
        """
        Replace the canvas with a blank one of the new size.
        """
        self._canvas = np.zeros((height, width, 3), dtype=np.uint8)
        self.clear()

    def clear(self) -> None:
        r, g, b = self._background
        self._canvas[:] = (b, g, r)

    def set_fill_color(self, r: int, g: int, b: int, a: float = 1.0) -> None:
        self._fill = (int(r), int(g), int(b), float(a))

    def set_stroke_color(self, r: int, g: int, b: int, a: float = 1.0) -> None:
        self._stroke = (int(r), int(g), int(b), float(a))

    def set_line_width(self, width: float) -> None:
        self._line_width = float(width)

    @staticmethod
    def _bgr(color: RGBA) -> Tuple[int, int, int]:
        r, g, b, _ = color
        return b, g, r

    def _thickness(self) -> int:
        return max(1, int(round(self._line_width)))

    def _blend(self, color: RGBA, draw: Any) -> None:
        """
        Run ``draw(target, bgr)`` at the colour's alpha.
        """
        alpha = max(0.0, min(1.0, color[3]))
        if alpha <= 0.0:
            return
        bgr = self._bgr(color)
        if alpha >= 1.0:
            draw(self._canvas, bgr)
            return
        overlay = self._canvas.copy()
        draw(overlay, bgr)
        cv2.addWeighted(overlay, alpha, self._canvas, 1.0 - alpha, 0, dst=self._canvas)

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        x0 = max(0, int(round(x)))
        y0 = max(0, int(round(y)))
        x1 = min(self.width, int(round(x + w)))
        y1 = min(self.height, int(round(y + h)))
        if x1 <= x0 or y1 <= y0:
            return
        alpha = max(0.0, min(1.0, self._fill[3]))
        roi = self._canvas[y0:y1, x0:x1]
        color = np.asarray(self._bgr(self._fill), dtype=np.float32)
        blended = roi.astype(np.float32) * (1.0 - alpha) + color * alpha
        roi[:] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)

    def stroke_rect(self, x: float, y: float, w: float, h: float) -> None:
        p0 = (int(round(x)), int(round(y)))
        p1 = (int(round(x + w)), int(round(y + h)))
        thickness = self._thickness()
        self._blend(
            self._stroke,
            lambda img, c: cv2.rectangle(img, p0, p1, c, thickness, cv2.LINE_AA),
        )

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        p0 = (int(round(x1)), int(round(y1)))
        p1 = (int(round(x2)), int(round(y2)))
        thickness = self._thickness()
        self._blend(
            self._stroke,
            lambda img, c: cv2.line(img, p0, p1, c, thickness, cv2.LINE_AA),
        )

    def draw_arc(self, x: float, y: float, radius: float, start_angle: float, end_angle: float) -> None:
        center = (int(round(x)), int(round(y)))
        r = max(0, int(round(radius)))
        start = math.degrees(start_angle)
        end = math.degrees(end_angle)
        thickness = self._thickness()
        self._blend(
            self._stroke,
            lambda img, c: cv2.ellipse(img, center, (r, r), 0.0, start, end, c, thickness, cv2.LINE_AA),
        )

    def draw_circle(self, x: float, y: float, radius: float, fill: bool = True) -> None:
        center = (int(round(x)), int(round(y)))
        r = max(0, int(round(radius)))
        if fill:
            self._blend(
                self._fill,
                lambda img, c: cv2.circle(img, center, r, c, -1, cv2.LINE_AA),
            )
        else:
            thickness = self._thickness()
            self._blend(
                self._stroke,
                lambda img, c: cv2.circle(img, center, r, c, thickness, cv2.LINE_AA),
            )

    def draw_text(self, text: str, x: float, y: float, font: str = "10px Arial") -> None:
        scale, thickness = _font_scale(font)
        (text_w, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, thickness)
        origin = (int(round(x - text_w / 2.0)), int(round(y)))
        self._blend(
            self._fill,
            lambda img, c: cv2.putText(
                img, text, origin, cv2.FONT_HERSHEY_SIMPLEX, scale, c, thickness, cv2.LINE_AA
            ),
        )

    def save(self, path: Path) -> None:
        """
        Write the canvas to an image file (format from the extension).
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(str(path), self._canvas):
            raise ValueError(f"Could not write image to {path}")
