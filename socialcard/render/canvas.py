"""Headless 2D drawing surface used by every render module.

``Canvas`` wraps one RGB ``PIL.Image`` and offers a small canvas-style API:
solid or gradient fills, strokes, tracked-text friendly measuring, circular
clipping and a global alpha.  Solid fills go straight through an
``ImageDraw`` in RGBA blend mode; gradients, clipped draws and gradient text
are rasterised with numpy into an RGBA layer and pasted with its own alpha.
"""
from __future__ import annotations

import math
from contextlib import contextmanager
from typing import Iterator, Sequence, Union

import numpy as np
from PIL import Image, ImageDraw

from socialcard.render.color import RGBA, parse_rgba, to_rgba8
from socialcard.render.typography import FontBook

Point = tuple[float, float]

_ALIGN_ANCHORS = {"left": "l", "center": "m", "right": "r"}
_BASELINE_ANCHORS = {"top": "a", "middle": "m", "bottom": "d", "alphabetic": "s"}


class _Gradient:
    def __init__(self) -> None:
        self.stops: list[tuple[float, RGBA]] = []

    def add_color_stop(self, offset: float, color: str) -> None:
        self.stops.append((max(0.0, min(1.0, float(offset))), parse_rgba(color)))

    def _t(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def render(self, left: int, top: int, width: int, height: int) -> np.ndarray:
        """Return a ``(height, width, 4)`` float array: straight RGB 0-255 and alpha 0-1."""
        out = np.zeros((height, width, 4), dtype=np.float32)
        if not self.stops or width <= 0 or height <= 0:
            return out
        ys, xs = np.mgrid[top : top + height, left : left + width].astype(np.float32)
        t = np.clip(self._t(xs + 0.5, ys + 0.5), 0.0, 1.0)
        stops = sorted(self.stops, key=lambda stop: stop[0])
        offsets = [offset for offset, _ in stops]
        alphas = [color[3] for _, color in stops]
        alpha = np.interp(t, offsets, alphas).astype(np.float32)
        safe_alpha = np.where(alpha > 0, alpha, 1.0)
        # 预乘插值，避免向 transparent 过渡时出现发黑的边
        for channel in range(3):
            premultiplied = [color[channel] * color[3] for _, color in stops]
            values = np.interp(t, offsets, premultiplied).astype(np.float32)
            out[..., channel] = np.where(alpha > 0, values / safe_alpha, 0.0)
        out[..., 3] = alpha
        return out


class LinearGradient(_Gradient):
    def __init__(self, x0: float, y0: float, x1: float, y1: float) -> None:
        super().__init__()
        self.x0, self.y0, self.x1, self.y1 = float(x0), float(y0), float(x1), float(y1)

    def _t(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        dx = self.x1 - self.x0
        dy = self.y1 - self.y0
        denominator = dx * dx + dy * dy
        if denominator <= 0:
            return np.zeros_like(xs)
        return ((xs - self.x0) * dx + (ys - self.y0) * dy) / denominator


class RadialGradient(_Gradient):
    """Concentric radial gradient: ``t`` runs from ``r0`` to ``r1`` around ``(x1, y1)``."""

    def __init__(self, x0: float, y0: float, r0: float, x1: float, y1: float, r1: float) -> None:
        super().__init__()
        self.x0, self.y0, self.r0 = float(x0), float(y0), float(r0)
        self.x1, self.y1, self.r1 = float(x1), float(y1), float(r1)

    def _t(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        span = self.r1 - self.r0
        distance = np.sqrt((xs - self.x1) ** 2 + (ys - self.y1) ** 2)
        if span <= 0:
            return np.where(distance <= self.r1, 0.0, 1.0).astype(np.float32)
        return (distance - self.r0) / span


Paint = Union[str, _Gradient]


class Canvas:
    def __init__(self, width: int, height: int, *, fonts: FontBook | None = None) -> None:
        self.width = int(width)
        self.height = int(height)
        self.image = Image.new("RGB", (self.width, self.height), color=(0, 0, 0))
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        self.fonts = fonts or FontBook()
        self.font = self.fonts.get("display", 400, 16)
        self.font_size = 16.0
        self.global_alpha = 1.0
        self.operations: list[str] = []
        self._clip: tuple[float, float, float] | None = None

    @property
    def draw_calls(self) -> int:
        return len(self.operations)

    # ------------------------------------------------------------------
    # state

    def create_linear_gradient(self, x0: float, y0: float, x1: float, y1: float) -> LinearGradient:
        return LinearGradient(x0, y0, x1, y1)

    def create_radial_gradient(
        self, x0: float, y0: float, r0: float, x1: float, y1: float, r1: float
    ) -> RadialGradient:
        return RadialGradient(x0, y0, r0, x1, y1, r1)

    def set_font(self, family: str, weight: int, size: float) -> None:
        self.font = self.fonts.get(family, weight, size)
        self.font_size = float(size)

    def measure_text(self, text: str) -> float:
        if not text:
            return 0.0
        return float(self.font.getlength(text))

    @contextmanager
    def alpha(self, value: float) -> Iterator[None]:
        previous = self.global_alpha
        self.global_alpha = max(0.0, min(1.0, float(value)))
        try:
            yield
        finally:
            self.global_alpha = previous

    @contextmanager
    def clip_circle(self, cx: float, cy: float, radius: float) -> Iterator[None]:
        previous = self._clip
        self._clip = (float(cx), float(cy), max(0.0, float(radius)))
        try:
            yield
        finally:
            self._clip = previous

    # ------------------------------------------------------------------
    # pixel access

    def get_pixels(self) -> np.ndarray:
        return np.asarray(self.image, dtype=np.uint8).copy()

    def put_pixels(self, pixels: np.ndarray) -> None:
        self.image.paste(Image.fromarray(pixels.astype(np.uint8), "RGB"), (0, 0))
        self.operations.append("put_pixels")

    # ------------------------------------------------------------------
    # fills

    def fill_rect(self, x: float, y: float, width: float, height: float, paint: Paint) -> None:
        self.operations.append("fill_rect")
        left, right = sorted((x, x + width))
        top, bottom = sorted((y, y + height))
        if right - left <= 0 or bottom - top <= 0:
            return
        if isinstance(paint, str) and self._clip is None:
            ink = to_rgba8(parse_rgba(paint), self.global_alpha)
            if ink[3] > 0:
                self._draw.rectangle(
                    [round(left), round(top), round(right) - 1, round(bottom) - 1],
                    fill=ink,
                )
            return
        self._paint_region((left, top, right, bottom), paint, None)

    def fill_polygon(self, points: Sequence[Point], paint: Paint) -> None:
        self.operations.append("fill_polygon")
        if len(points) < 3:
            return
        if isinstance(paint, str) and self._clip is None:
            ink = to_rgba8(parse_rgba(paint), self.global_alpha)
            if ink[3] > 0:
                self._draw.polygon([(float(px), float(py)) for px, py in points], fill=ink)
            return
        bbox = _points_bbox(points)
        self._paint_region(bbox, paint, lambda draw, dx, dy: draw.polygon(
            [(px - dx, py - dy) for px, py in points], fill=255
        ))

    def fill_circle(self, cx: float, cy: float, radius: float, paint: Paint) -> None:
        self.operations.append("fill_circle")
        if radius <= 0:
            return
        box = (cx - radius, cy - radius, cx + radius, cy + radius)
        if isinstance(paint, str) and self._clip is None:
            ink = to_rgba8(parse_rgba(paint), self.global_alpha)
            if ink[3] > 0:
                self._draw.ellipse(box, fill=ink)
            return
        self._paint_region(box, paint, lambda draw, dx, dy: draw.ellipse(
            (box[0] - dx, box[1] - dy, box[2] - dx, box[3] - dy), fill=255
        ))

    def fill_round_rect(self, x: float, y: float, width: float, height: float, radius: float, paint: Paint) -> None:
        self.operations.append("fill_round_rect")
        box = (x, y, x + width, y + height)
        if isinstance(paint, str) and self._clip is None:
            ink = to_rgba8(parse_rgba(paint), self.global_alpha)
            if ink[3] > 0:
                self._draw.rounded_rectangle(box, radius=radius, fill=ink)
            return
        self._paint_region(box, paint, lambda draw, dx, dy: draw.rounded_rectangle(
            (box[0] - dx, box[1] - dy, box[2] - dx, box[3] - dy), radius=radius, fill=255
        ))

    # ------------------------------------------------------------------
    # strokes

    def stroke_line(
        self,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        color: str,
        width: float = 1.0,
        dash: tuple[float, float] | None = None,
    ) -> None:
        self.operations.append("stroke_line")
        ink = to_rgba8(parse_rgba(color), self.global_alpha)
        if ink[3] <= 0:
            return
        line_width = max(1, int(round(width)))
        if not dash:
            self._draw.line([(x0, y0), (x1, y1)], fill=ink, width=line_width)
            return
        on, off = max(0.5, float(dash[0])), max(0.0, float(dash[1]))
        length = math.hypot(x1 - x0, y1 - y0)
        if length <= 0:
            return
        ux, uy = (x1 - x0) / length, (y1 - y0) / length
        cursor = 0.0
        while cursor < length:
            end = min(length, cursor + on)
            self._draw.line(
                [(x0 + ux * cursor, y0 + uy * cursor), (x0 + ux * end, y0 + uy * end)],
                fill=ink,
                width=line_width,
            )
            cursor = end + off

    def stroke_polygon(self, points: Sequence[Point], color: str, width: float = 1.0) -> None:
        self.operations.append("stroke_polygon")
        ink = to_rgba8(parse_rgba(color), self.global_alpha)
        if ink[3] <= 0 or len(points) < 2:
            return
        closed = [(float(px), float(py)) for px, py in points]
        closed.append(closed[0])
        self._draw.line(closed, fill=ink, width=max(1, int(round(width))), joint="curve")

    def stroke_circle(self, cx: float, cy: float, radius: float, color: str, width: float = 1.0) -> None:
        self.operations.append("stroke_circle")
        ink = to_rgba8(parse_rgba(color), self.global_alpha)
        if ink[3] <= 0 or radius <= 0:
            return
        self._draw.ellipse(
            (cx - radius, cy - radius, cx + radius, cy + radius),
            outline=ink,
            width=max(1, int(round(width))),
        )

    def stroke_round_rect(
        self, x: float, y: float, width: float, height: float, radius: float, color: str, line_width: float = 1.0
    ) -> None:
        self.operations.append("stroke_round_rect")
        ink = to_rgba8(parse_rgba(color), self.global_alpha)
        if ink[3] <= 0:
            return
        self._draw.rounded_rectangle(
            (x, y, x + width, y + height),
            radius=radius,
            outline=ink,
            width=max(1, int(round(line_width))),
        )

    # ------------------------------------------------------------------
    # text and images

    def fill_text(
        self,
        text: str,
        x: float,
        y: float,
        paint: Paint,
        *,
        align: str = "left",
        baseline: str = "top",
    ) -> None:
        self.operations.append("fill_text")
        if not text:
            return
        anchor = _ALIGN_ANCHORS.get(align, "l") + _BASELINE_ANCHORS.get(baseline, "a")
        if isinstance(paint, str) and self._clip is None:
            ink = to_rgba8(parse_rgba(paint), self.global_alpha)
            if ink[3] > 0:
                self._draw.text((x, y), text, font=self.font, fill=ink, anchor=anchor)
            return
        left, top, right, bottom = self.font.getbbox(text, anchor=anchor)
        box = (x + left - 1, y + top - 1, x + right + 1, y + bottom + 1)
        font = self.font
        self._paint_region(box, paint, lambda draw, dx, dy: draw.text(
            (x - dx, y - dy), text, font=font, fill=255, anchor=anchor
        ))

    def draw_image(self, image: Image.Image, x: float, y: float, width: float, height: float) -> None:
        self.operations.append("draw_image")
        target_w = max(1, int(round(width)))
        target_h = max(1, int(round(height)))
        resized = image.convert("RGBA").resize((target_w, target_h), Image.Resampling.LANCZOS)
        left = int(round(x))
        top = int(round(y))
        region = _clamp_box((left, top, left + target_w, top + target_h), self.width, self.height)
        if region is None:
            return
        rx0, ry0, rx1, ry1 = region
        pixels = np.asarray(resized, dtype=np.float32)[ry0 - top : ry1 - top, rx0 - left : rx1 - left]
        alpha = pixels[..., 3] / 255.0 * self.global_alpha
        alpha = alpha * self._clip_mask(region)
        self._paste_layer(region, pixels[..., :3], alpha)

    # ------------------------------------------------------------------
    # internals

    def _clip_mask(self, region: tuple[int, int, int, int]) -> np.ndarray | float:
        if self._clip is None:
            return 1.0
        cx, cy, radius = self._clip
        x0, y0, x1, y1 = region
        ys, xs = np.mgrid[y0:y1, x0:x1].astype(np.float32)
        inside = (xs + 0.5 - cx) ** 2 + (ys + 0.5 - cy) ** 2 <= radius * radius
        return inside.astype(np.float32)

    def _paint_region(self, bbox, paint: Paint, mask_drawer) -> None:
        region = _clamp_box(
            (math.floor(bbox[0]), math.floor(bbox[1]), math.ceil(bbox[2]), math.ceil(bbox[3])),
            self.width,
            self.height,
        )
        if region is None:
            return
        x0, y0, x1, y1 = region
        width, height = x1 - x0, y1 - y0
        if isinstance(paint, _Gradient):
            rgba = paint.render(x0, y0, width, height)
            rgb = rgba[..., :3]
            alpha = rgba[..., 3]
        else:
            r, g, b, a = parse_rgba(paint)
            rgb = np.empty((height, width, 3), dtype=np.float32)
            rgb[...] = (r, g, b)
            alpha = np.full((height, width), a, dtype=np.float32)
        alpha = alpha * self.global_alpha
        if mask_drawer is not None:
            mask = Image.new("L", (width, height), 0)
            mask_drawer(ImageDraw.Draw(mask), x0, y0)
            alpha = alpha * (np.asarray(mask, dtype=np.float32) / 255.0)
        alpha = alpha * self._clip_mask(region)
        self._paste_layer(region, rgb, alpha)

    def _paste_layer(self, region: tuple[int, int, int, int], rgb: np.ndarray, alpha) -> None:
        alpha_array = np.broadcast_to(np.asarray(alpha, dtype=np.float32), rgb.shape[:2])
        if not np.any(alpha_array > 0):
            return
        layer = np.dstack(
            [
                np.clip(np.rint(rgb), 0, 255).astype(np.uint8),
                np.clip(np.rint(alpha_array * 255.0), 0, 255).astype(np.uint8),
            ]
        )
        layer_image = Image.fromarray(layer, "RGBA")
        self.image.paste(layer_image, (region[0], region[1]), layer_image)


def _points_bbox(points: Sequence[Point]) -> tuple[float, float, float, float]:
    xs = [float(px) for px, _ in points]
    ys = [float(py) for _, py in points]
    return (min(xs), min(ys), max(xs) + 1, max(ys) + 1)


def _clamp_box(box, width: int, height: int) -> tuple[int, int, int, int] | None:
    x0 = max(0, int(box[0]))
    y0 = max(0, int(box[1]))
    x1 = min(width, int(box[2]))
    y1 = min(height, int(box[3]))
    if x1 <= x0 or y1 <= y0:
        return None
    return (x0, y0, x1, y1)
