"""Backdrop grid variants drawn between the base gradient and the light beams."""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable

from socialcard.models import GridOptions
from socialcard.render.color import hex_to_rgba

if TYPE_CHECKING:
    from socialcard.render.canvas import Canvas

LOGGER = logging.getLogger(__name__)

DENSITY_LINES = {1: 8, 2: 12, 3: 18}
HEX_SIZES = {1: 0.08, 2: 0.055, 3: 0.038}


def density_tier(density) -> int:
    """Clamp a density value onto 1, 2 or 3; anything unparsable counts as 1."""
    try:
        value = int(density)
    except (TypeError, ValueError):
        return 1
    return max(1, min(3, value))


def density_line_count(density) -> int:
    return DENSITY_LINES[density_tier(density)]


def draw_perspective_grid(canvas: Canvas, w: float, h: float, accent: str, lines: int, alpha: float) -> None:
    horizon = h * 0.45
    vanish_x = w * 0.5

    # 地面横线，越靠近地平线越淡
    for i in range(lines + 1):
        progress = i / lines
        y = horizon + (h - horizon) * math.pow(progress, 1.8)
        canvas.stroke_line(0, y, w, y, hex_to_rgba(accent, alpha * (0.15 + progress * 0.85)))

    spread = w * 0.8
    for i in range(-lines, lines + 1):
        bottom_x = vanish_x + (i / lines) * spread
        line_alpha = alpha * 0.5 * (1 - abs(i / lines) * 0.5)
        canvas.stroke_line(vanish_x, horizon, bottom_x, h, hex_to_rgba(accent, line_alpha))

    glow = canvas.create_radial_gradient(vanish_x, horizon, 0, vanish_x, horizon, w * 0.3)
    glow.add_color_stop(0, hex_to_rgba(accent, alpha * 0.3))
    glow.add_color_stop(0.5, hex_to_rgba(accent, alpha * 0.1))
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(0, horizon - h * 0.15, w, h * 0.3, glow)


def draw_isometric_grid(canvas: Canvas, w: float, h: float, accent: str, lines: int, alpha: float) -> None:
    cell = w / (lines * 1.5)
    run = h / math.tan(math.pi / 6)
    span = lines * 2

    for direction in (1, -1):
        for i in range(-span, span + 1):
            start_x = w * 0.5 + i * cell
            line_alpha = alpha * (0.3 + 0.5 * (1 - abs(i / span)))
            canvas.stroke_line(
                start_x - direction * run,
                h,
                start_x + direction * run,
                0,
                hex_to_rgba(accent, line_alpha),
            )

    glow = canvas.create_radial_gradient(w * 0.5, h * 0.5, 0, w * 0.5, h * 0.5, w * 0.4)
    glow.add_color_stop(0, hex_to_rgba(accent, alpha * 0.2))
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(0, 0, w, h, glow)


def draw_horizontal_grid(canvas: Canvas, w: float, h: float, accent: str, lines: int, alpha: float) -> None:
    center_y = h * 0.5
    spacing = h / (lines + 1)

    for i in range(1, lines + 1):
        y_up = center_y - i * spacing * 0.8
        y_down = center_y + i * spacing * 0.8
        color = hex_to_rgba(accent, alpha * 0.7 * (1 - (i - 1) / lines))
        if y_up > 0:
            canvas.stroke_line(w * 0.05, y_up, w * 0.95, y_up, color)
        if y_down < h:
            canvas.stroke_line(w * 0.05, y_down, w * 0.95, y_down, color)

    canvas.stroke_line(w * 0.1, center_y, w * 0.9, center_y, hex_to_rgba(accent, alpha * 0.8), width=2)

    band = canvas.create_linear_gradient(0, center_y - 20, 0, center_y + 20)
    band.add_color_stop(0, "transparent")
    band.add_color_stop(0.5, hex_to_rgba(accent, alpha * 0.15))
    band.add_color_stop(1, "transparent")
    canvas.fill_rect(0, center_y - 30, w, 60, band)


def draw_radial_grid(canvas: Canvas, w: float, h: float, accent: str, lines: int, alpha: float) -> None:
    cx = w * 0.5
    cy = h * 0.5
    max_radius = max(w, h) * 0.6

    for i in range(1, lines + 1):
        radius = (i / lines) * max_radius
        canvas.stroke_circle(cx, cy, radius, hex_to_rgba(accent, alpha * (0.3 + 0.5 * (i / lines))))

    rays = lines * 2
    ray_color = hex_to_rgba(accent, alpha * 0.3)
    for i in range(rays):
        angle = (i / rays) * math.pi * 2
        canvas.stroke_line(cx, cy, cx + math.cos(angle) * max_radius, cy + math.sin(angle) * max_radius, ray_color)

    glow = canvas.create_radial_gradient(cx, cy, 0, cx, cy, max_radius * 0.3)
    glow.add_color_stop(0, hex_to_rgba(accent, alpha * 0.25))
    glow.add_color_stop(0.5, hex_to_rgba(accent, alpha * 0.1))
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(0, 0, w, h, glow)


def hex_cells(w: float, h: float, density) -> list[tuple[float, float, float]]:
    """Return ``(x, y, distance)`` for every lattice hexagon inside the fade radius."""
    size = w * HEX_SIZES[density_tier(density)]
    hex_height = size * math.sqrt(3)
    hex_width = size * 2
    cx = w * 0.5
    cy = h * 0.5
    max_dist = max(w, h) * 0.7

    cells: list[tuple[float, float, float]] = []
    for row in range(-10, 11):
        for col in range(-10, 11):
            x = cx + col * hex_width * 0.75
            # 奇数列错开半格，负数列向上错开
            y = cy + row * hex_height + math.fmod(col, 2) * hex_height * 0.5
            dist = math.hypot(x - cx, y - cy)
            if dist > max_dist:
                continue
            cells.append((x, y, dist))
    return cells


def draw_hex_grid(canvas: Canvas, w: float, h: float, accent: str, density, alpha: float) -> None:
    size = w * HEX_SIZES[density_tier(density)]
    max_dist = max(w, h) * 0.7

    for x, y, dist in hex_cells(w, h, density):
        points = []
        for i in range(6):
            angle = (math.pi / 3) * i + math.pi / 6
            points.append((x + size * 0.9 * math.cos(angle), y + size * 0.9 * math.sin(angle)))
        canvas.stroke_polygon(points, hex_to_rgba(accent, alpha * (0.2 + 0.6 * (1 - dist / max_dist))))

    glow = canvas.create_radial_gradient(w * 0.5, h * 0.5, 0, w * 0.5, h * 0.5, max_dist * 0.4)
    glow.add_color_stop(0, hex_to_rgba(accent, alpha * 0.2))
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(0, 0, w, h, glow)


_LINE_GRIDS: dict[str, Callable[..., None]] = {
    "perspective": draw_perspective_grid,
    "isometric": draw_isometric_grid,
    "horizontal": draw_horizontal_grid,
    "radial": draw_radial_grid,
}


def draw_grid(canvas: Canvas, w: float, h: float, accent: str, grid: GridOptions) -> None:
    style = grid.style
    if style == "none":
        return
    if style == "hex":
        draw_hex_grid(canvas, w, h, accent, grid.density, grid.alpha)
        return
    routine = _LINE_GRIDS.get(style)
    if routine is None:
        LOGGER.debug("unknown grid style %r, skipped", style)
        return
    routine(canvas, w, h, accent, density_line_count(grid.density), grid.alpha)
