from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from socialcard.models import GridOptions
from socialcard.render.color import add_noise, hex_to_rgba
from socialcard.render.grid import draw_grid

if TYPE_CHECKING:
    from socialcard.render.canvas import Canvas

NOISE_INTENSITY = 3
SECONDARY_HUE = "#6366F1"


def draw_light_beams(canvas: Canvas, w: float, h: float, accent: str) -> None:
    beam = canvas.create_linear_gradient(w, 0, 0, h)
    beam.add_color_stop(0, hex_to_rgba(accent, 0.05))
    beam.add_color_stop(0.4, hex_to_rgba(accent, 0.015))
    beam.add_color_stop(1, "transparent")
    canvas.fill_polygon([(w * 0.55, 0), (w, 0), (w * 0.45, h), (0, h)], beam)

    beam = canvas.create_linear_gradient(w * 0.8, 0, w * 0.2, h)
    beam.add_color_stop(0, hex_to_rgba(SECONDARY_HUE, 0.025))
    beam.add_color_stop(0.5, hex_to_rgba(SECONDARY_HUE, 0.008))
    beam.add_color_stop(1, "transparent")
    canvas.fill_polygon([(w * 0.72, 0), (w * 0.84, 0), (w * 0.32, h), (w * 0.2, h)], beam)


def apply_noise(canvas: Canvas, intensity: float, rng: np.random.Generator | None = None) -> None:
    if intensity <= 0:
        return
    canvas.put_pixels(add_noise(canvas.get_pixels(), intensity, rng))


def draw_background(
    canvas: Canvas,
    w: float,
    h: float,
    accent: str,
    grid: GridOptions,
    *,
    noise_intensity: float = NOISE_INTENSITY,
    rng: np.random.Generator | None = None,
) -> None:
    """Paint the full backdrop: base gradient, ambient glows, grid, light beams, then film noise."""
    base = canvas.create_radial_gradient(w * 0.5, h * 0.5, 0, w * 0.5, h * 0.5, w * 0.8)
    base.add_color_stop(0, "#0c0a12")
    base.add_color_stop(1, "#06050a")
    canvas.fill_rect(0, 0, w, h, base)

    ambient = canvas.create_radial_gradient(w * 0.8, h * 0.15, 0, w * 0.8, h * 0.15, w * 0.5)
    ambient.add_color_stop(0, hex_to_rgba(accent, 0.12))
    ambient.add_color_stop(0.5, hex_to_rgba(accent, 0.03))
    ambient.add_color_stop(1, "transparent")
    canvas.fill_rect(0, 0, w, h, ambient)

    ambient = canvas.create_radial_gradient(w * 0.2, h * 0.85, 0, w * 0.2, h * 0.85, w * 0.35)
    ambient.add_color_stop(0, hex_to_rgba(SECONDARY_HUE, 0.06))
    ambient.add_color_stop(1, "transparent")
    canvas.fill_rect(0, 0, w, h, ambient)

    draw_grid(canvas, w, h, accent, grid)
    draw_light_beams(canvas, w, h, accent)
    apply_noise(canvas, noise_intensity, rng)
