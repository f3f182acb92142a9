"""Isometric platform, floating token badges and the announcement block chain."""
from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from PIL import Image

from socialcard.models import TokenInfo
from socialcard.render.color import hex_to_rgba
from socialcard.render.typography import FAMILY_DISPLAY

if TYPE_CHECKING:
    from socialcard.render.canvas import Canvas

ImageMap = Mapping[str, "Image.Image | None"]

PLATFORM_TOP = "#18141f"
PLATFORM_TOP_HIGHLIGHT = "#1f1a28"
PLATFORM_SIDE = "#0d0a12"
PLATFORM_FRONT = "#08060c"
TOKEN_DISC = "#12101a"

# (dx, dy) in block sizes, scale, opacity
CHAIN_BLOCKS = (
    (-2.2, 0.3, 0.7, 0.4),
    (-0.8, 0.0, 0.85, 0.6),
    (0.7, -0.2, 1.0, 0.8),
    (2.3, 0.1, 0.85, 0.6),
    (3.7, 0.4, 0.7, 0.4),
)


def draw_lens_flare(canvas: Canvas, x: float, y: float, size: float, color: str) -> None:
    core = canvas.create_radial_gradient(x, y, 0, x, y, size)
    core.add_color_stop(0, "rgba(255,255,255,0.9)")
    core.add_color_stop(0.3, hex_to_rgba(color, 0.6))
    core.add_color_stop(0.6, hex_to_rgba(color, 0.2))
    core.add_color_stop(1, "transparent")
    canvas.fill_rect(x - size * 2, y - size * 2, size * 4, size * 4, core)
    canvas.fill_rect(x - size * 3, y - 1, size * 6, 2, hex_to_rgba(color, 0.2))


def draw_platform(canvas: Canvas, x: float, y: float, w: float, accent: str) -> float:
    """Draw the hexagonal pedestal centred on ``x`` and return the y tokens should hover above."""
    pw = w * 0.32
    ph = pw * 0.22
    depth = pw * 0.07

    shadow = canvas.create_radial_gradient(x, y + depth + ph * 0.3, 0, x, y + depth + ph * 0.3, pw * 0.5)
    shadow.add_color_stop(0, "rgba(0, 0, 0, 0.4)")
    shadow.add_color_stop(0.5, "rgba(0, 0, 0, 0.15)")
    shadow.add_color_stop(1, "transparent")
    canvas.fill_rect(x - pw * 0.6, y, pw * 1.2, ph * 2, shadow)

    glow = canvas.create_radial_gradient(x, y + depth, 0, x, y + depth, pw * 0.5)
    glow.add_color_stop(0, hex_to_rgba(accent, 0.28))
    glow.add_color_stop(0.5, hex_to_rgba(accent, 0.08))
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(x - pw * 0.6, y - ph, pw * 1.2, ph * 3, glow)

    top_y = y - depth
    front_y = top_y + ph * 0.5
    outline = hex_to_rgba(accent, 0.35)

    top_face = [
        (x - pw * 0.5, top_y),
        (x - pw * 0.25, top_y - ph * 0.5),
        (x + pw * 0.25, top_y - ph * 0.5),
        (x + pw * 0.5, top_y),
        (x + pw * 0.25, front_y),
        (x - pw * 0.25, front_y),
    ]
    top_fill = canvas.create_linear_gradient(x - pw * 0.5, top_y, x + pw * 0.5, top_y)
    top_fill.add_color_stop(0, PLATFORM_TOP)
    top_fill.add_color_stop(0.5, PLATFORM_TOP_HIGHLIGHT)
    top_fill.add_color_stop(1, PLATFORM_TOP)
    canvas.fill_polygon(top_face, top_fill)
    canvas.stroke_polygon(top_face, outline)

    faces = (
        (
            [(x - pw * 0.5, top_y), (x - pw * 0.25, front_y), (x - pw * 0.25, front_y + depth), (x - pw * 0.5, top_y + depth)],
            PLATFORM_SIDE,
        ),
        (
            [(x - pw * 0.25, front_y), (x + pw * 0.25, front_y), (x + pw * 0.25, front_y + depth), (x - pw * 0.25, front_y + depth)],
            PLATFORM_FRONT,
        ),
        (
            [(x + pw * 0.25, front_y), (x + pw * 0.5, top_y), (x + pw * 0.5, top_y + depth), (x + pw * 0.25, front_y + depth)],
            PLATFORM_SIDE,
        ),
    )
    for points, fill in faces:
        canvas.fill_polygon(points, fill)
        canvas.stroke_polygon(points, outline)

    canvas.stroke_line(x - pw * 0.25, front_y + depth, x + pw * 0.25, front_y + depth, hex_to_rgba(accent, 0.8), width=1.5)
    draw_lens_flare(canvas, x, front_y + depth, w * 0.02, accent)

    return top_y - ph * 0.25


def fallback_glyph(token: TokenInfo) -> str:
    return token.symbol[:1].upper()


def draw_floating_token(
    canvas: Canvas,
    x: float,
    y: float,
    size: float,
    token: TokenInfo,
    images: ImageMap,
    accent: str,
) -> None:
    logo_url = token.resolve_logo_url()
    logo = images.get(logo_url) if logo_url else None

    glow = canvas.create_radial_gradient(x, y, size * 0.4, x, y, size * 0.8)
    glow.add_color_stop(0, hex_to_rgba(accent, 0.2))
    glow.add_color_stop(1, "transparent")
    canvas.fill_circle(x, y, size * 0.8, glow)

    canvas.stroke_circle(x, y, size * 0.52, hex_to_rgba(accent, 0.3), width=1.5)
    canvas.fill_circle(x, y, size * 0.48, TOKEN_DISC)

    radius = size * 0.44
    if logo is not None:
        with canvas.clip_circle(x, y, radius):
            canvas.draw_image(logo, x - radius, y - radius, radius * 2, radius * 2)
        return

    canvas.fill_circle(x, y, radius, token.color)
    canvas.set_font(FAMILY_DISPLAY, 500, size * 0.3)
    canvas.fill_text(fallback_glyph(token), x, y, "#ffffff", align="center", baseline="middle")


def draw_blockchain(canvas: Canvas, x: float, y: float, w: float, accent: str) -> None:
    block = w * 0.06
    depth = block * 0.4
    blocks = [(x + dx * block, y + dy * block, scale, opacity) for dx, dy, scale, opacity in CHAIN_BLOCKS]

    link = hex_to_rgba(accent, 0.2)
    for (x1, y1, s1, _), (x2, y2, s2, _) in zip(blocks, blocks[1:]):
        canvas.stroke_line(x1 + block * s1 * 0.5, y1, x2 - block * s2 * 0.5, y2, link, width=2)

    edge = hex_to_rgba(accent, 0.5)
    for bx, by, scale, opacity in blocks:
        s = block * scale
        d = depth * scale
        with canvas.alpha(opacity):
            top = [(bx - s * 0.5, by - s * 0.3), (bx, by - s * 0.5), (bx + s * 0.5, by - s * 0.3), (bx, by - s * 0.1)]
            top_fill = canvas.create_linear_gradient(bx - s * 0.5, by - s * 0.5, bx + s * 0.5, by)
            top_fill.add_color_stop(0, hex_to_rgba(accent, 0.3))
            top_fill.add_color_stop(1, hex_to_rgba(accent, 0.15))
            canvas.fill_polygon(top, top_fill)
            canvas.stroke_polygon(top, edge)

            left = [(bx - s * 0.5, by - s * 0.3), (bx, by - s * 0.1), (bx, by + d), (bx - s * 0.5, by - s * 0.3 + d)]
            canvas.fill_polygon(left, hex_to_rgba(accent, 0.1))
            canvas.stroke_polygon(left, edge)

            right = [(bx + s * 0.5, by - s * 0.3), (bx, by - s * 0.1), (bx, by + d), (bx + s * 0.5, by - s * 0.3 + d)]
            canvas.fill_polygon(right, hex_to_rgba(accent, 0.05))
            canvas.stroke_polygon(right, edge)

            canvas.set_font(FAMILY_DISPLAY, 600, s * 0.25)
            canvas.fill_text("#", bx, by - s * 0.25, hex_to_rgba(accent, 0.6), align="center", baseline="middle")

    cx = x + block * 0.7
    cy = y - block * 0.2
    glow = canvas.create_radial_gradient(cx, cy, 0, cx, cy, block * 1.5)
    glow.add_color_stop(0, hex_to_rgba(accent, 0.15))
    glow.add_color_stop(0.5, hex_to_rgba(accent, 0.05))
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(x - block * 2, y - block * 2, block * 6, block * 4, glow)
