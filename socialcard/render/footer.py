from __future__ import annotations

from typing import TYPE_CHECKING

from PIL import Image

from socialcard import constants
from socialcard.render.typography import (
    FAMILY_DISPLAY,
    FAMILY_MONO,
    SAFE_MARGIN,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
    TEXT_TERTIARY,
)

if TYPE_CHECKING:
    from socialcard.render.canvas import Canvas

DISCLAIMER_COLOR = "rgba(255, 255, 255, 0.38)"


def draw_footer(
    canvas: Canvas,
    w: float,
    h: float,
    show_disclaimer: bool,
    logo: Image.Image | None = None,
    *,
    disclaimer: str = constants.DEFAULT_DISCLAIMER,
) -> None:
    """Brand strip along the bottom edge; the logo is only drawn when its bitmap resolved."""
    margin = w * SAFE_MARGIN + w * 0.015
    footer_y = h * 0.9

    canvas.stroke_line(margin, footer_y - h * 0.025, w - margin, footer_y - h * 0.025, "rgba(255, 255, 255, 0.08)")

    logo_size = w * 0.032
    text_x = margin
    if logo is not None:
        center_y = footer_y + h * 0.008
        with canvas.clip_circle(margin + logo_size / 2, center_y, logo_size / 2):
            canvas.draw_image(logo, margin, center_y - logo_size / 2, logo_size, logo_size)
        text_x = margin + logo_size + w * 0.012

    canvas.set_font(FAMILY_DISPLAY, 600, w * 0.014)
    canvas.fill_text(constants.BRAND_TITLE, text_x, footer_y - h * 0.005, TEXT_PRIMARY)

    canvas.set_font(FAMILY_MONO, 400, w * 0.0095)
    canvas.fill_text(constants.BRAND_DESCRIPTION, text_x, footer_y + h * 0.013, TEXT_TERTIARY)

    canvas.set_font(FAMILY_MONO, 500, w * 0.011)
    canvas.fill_text(
        constants.BRAND_WEBSITE,
        w - margin,
        footer_y + h * 0.008,
        TEXT_SECONDARY,
        align="right",
        baseline="middle",
    )

    if show_disclaimer:
        canvas.set_font(FAMILY_MONO, 400, w * 0.0075)
        canvas.fill_text(disclaimer, w * 0.5, h * 0.96, DISCLAIMER_COLOR, align="center")
