from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping

import numpy as np
from PIL import Image

from socialcard.assets.resolver import ImageCache, ImageResolver, collect_image_urls
from socialcard.config import DEFAULT_CONFIG, get_asset_root
from socialcard.constants import DEFAULT_ACCENT_COLOR
from socialcard.models import TemplateData
from socialcard.render.background import NOISE_INTENSITY, draw_background
from socialcard.render.canvas import Canvas
from socialcard.render.color import safe_hex_color
from socialcard.render.footer import draw_footer
from socialcard.render.templates import draw_template
from socialcard.render.typography import FontBook

LOGGER = logging.getLogger(__name__)


def draw_card(
    canvas: Canvas | None,
    data: TemplateData,
    images: Mapping[str, Image.Image | None] | None = None,
    *,
    brand_logo_url: str | None = DEFAULT_CONFIG["brand_logo_url"],
    noise_intensity: float = NOISE_INTENSITY,
    rng: np.random.Generator | None = None,
) -> bool:
    """Draw one full card onto ``canvas``; returns ``False`` without drawing when there is no canvas."""
    if canvas is None:
        LOGGER.debug("no drawing surface, skipped render of %s", data.template)
        return False
    images = images or {}
    w, h = canvas.width, canvas.height
    accent = safe_hex_color(data.accent_color, DEFAULT_ACCENT_COLOR)
    if accent != data.accent_color:
        data = dataclasses.replace(data, accent_color=accent)

    draw_background(canvas, w, h, data.accent_color, data.grid, noise_intensity=noise_intensity, rng=rng)
    draw_template(canvas, data, w, h, images)
    logo = images.get(brand_logo_url) if brand_logo_url else None
    draw_footer(canvas, w, h, data.show_disclaimer, logo)
    return True


def _font_book(cfg: Mapping[str, Any]) -> FontBook:
    fonts = cfg.get("fonts") or {}
    return FontBook(fonts if isinstance(fonts, dict) else None)


def render_card(
    data: TemplateData,
    images: Mapping[str, Image.Image | None] | None = None,
    *,
    noise_seed: int | None = None,
    config: Mapping[str, Any] | None = None,
) -> Image.Image:
    """Render synchronously with an already resolved ``url -> image`` map."""
    cfg = config or DEFAULT_CONFIG
    width, height = data.dimensions
    canvas = Canvas(width, height, fonts=_font_book(cfg))
    seed = noise_seed if noise_seed is not None else cfg.get("noise_seed")
    rng = np.random.default_rng(seed) if seed is not None else None
    draw_card(
        canvas,
        data,
        images,
        brand_logo_url=cfg.get("brand_logo_url"),
        noise_intensity=float(cfg.get("noise_intensity", NOISE_INTENSITY)),
        rng=rng,
    )
    return canvas.image.convert("RGBA")


class CardRenderer:
    """Resolves every logo a card needs, waits for the batch, then draws."""

    def __init__(self, config: Mapping[str, Any] | None = None, cache: ImageCache | None = None) -> None:
        self.config = dict(config or DEFAULT_CONFIG)
        self.resolver = ImageResolver(
            cache=cache,
            asset_root=get_asset_root(self.config),
            workers=int(self.config.get("loader_workers") or 1),
            timeout=float(self.config.get("load_timeout") or 10.0),
        )

    def image_urls(self, data: TemplateData) -> list[str]:
        return collect_image_urls(data, self.config.get("brand_logo_url"))

    def render(self, data: TemplateData, *, noise_seed: int | None = None) -> Image.Image:
        batch = self.resolver.resolve(self.image_urls(data))
        # 单个加载有自己的超时，这里多留一点余量
        wait = float(self.config.get("load_timeout") or 10.0) * 2
        try:
            images = batch.result(timeout=wait)
        except TimeoutError:
            images = batch.snapshot()
            batch.cancel()
            missing = [url for url, image in images.items() if image is None]
            LOGGER.warning("images still loading after %.1fs, rendering without: %s", wait, ", ".join(missing))
        return render_card(data, images, noise_seed=noise_seed, config=self.config)

    def close(self) -> None:
        self.resolver.close()

    def __enter__(self) -> "CardRenderer":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()
