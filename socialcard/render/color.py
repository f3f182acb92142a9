from __future__ import annotations

import re

import numpy as np
from PIL import ImageColor

RGBA = tuple[int, int, int, float]

TRANSPARENT: RGBA = (0, 0, 0, 0.0)

_RGBA_PATTERN = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+(?:e-?\d+)?)\s*)?\)$",
    re.IGNORECASE,
)


def hex_to_rgba(hex_color: str, alpha: float) -> str:
    """Convert ``#RRGGBB`` (or shorthand ``#RGB``) plus an alpha in [0, 1] to a ``rgba(r,g,b,a)`` paint string."""
    r, g, b = ImageColor.getrgb((hex_color or "").strip())[:3]
    return f"rgba({r},{g},{b},{alpha})"


def parse_rgba(text: str) -> RGBA:
    """Parse a paint string (``rgba()``, ``rgb()``, hex, named, ``transparent``)."""
    value = (text or "").strip()
    if not value or value.lower() == "transparent":
        return TRANSPARENT
    match = _RGBA_PATTERN.match(value)
    if match:
        r, g, b = (max(0, min(255, int(match.group(i)))) for i in (1, 2, 3))
        alpha = float(match.group(4)) if match.group(4) is not None else 1.0
        return (r, g, b, max(0.0, min(1.0, alpha)))
    rgb = ImageColor.getrgb(value)
    if len(rgb) == 4:
        return (int(rgb[0]), int(rgb[1]), int(rgb[2]), rgb[3] / 255.0)
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]), 1.0)


def safe_hex_color(value: str | None, fallback: str) -> str:
    text = (value or "").strip()
    if not text:
        return fallback
    try:
        rgb = ImageColor.getrgb(text)
    except ValueError:
        return fallback
    return "#{:02X}{:02X}{:02X}".format(int(rgb[0]), int(rgb[1]), int(rgb[2]))


def to_rgba8(color: RGBA, global_alpha: float = 1.0) -> tuple[int, int, int, int]:
    r, g, b, a = color
    alpha = int(round(max(0.0, min(1.0, a * global_alpha)) * 255))
    return (r, g, b, alpha)


def add_noise(pixels: np.ndarray, intensity: float, rng: np.random.Generator | None = None) -> np.ndarray:
    """Add the same uniform ``[-intensity/2, intensity/2)`` offset to each pixel's RGB channels.

    ``pixels`` is an ``(h, w, 3)`` uint8 array; a new clamped uint8 array is returned.
    """
    if intensity <= 0:
        return pixels.copy()
    generator = rng if rng is not None else np.random.default_rng()
    height, width = pixels.shape[:2]
    noise = (generator.random((height, width, 1), dtype=np.float32) - 0.5) * float(intensity)
    noisy = pixels[..., :3].astype(np.float32) + noise
    return np.clip(np.rint(noisy), 0, 255).astype(np.uint8)
