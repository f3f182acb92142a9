from __future__ import annotations

import base64
import io
from pathlib import Path

from PIL import Image

from socialcard.models import size_dimensions
from socialcard.naming import build_export_name

__all__ = [
    "build_export_name",
    "display_size",
    "preview_scale",
    "save_png",
    "to_data_url",
    "to_png_bytes",
]

PREVIEW_MAX_WIDTH = 800
PREVIEW_MAX_HEIGHT = 600


def to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(image: Image.Image) -> str:
    encoded = base64.b64encode(to_png_bytes(image)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def save_png(image: Image.Image, path: Path) -> Path:
    path = Path(path)
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    return path


def preview_scale(size: str) -> float:
    width, height = size_dimensions(size)
    return min(PREVIEW_MAX_WIDTH / width, PREVIEW_MAX_HEIGHT / height, 1.0)


def display_size(size: str, scale: float = 1.0) -> tuple[int, int]:
    """On-screen size for a preset; scaling never changes the rendered pixels."""
    width, height = size_dimensions(size)
    return (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
