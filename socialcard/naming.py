from __future__ import annotations

import re
import time
from pathlib import Path

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')

EXPORT_PREFIX = "rarecanvas"


def sanitize_token(value: str | None, fallback: str = "NA") -> str:
    text = (value or "").strip()
    if not text:
        text = fallback
    text = INVALID_FILENAME_CHARS.sub("_", text)
    text = re.sub(r"\s+", "_", text)
    text = text.strip(" ._")
    return text or fallback


def sanitize_filename(value: str, fallback: str = "output") -> str:
    text = INVALID_FILENAME_CHARS.sub("_", value).strip()
    text = text.strip(" .")
    return text or fallback


def build_export_name(template: str, timestamp_ms: int | None = None, prefix: str = EXPORT_PREFIX) -> str:
    """``rarecanvas-<template>-<epoch ms>.png``, the download name the editor uses."""
    stamp = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    name = f"{sanitize_token(prefix, 'card')}-{sanitize_token(template, 'card')}-{stamp}.png"
    return sanitize_filename(name, fallback=f"card-{stamp}.png")


def build_output_name(source: Path, template: str, size: str) -> str:
    """Batch output name for a card description file: ``<stem>__<template>_<size>.png``."""
    stem = sanitize_token(source.stem, fallback="card")
    return sanitize_filename(
        f"{stem}__{sanitize_token(template, 'card')}_{sanitize_token(size)}.png",
        fallback=f"{stem}.png",
    )
