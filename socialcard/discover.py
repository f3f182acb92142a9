from __future__ import annotations

from pathlib import Path
from typing import Iterable

from socialcard.constants import CARD_FILE_EXTENSIONS


def _normalize_extensions(extensions: Iterable[str] | None) -> set[str]:
    if not extensions:
        return set(CARD_FILE_EXTENSIONS)
    normalized: set[str] = set()
    for ext in extensions:
        if not ext:
            continue
        ext = ext.lower()
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return normalized


def discover_cards(
    input_path: Path,
    recursive: bool = False,
    extensions: Iterable[str] | None = None,
) -> list[Path]:
    """Card description files under ``input_path`` (or the path itself when it is one)."""
    exts = _normalize_extensions(extensions)
    if input_path.is_file():
        return [input_path] if input_path.suffix.lower() in exts else []
    if not input_path.exists():
        return []
    pattern = input_path.rglob("*") if recursive else input_path.iterdir()
    return sorted(p for p in pattern if p.is_file() and p.suffix.lower() in exts)
