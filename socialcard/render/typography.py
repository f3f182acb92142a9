from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from PIL import ImageFont

from socialcard.render.color import hex_to_rgba

if TYPE_CHECKING:
    from socialcard.render.canvas import Canvas

_FONT_FILE_SUFFIXES = {".ttf", ".ttc", ".otf", ".otc"}

FAMILY_DISPLAY = "display"
FAMILY_MONO = "mono"

# Type scale relative to canvas width (1080px canvas: headline ~81px, kicker ~19px).
TYPO = {
    "headline": {"size": 0.075, "weight": 700, "line_height": 1.05, "tracking": 0.008},
    "subhead": {"size": 0.033, "weight": 500, "line_height": 1.2, "opacity": 0.85},
    "kicker": {"size": 0.018, "weight": 500, "tracking": 0.1, "opacity": 0.65},
    "body": {"size": 0.022, "weight": 400, "line_height": 1.4},
    "cta": {"size": 0.022, "weight": 500, "tracking": 0.015, "opacity": 0.7},
    "caption": {"size": 0.015, "weight": 400, "line_height": 1.3},
}
SAFE_MARGIN = 0.06

TEXT_PRIMARY = "rgba(255, 255, 255, 0.95)"
TEXT_SECONDARY = "rgba(255, 255, 255, 0.7)"
TEXT_TERTIARY = "rgba(255, 255, 255, 0.5)"
TEXT_SUBHEAD = f"rgba(255, 255, 255, {TYPO['subhead']['opacity']})"

_PREFERRED_FONT_STEMS = {
    (FAMILY_DISPLAY, False): ("Geist-Regular", "Inter-Regular", "DejaVuSans", "LiberationSans-Regular", "Arial"),
    (FAMILY_DISPLAY, True): ("Geist-Bold", "Inter-Bold", "DejaVuSans-Bold", "LiberationSans-Bold", "Arial Bold"),
    (FAMILY_MONO, False): ("GeistMono-Regular", "JetBrainsMono-Regular", "DejaVuSansMono", "LiberationMono-Regular"),
    (FAMILY_MONO, True): ("GeistMono-Bold", "JetBrainsMono-Bold", "DejaVuSansMono-Bold", "LiberationMono-Bold"),
}


def _system_font_candidates(family: str, bold: bool) -> list[Path]:
    system = platform.system().lower()
    mono = family == FAMILY_MONO
    if "windows" in system:
        fonts = Path(os.environ.get("WINDIR", r"C:\Windows")) / "Fonts"
        if mono:
            return [fonts / ("consolab.ttf" if bold else "consola.ttf"), fonts / "cour.ttf"]
        return [fonts / ("segoeuib.ttf" if bold else "segoeui.ttf"), fonts / ("arialbd.ttf" if bold else "arial.ttf")]
    if "darwin" in system:
        if mono:
            return [Path("/System/Library/Fonts/SFNSMono.ttf"), Path("/System/Library/Fonts/Menlo.ttc")]
        return [Path("/System/Library/Fonts/Helvetica.ttc"), Path("/Library/Fonts/Arial Unicode.ttf")]
    dejavu = Path("/usr/share/fonts/truetype/dejavu")
    liberation = Path("/usr/share/fonts/truetype/liberation")
    if mono:
        return [
            dejavu / ("DejaVuSansMono-Bold.ttf" if bold else "DejaVuSansMono.ttf"),
            liberation / ("LiberationMono-Bold.ttf" if bold else "LiberationMono-Regular.ttf"),
        ]
    return [
        dejavu / ("DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"),
        liberation / ("LiberationSans-Bold.ttf" if bold else "LiberationSans-Regular.ttf"),
    ]


def _system_font_directories() -> list[Path]:
    system = platform.system().lower()
    roots: list[Path] = []
    if "windows" in system:
        windows_dir = Path(os.environ.get("WINDIR", r"C:\Windows"))
        roots.append(windows_dir / "Fonts")
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            roots.append(Path(local_app_data) / "Microsoft" / "Windows" / "Fonts")
    elif "darwin" in system:
        roots.extend(
            [
                Path("/System/Library/Fonts"),
                Path("/Library/Fonts"),
                Path.home() / "Library" / "Fonts",
            ]
        )
    else:
        roots.extend(
            [
                Path("/usr/share/fonts"),
                Path("/usr/local/share/fonts"),
                Path.home() / ".fonts",
                Path.home() / ".local" / "share" / "fonts",
            ]
        )
    return roots


@lru_cache(maxsize=1)
def list_available_font_paths() -> dict[str, Path]:
    """Map lower-cased font file stems to paths for every font under the system font roots."""
    available: dict[str, Path] = {}
    for root in _system_font_directories():
        try:
            if not root.exists() or not root.is_dir():
                continue
        except OSError:
            continue
        for dir_path, _dir_names, file_names in os.walk(root, onerror=lambda _err: None):
            for file_name in file_names:
                candidate = Path(dir_path) / file_name
                if candidate.suffix.lower() not in _FONT_FILE_SUFFIXES:
                    continue
                available.setdefault(candidate.stem.lower(), candidate)
    return available


@lru_cache(maxsize=256)
def load_font(font_path: Path | None, size: int, family: str = FAMILY_DISPLAY, bold: bool = False):
    candidates: list[Path] = []
    if font_path:
        candidates.append(font_path)
    candidates.extend(_system_font_candidates(family, bold))
    installed = list_available_font_paths()
    for stem in _PREFERRED_FONT_STEMS.get((family, bold), ()):
        hit = installed.get(stem.lower())
        if hit is not None:
            candidates.append(hit)
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


class FontBook:
    """Resolves ``(family, weight, size)`` to a Pillow font, honouring configured font files."""

    def __init__(self, font_paths: dict[str, str | Path | None] | None = None) -> None:
        self._paths: dict[str, Path] = {}
        for key, value in (font_paths or {}).items():
            if value:
                self._paths[str(key)] = Path(value).expanduser()

    def get(self, family: str, weight: int, size: float):
        bold = int(weight) >= 600
        family = family if family in (FAMILY_DISPLAY, FAMILY_MONO) else FAMILY_DISPLAY
        explicit = self._paths.get(f"{family}_bold") if bold else None
        explicit = explicit or self._paths.get(family)
        return load_font(explicit, max(1, int(round(size))), family, bold)


def wrap_text(font, text: str, max_width: float) -> list[str]:
    """Greedy word wrap: start a new line whenever the next word would overflow ``max_width``."""
    clean = (text or "").strip()
    if not clean:
        return []
    lines: list[str] = []
    line = ""
    for word in clean.split(" "):
        candidate = f"{line}{word} "
        if font.getlength(candidate) > max_width and line:
            lines.append(line.strip())
            line = f"{word} "
        else:
            line = candidate
    lines.append(line.strip())
    return lines


@dataclass(slots=True)
class TrackedLayout:
    chars: list[str]
    advances: list[float]
    gap: float
    total_width: float
    start_x: float

    def positions(self) -> list[float]:
        xs: list[float] = []
        cursor = self.start_x
        for advance in self.advances:
            xs.append(cursor)
            cursor += advance + self.gap
        return xs


def align_start(x: float, width: float, align: str) -> float:
    if align == "center":
        return x - width / 2
    if align == "right":
        return x - width
    return x


def measure_tracked(canvas: Canvas, text: str, x: float, tracking: float, align: str = "left") -> TrackedLayout:
    """Lay out ``text`` with ``tracking * font_size`` between characters using the canvas font."""
    chars = list(text)
    gap = canvas.font_size * tracking
    advances = [canvas.measure_text(char) for char in chars]
    total = sum(advances) + gap * max(0, len(chars) - 1)
    return TrackedLayout(
        chars=chars,
        advances=advances,
        gap=gap,
        total_width=total,
        start_x=align_start(x, total, align),
    )


def _span_gradient(canvas: Canvas, colors: Sequence[str], start_x: float, width: float, y: float):
    grad = canvas.create_linear_gradient(start_x, y, start_x + width, y)
    grad.add_color_stop(0, colors[0])
    grad.add_color_stop(1, colors[1])
    return grad


def draw_tracked(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    *,
    tracking: float,
    paint: str,
    align: str = "left",
    gradient: Sequence[str] | None = None,
    baseline: str = "top",
) -> TrackedLayout:
    layout = measure_tracked(canvas, text, x, tracking, align)
    fill = _span_gradient(canvas, gradient, layout.start_x, layout.total_width, y) if gradient else paint
    for char, char_x in zip(layout.chars, layout.positions()):
        canvas.fill_text(char, char_x, y, fill, align="left", baseline=baseline)
    return layout


def draw_headline(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    w: float,
    *,
    gradient: Sequence[str] | None = None,
    align: str = "left",
    scale: float = 1.0,
    glow: bool = True,
) -> float:
    spec = TYPO["headline"]
    size = w * spec["size"] * scale
    canvas.set_font(FAMILY_DISPLAY, spec["weight"], size)

    if glow:
        halo = canvas.create_radial_gradient(x, y + size * 0.5, 0, x, y + size * 0.5, size * 2.5)
        halo.add_color_stop(0, "rgba(255, 255, 255, 0.04)")
        halo.add_color_stop(0.5, "rgba(255, 255, 255, 0.015)")
        halo.add_color_stop(1, "transparent")
        canvas.fill_rect(x - size * 3, y - size * 0.5, size * 6, size * 2, halo)

    tracking = spec["tracking"]
    if tracking > 0:
        draw_tracked(canvas, text, x, y, tracking=tracking, paint=TEXT_PRIMARY, align=align, gradient=gradient)
    else:
        width = canvas.measure_text(text)
        start = align_start(x, width, align)
        fill = _span_gradient(canvas, gradient, start, width, y) if gradient else TEXT_PRIMARY
        canvas.fill_text(text, start, y, fill)
    return y + size * spec["line_height"]


def draw_subhead(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    w: float,
    *,
    color: str = TEXT_SECONDARY,
    align: str = "left",
    scale: float = 1.0,
) -> float:
    spec = TYPO["subhead"]
    size = w * spec["size"] * scale
    canvas.set_font(FAMILY_DISPLAY, spec["weight"], size)
    canvas.fill_text(text, x, y, color, align=align)
    return y + size * spec["line_height"]


def draw_body(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    w: float,
    *,
    color: str = TEXT_TERTIARY,
    align: str = "left",
    max_width: float | None = None,
) -> float:
    spec = TYPO["body"]
    size = w * spec["size"]
    line_height = size * spec["line_height"]
    canvas.set_font(FAMILY_DISPLAY, spec["weight"], size)
    lines = wrap_text(canvas.font, text, max_width) if max_width else [text]
    cursor = y
    for line in lines:
        canvas.fill_text(line, x, cursor, color, align=align)
        cursor += line_height
    return max(cursor, y + line_height)


def draw_label(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    w: float,
    *,
    color: str | None = None,
    align: str = "left",
) -> float:
    spec = TYPO["kicker"]
    size = w * spec["size"]
    canvas.set_font(FAMILY_MONO, spec["weight"], size)
    paint = color or f"rgba(255, 255, 255, {spec['opacity']})"
    draw_tracked(canvas, text.upper(), x, y, tracking=spec["tracking"], paint=paint, align=align)
    return y + size * 1.3


def draw_cta(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    w: float,
    *,
    align: str = "left",
    arrow: bool = True,
) -> float:
    spec = TYPO["cta"]
    size = w * spec["size"]
    display_text = f"{text} ↗" if arrow else text
    canvas.set_font(FAMILY_MONO, spec["weight"], size)
    paint = f"rgba(255, 255, 255, {spec['opacity']})"
    draw_tracked(canvas, display_text, x, y, tracking=spec["tracking"], paint=paint, align=align)
    return y + size * 1.4


def draw_icon_badge(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    w: float,
    accent: str,
    *,
    align: str = "left",
) -> None:
    size = w * 0.012
    icon_size = size * 1.1
    gap = size * 0.5

    canvas.set_font(FAMILY_MONO, 500, size)
    total = icon_size + gap + canvas.measure_text(text)
    start = align_start(x, total, align)

    canvas.fill_round_rect(start, y - icon_size / 2, icon_size, icon_size, 3, hex_to_rgba(accent, 0.15))
    canvas.stroke_round_rect(start, y - icon_size / 2, icon_size, icon_size, 3, hex_to_rgba(accent, 0.3))
    canvas.fill_circle(start + icon_size / 2, y, icon_size * 0.2, accent)

    canvas.fill_text(text, start + icon_size + gap, y, TEXT_SECONDARY, align="left", baseline="middle")
