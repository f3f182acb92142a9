from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from socialcard.constants import (
    DEFAULT_ACCENT_COLOR,
    DEFAULT_GRID_DENSITY,
    DEFAULT_GRID_OPACITY,
    DEFAULT_GRID_STYLE,
    DEFAULT_SIZE,
    IMAGE_SIZES,
    TOKEN_LOGO_TEMPLATE,
)


@dataclass(frozen=True, slots=True)
class TokenInfo:
    symbol: str
    name: str = ""
    color: str = DEFAULT_ACCENT_COLOR
    color_secondary: str | None = None
    asset_id: str | None = None
    logo_url: str | None = None
    precision: int | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.symbol

    def resolve_logo_url(self) -> str | None:
        """Explicit ``logo_url`` wins, then the local ``/tokens/<symbol>.png`` convention."""
        if self.logo_url:
            return self.logo_url
        if self.symbol:
            return TOKEN_LOGO_TEMPLATE.format(symbol=self.symbol.lower())
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "color": self.color,
            "color_secondary": self.color_secondary,
            "asset_id": self.asset_id,
            "logo_url": self.logo_url,
            "precision": self.precision,
        }


@dataclass(frozen=True, slots=True)
class GridOptions:
    style: str = DEFAULT_GRID_STYLE
    opacity: float = DEFAULT_GRID_OPACITY
    density: int = DEFAULT_GRID_DENSITY

    @property
    def alpha(self) -> float:
        # 非 none 的网格永远不会完全透明
        return max(0.1, float(self.opacity) / 100.0)


@dataclass(frozen=True, slots=True)
class TemplateData:
    template: str
    fields: dict[str, str] = field(default_factory=dict)
    tokens: tuple[TokenInfo, ...] = ()
    accent_color: str = DEFAULT_ACCENT_COLOR
    grid: GridOptions = field(default_factory=GridOptions)
    show_disclaimer: bool = True
    size: str = DEFAULT_SIZE

    def get_field(self, key: str, default: str) -> str:
        value = self.fields.get(key)
        if value is None:
            return default
        text = str(value)
        return text if text else default

    def token(self, index: int) -> TokenInfo | None:
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    @property
    def dimensions(self) -> tuple[int, int]:
        return size_dimensions(self.size)

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template,
            "size": self.size,
            "fields": dict(self.fields),
            "tokens": [token.to_dict() for token in self.tokens],
            "accent_color": self.accent_color,
            "show_disclaimer": self.show_disclaimer,
            "grid": {
                "style": self.grid.style,
                "opacity": self.grid.opacity,
                "density": self.grid.density,
            },
        }


def size_dimensions(size: str) -> tuple[int, int]:
    try:
        return IMAGE_SIZES[size]
    except KeyError:
        raise ValueError(f"unknown image size: {size!r} (expected one of {', '.join(IMAGE_SIZES)})") from None
