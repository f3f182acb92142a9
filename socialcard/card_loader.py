from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from socialcard.constants import (
    BRAND_COLORS,
    DEFAULT_ACCENT_COLOR,
    DEFAULT_GRID_DENSITY,
    DEFAULT_GRID_OPACITY,
    DEFAULT_GRID_STYLE,
    DEFAULT_SIZE,
    IMAGE_SIZES,
    MAX_TOKENS,
)
from socialcard.models import GridOptions, TemplateData, TokenInfo
from socialcard.render.color import safe_hex_color

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    id: str
    label: str
    type: str = "text"
    default: str = ""
    required: bool = False
    options: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class TemplateSpec:
    id: str
    name: str
    description: str = ""
    default_size: str = DEFAULT_SIZE
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)


def _read_resource(name: str) -> dict[str, Any]:
    text = resources.files("socialcard.resources").joinpath(name).read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError(f"resource is not a dict: {name}")
    return data


def _normalize_field(raw: dict[str, Any]) -> FieldSpec:
    options = tuple(
        (str(item.get("value", "")), str(item.get("label", item.get("value", ""))))
        for item in raw.get("options") or []
        if isinstance(item, dict)
    )
    return FieldSpec(
        id=str(raw["id"]),
        label=str(raw.get("label") or raw["id"]),
        type=str(raw.get("type") or "text"),
        default="" if raw.get("default") is None else str(raw.get("default")),
        required=bool(raw.get("required", False)),
        options=options,
    )


@lru_cache(maxsize=1)
def load_catalog() -> dict[str, TemplateSpec]:
    catalog: dict[str, TemplateSpec] = {}
    for raw in _read_resource("templates.yaml").get("templates") or []:
        size = str(raw.get("default_size") or DEFAULT_SIZE)
        catalog[str(raw["id"])] = TemplateSpec(
            id=str(raw["id"]),
            name=str(raw.get("name") or raw["id"]),
            description=str(raw.get("description") or ""),
            default_size=size if size in IMAGE_SIZES else DEFAULT_SIZE,
            fields=tuple(_normalize_field(item) for item in raw.get("fields") or []),
        )
    return catalog


def list_templates() -> list[TemplateSpec]:
    return list(load_catalog().values())


def get_template_spec(template_id: str) -> TemplateSpec | None:
    return load_catalog().get(template_id)


def template_defaults(template_id: str) -> dict[str, str]:
    """Prefilled field values for a template, as the editor form starts out."""
    spec = get_template_spec(template_id)
    if spec is None:
        return {}
    return {item.id: item.default for item in spec.fields}


def _token_from_dict(raw: dict[str, Any]) -> TokenInfo:
    symbol = str(raw.get("symbol") or "").strip()
    precision = raw.get("precision")
    return TokenInfo(
        symbol=symbol,
        name=str(raw.get("name") or symbol),
        color=safe_hex_color(raw.get("color"), DEFAULT_ACCENT_COLOR),
        color_secondary=safe_hex_color(raw.get("color_secondary"), "") or None,
        asset_id=str(raw["asset_id"]) if raw.get("asset_id") else None,
        logo_url=str(raw["logo_url"]) if raw.get("logo_url") else None,
        precision=int(precision) if precision is not None else None,
    )


@lru_cache(maxsize=1)
def load_presets() -> dict[str, TokenInfo]:
    presets: dict[str, TokenInfo] = {}
    for raw in _read_resource("tokens.yaml").get("tokens") or []:
        token = _token_from_dict(raw)
        presets[token.symbol] = token
    return presets


def preset_token(symbol: str) -> TokenInfo | None:
    return load_presets().get((symbol or "").strip().upper())


def custom_token(
    symbol: str,
    color: str = DEFAULT_ACCENT_COLOR,
    logo_url: str | None = None,
    asset_id: str | None = None,
    precision: int | None = None,
) -> TokenInfo:
    """Ad-hoc token: the symbol is upper-cased, the raw text is kept as the display name."""
    raw = (symbol or "").strip()
    if not raw:
        raise ValueError("token symbol must not be empty")
    return TokenInfo(
        symbol=raw.upper(),
        name=raw,
        color=safe_hex_color(color, DEFAULT_ACCENT_COLOR),
        asset_id=asset_id or None,
        logo_url=logo_url or None,
        precision=precision,
    )


def accent_palette() -> list[tuple[str, str]]:
    """``(hex, label)`` pairs: preset token colours first, then the brand colours, deduplicated."""
    seen: set[str] = set()
    palette: list[tuple[str, str]] = []
    candidates = [(token.color, f"{token.name} {token.symbol}") for token in load_presets().values()]
    candidates.extend(BRAND_COLORS)
    for value, label in candidates:
        if value in seen:
            continue
        seen.add(value)
        palette.append((value, label))
    return palette


def _load_file(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"cannot read card file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"card file is not a dict: {path}")
    return data


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _normalize_token(raw: Any) -> TokenInfo:
    if isinstance(raw, str):
        return preset_token(raw) or custom_token(raw)
    if not isinstance(raw, dict):
        raise ValueError(f"token entry must be a symbol or a mapping, got {type(raw).__name__}")
    base = preset_token(str(raw.get("symbol") or ""))
    merged = base.to_dict() if base else {}
    merged.update({key: value for key, value in raw.items() if value is not None})
    if "logoUrl" in raw:
        merged["logo_url"] = raw["logoUrl"]
    if "assetId" in raw:
        merged["asset_id"] = raw["assetId"]
    token = _token_from_dict(merged)
    if not token.symbol:
        raise ValueError("token entry is missing a symbol")
    return token


def _normalize_grid(raw: Any) -> GridOptions:
    raw = raw if isinstance(raw, dict) else {}
    style = str(raw.get("style") or DEFAULT_GRID_STYLE).strip().lower()
    try:
        opacity = float(raw.get("opacity", DEFAULT_GRID_OPACITY))
    except (TypeError, ValueError):
        opacity = float(DEFAULT_GRID_OPACITY)
    try:
        density = int(raw.get("density", DEFAULT_GRID_DENSITY))
    except (TypeError, ValueError):
        density = 1
    return GridOptions(style=style, opacity=min(100.0, max(0.0, opacity)), density=min(3, max(1, density)))


def normalize_card_dict(
    data: dict[str, Any],
    *,
    prefill_defaults: bool = True,
    default_accent: str = DEFAULT_ACCENT_COLOR,
) -> TemplateData:
    template = str(_pick(data, "template", default="")).strip()
    if not template:
        raise ValueError("card is missing a template id")

    spec = get_template_spec(template)
    size = str(_pick(data, "size", default="") or "")
    if size not in IMAGE_SIZES:
        fallback = spec.default_size if spec else DEFAULT_SIZE
        if size:
            LOGGER.warning("unknown size %r, using %s", size, fallback)
        size = fallback

    fields = template_defaults(template) if prefill_defaults else {}
    for key, value in (data.get("fields") or {}).items():
        fields[str(key)] = "" if value is None else str(value)

    raw_tokens = data.get("tokens") or []
    if not isinstance(raw_tokens, list):
        raise ValueError("tokens must be a list")
    tokens = tuple(_normalize_token(item) for item in raw_tokens[:MAX_TOKENS])
    if len(raw_tokens) > MAX_TOKENS:
        LOGGER.warning("card lists %d tokens, only the first %d are used", len(raw_tokens), MAX_TOKENS)

    return TemplateData(
        template=template,
        fields=fields,
        tokens=tokens,
        accent_color=safe_hex_color(_pick(data, "accent_color", "accentColor"), default_accent),
        grid=_normalize_grid(data.get("grid")),
        show_disclaimer=bool(_pick(data, "show_disclaimer", "showDisclaimer", default=True)),
        size=size,
    )


def load_card(path: Path, *, default_accent: str = DEFAULT_ACCENT_COLOR, prefill_defaults: bool = True) -> TemplateData:
    raw = _load_file(path)
    try:
        return normalize_card_dict(raw, prefill_defaults=prefill_defaults, default_accent=default_accent)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid card file {path}: {exc}") from exc
