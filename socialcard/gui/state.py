from __future__ import annotations

from dataclasses import dataclass, field

from socialcard.card_loader import get_template_spec, preset_token, template_defaults
from socialcard.constants import (
    DEFAULT_ACCENT_COLOR,
    DEFAULT_SIZE,
    MAX_TOKENS,
    TEMPLATE_NEW_PAIR,
)
from socialcard.models import GridOptions, TemplateData, TokenInfo

DEFAULT_TOKEN_SYMBOLS = ("DGKO", "KLV")


def _default_tokens() -> list[TokenInfo]:
    return [token for token in (preset_token(symbol) for symbol in DEFAULT_TOKEN_SYMBOLS) if token is not None]


@dataclass(slots=True)
class EditorState:
    """Everything the preview window edits; ``to_template_data`` snapshots it for a render."""

    template: str = TEMPLATE_NEW_PAIR
    size: str = DEFAULT_SIZE
    fields: dict[str, str] = field(default_factory=dict)
    tokens: list[TokenInfo] = field(default_factory=_default_tokens)
    accent_color: str = DEFAULT_ACCENT_COLOR
    show_disclaimer: bool = True
    grid: GridOptions = field(default_factory=GridOptions)

    def __post_init__(self) -> None:
        if not self.fields:
            self.fields = template_defaults(self.template)

    def select_template(self, template_id: str) -> None:
        """Switching template resets the size and the field values to that template's defaults."""
        self.template = template_id
        spec = get_template_spec(template_id)
        if spec is not None:
            self.size = spec.default_size
        self.fields = template_defaults(template_id)

    def set_field(self, key: str, value: str) -> None:
        self.fields[key] = value

    def add_token(self, token: TokenInfo) -> bool:
        if len(self.tokens) >= MAX_TOKENS:
            return False
        if any(existing.symbol == token.symbol for existing in self.tokens):
            return False
        self.tokens.append(token)
        return True

    def remove_token(self, symbol: str) -> None:
        self.tokens = [token for token in self.tokens if token.symbol != symbol]

    def reset(self) -> None:
        self.fields = template_defaults(self.template)
        self.tokens = _default_tokens()
        self.accent_color = DEFAULT_ACCENT_COLOR
        self.show_disclaimer = True
        self.grid = GridOptions()

    def to_template_data(self) -> TemplateData:
        return TemplateData(
            template=self.template,
            fields=dict(self.fields),
            tokens=tuple(self.tokens),
            accent_color=self.accent_color,
            grid=self.grid,
            show_disclaimer=self.show_disclaimer,
            size=self.size,
        )
