"""Render branded social-media cards for DEX announcements."""

from socialcard.models import GridOptions, TemplateData, TokenInfo
from socialcard.render import CardRenderer, render_card

__all__ = ["CardRenderer", "GridOptions", "TemplateData", "TokenInfo", "render_card", "__version__"]
__version__ = "0.1.0"
