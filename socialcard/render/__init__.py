from socialcard.render.engine import CardRenderer, draw_card, render_card

__all__ = ["CardRenderer", "draw_card", "render_card"]
