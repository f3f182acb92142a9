"""Per-template layout routines.

Each template has two halves: a ``*_content`` function that resolves the text
and tokens to show (filling every missing field with its default) and a
``draw_*`` routine that lays that content out top to bottom with a
``LayoutCursor``.  ``draw_template`` picks the routine by template id.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Callable

from socialcard import constants
from socialcard.models import TemplateData, TokenInfo
from socialcard.render.color import hex_to_rgba
from socialcard.render.compositor import ImageMap, draw_blockchain, draw_floating_token, draw_platform
from socialcard.render.layout import LayoutCursor
from socialcard.render.typography import (
    FAMILY_DISPLAY,
    TEXT_PRIMARY,
    TEXT_SUBHEAD,
    TEXT_TERTIARY,
    draw_body,
    draw_cta,
    draw_headline,
    draw_icon_badge,
    draw_label,
    draw_subhead,
    draw_tracked,
)

if TYPE_CHECKING:
    from socialcard.render.canvas import Canvas

LOGGER = logging.getLogger(__name__)

METRIC_LABELS = {
    "transactions": "transactions processed",
    "users": "active users",
    "volume": "in trading volume",
    "tvl": "total value locked",
    "holders": "token holders",
}

GOLD = "#FFD700"
CREAM = "#FFF8DC"


def metric_label(metric: str) -> str:
    return METRIC_LABELS.get(metric, metric)


def split_headline(headline: str) -> list[str]:
    """Headlines of more than three words break into two lines, the first one taking the extra word."""
    words = headline.split(" ")
    if len(words) <= 3:
        return [headline]
    mid = math.ceil(len(words) / 2)
    return [" ".join(words[:mid]), " ".join(words[mid:])]


def _default_token(data: TemplateData, index: int, fallback: TokenInfo) -> TokenInfo:
    token = data.token(index)
    return token if token is not None else fallback


def _primary_fallback(data: TemplateData) -> TokenInfo:
    return TokenInfo(symbol="DGKO", name="Digiko", color=data.accent_color)


# ----------------------------------------------------------------------
# content resolution


def new_pair_content(data: TemplateData) -> dict[str, Any]:
    first = _default_token(data, 0, _primary_fallback(data))
    second = _default_token(data, 1, TokenInfo(symbol="KLV", name="Klever", color="#8B5CF6"))
    return {
        "kicker": "Introducing",
        "headline": data.get_field("headline", "New Pair Added").upper(),
        "pair": f"{first.symbol} / {second.symbol}",
        "cta": data.get_field("subheadline", "Trade now on Digiko DEX"),
        "tokens": (first, second),
    }


def apr_content(data: TemplateData) -> dict[str, Any]:
    return {
        "badge": "Staking is live",
        "headline": data.get_field("headline", "Staking Rewards"),
        "apr": data.get_field("apr", "10%"),
        "apr_label": "APR",
        "body": data.get_field("subheadline", "Earn passive income by staking your tokens"),
        "tokens": (_default_token(data, 0, _primary_fallback(data)),),
    }


def listing_content(data: TemplateData) -> dict[str, Any]:
    token = _default_token(data, 0, _primary_fallback(data))
    subheadline = data.get_field("subheadline", "Available for trading on Digiko")
    return {
        "kicker": "Now Listed",
        "hero": token.symbol,
        "secondary": "is now available",
        "cta": f"{token.display_name} • {subheadline}",
        "tokens": (token,),
    }


def announcement_content(data: TemplateData) -> dict[str, Any]:
    return {
        "badge": "Announcement",
        "headline_lines": split_headline(data.get_field("headline", "Major Update")),
        "subheadline": data.get_field("subheadline", ""),
        "body": data.get_field("bodyText", ""),
    }


def milestone_content(data: TemplateData) -> dict[str, Any]:
    return {
        "badge": data.get_field("headline", "Milestone Reached"),
        "number": data.get_field("number", "1,000,000"),
        "metric": metric_label(data.get_field("metric", "transactions")),
    }


def season_content(data: TemplateData) -> dict[str, Any]:
    prize_pool = data.get_field("prizePool", "20,000")
    prize_token = data.get_field("prizeToken", "KLV")
    return {
        "badge": data.get_field("gameName", "CTR Kart"),
        "headline": data.get_field("headline", "New Season Starts!"),
        "prize": f"{prize_pool} {prize_token}",
        "prize_label": "PRIZE POOL",
        "cards": (
            ("TOP PLAYERS", f"Top {data.get_field('topPlayers', '10')}"),
            ("DURATION", data.get_field("duration", "7 days")),
        ),
        "subheadline": data.get_field("subheadline", "Race to win!"),
    }


# ----------------------------------------------------------------------
# routines


def draw_new_pair(canvas: Canvas, data: TemplateData, w: float, h: float, images: ImageMap) -> None:
    content = new_pair_content(data)
    accent = data.accent_color
    first, second = content["tokens"]
    cursor = LayoutCursor.start(w, h, 0.15)

    cursor.advance_to(draw_label(canvas, content["kicker"], w * 0.5, cursor.y, w, align="center"))
    cursor.gap("xl")
    cursor.advance_to(
        draw_headline(
            canvas,
            content["headline"],
            w * 0.5,
            cursor.y,
            w,
            gradient=(TEXT_PRIMARY, hex_to_rgba(accent, 0.85)),
            align="center",
        )
    )
    cursor.gap("large")
    draw_subhead(canvas, content["pair"], w * 0.5, cursor.y, w, color=TEXT_SUBHEAD, align="center", scale=1.2)

    platform_x = w * 0.5
    token_y = draw_platform(canvas, platform_x, h * 0.65, w, accent)
    size = w * 0.15
    gap = size * 0.45
    hover_y = token_y - size * 0.35
    draw_floating_token(canvas, platform_x - gap, hover_y, size, first, images, accent)
    draw_floating_token(canvas, platform_x + gap, hover_y, size, second, images, second.color)

    canvas.stroke_line(
        platform_x - gap + size * 0.52,
        hover_y,
        platform_x + gap - size * 0.52,
        hover_y,
        hex_to_rgba("#ffffff", 0.12),
        dash=(4, 4),
    )

    draw_cta(canvas, content["cta"], w * 0.5, h * 0.82, w, align="center", arrow=True)


def draw_apr_promotion(canvas: Canvas, data: TemplateData, w: float, h: float, images: ImageMap) -> None:
    content = apr_content(data)
    accent = data.accent_color

    platform_x = w * 0.26
    token_y = draw_platform(canvas, platform_x, h * 0.52, w, accent)
    size = w * 0.14
    draw_floating_token(canvas, platform_x, token_y - size * 0.35, size, content["tokens"][0], images, accent)

    text_x = w * 0.52
    cursor = LayoutCursor.start(w, h, 0.22)
    draw_icon_badge(canvas, content["badge"], text_x, cursor.y, w, accent)
    cursor.gap("xl")

    apr = content["apr"]
    apr_size = w * 0.12
    canvas.set_font(FAMILY_DISPLAY, 700, apr_size)
    apr_width = canvas.measure_text(apr)
    fill = canvas.create_linear_gradient(text_x, cursor.y, text_x + apr_width, cursor.y)
    fill.add_color_stop(0, TEXT_PRIMARY)
    fill.add_color_stop(1, hex_to_rgba(accent, 0.75))
    canvas.fill_text(apr, text_x, cursor.y, fill)

    canvas.set_font(FAMILY_DISPLAY, 400, w * 0.022)
    canvas.fill_text(content["apr_label"], text_x + apr_width + w * 0.015, cursor.y + apr_size * 0.35, TEXT_TERTIARY)

    cursor.move(apr_size * 1.05)
    cursor.gap("large")
    cursor.advance_to(draw_subhead(canvas, content["headline"], text_x, cursor.y, w, color=TEXT_PRIMARY, scale=1.1))
    cursor.gap("small")
    draw_body(canvas, content["body"], text_x, cursor.y, w, max_width=w * 0.42)


def draw_listing(canvas: Canvas, data: TemplateData, w: float, h: float, images: ImageMap) -> None:
    content = listing_content(data)
    accent = data.accent_color
    cursor = LayoutCursor.start(w, h, 0.14)

    cursor.advance_to(draw_label(canvas, content["kicker"], w * 0.5, cursor.y, w, align="center"))
    cursor.gap("xl")
    cursor.advance_to(
        draw_headline(
            canvas,
            content["hero"],
            w * 0.5,
            cursor.y,
            w,
            gradient=(TEXT_PRIMARY, hex_to_rgba(accent, 0.7)),
            align="center",
            scale=1.3,
        )
    )
    cursor.gap("medium")
    draw_subhead(canvas, content["secondary"], w * 0.5, cursor.y, w, color=TEXT_SUBHEAD, align="center")

    platform_x = w * 0.5
    token_y = draw_platform(canvas, platform_x, h * 0.66, w, accent)
    size = w * 0.17
    draw_floating_token(canvas, platform_x, token_y - size * 0.4, size, content["tokens"][0], images, accent)

    draw_cta(canvas, content["cta"], w * 0.5, h * 0.84, w, align="center", arrow=False)


def draw_announcement(canvas: Canvas, data: TemplateData, w: float, h: float, images: ImageMap) -> None:
    content = announcement_content(data)
    accent = data.accent_color

    draw_blockchain(canvas, w * 0.5, h * 0.72, w, accent)

    cursor = LayoutCursor.start(w, h, 0.16)
    draw_icon_badge(canvas, content["badge"], w * 0.5, cursor.y, w, accent, align="center")
    cursor.gap("xl")

    lines = content["headline_lines"]
    scale = 0.85 if len(lines) > 1 else 1.0
    for line in lines:
        cursor.advance_to(
            draw_headline(
                canvas,
                line,
                w * 0.5,
                cursor.y,
                w,
                gradient=(TEXT_PRIMARY, hex_to_rgba(accent, 0.75)),
                align="center",
                scale=scale,
            )
        )
    cursor.gap("large")

    if content["subheadline"]:
        cursor.advance_to(draw_subhead(canvas, content["subheadline"], w * 0.5, cursor.y, w, color=TEXT_SUBHEAD, align="center"))
        cursor.gap("small")
    if content["body"]:
        draw_body(canvas, content["body"], w * 0.5, cursor.y, w, align="center")


def draw_milestone(canvas: Canvas, data: TemplateData, w: float, h: float, images: ImageMap) -> None:
    content = milestone_content(data)
    accent = data.accent_color
    cursor = LayoutCursor.start(w, h, 0.30)

    draw_icon_badge(canvas, content["badge"], w * 0.5, cursor.y, w, accent, align="center")
    cursor.gap("xl")

    num_size = w * 0.11
    glow = canvas.create_radial_gradient(w * 0.5, cursor.y + num_size * 0.5, 0, w * 0.5, cursor.y + num_size * 0.5, num_size * 2)
    glow.add_color_stop(0, "rgba(255, 255, 255, 0.04)")
    glow.add_color_stop(0.5, "rgba(255, 255, 255, 0.015)")
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(w * 0.2, cursor.y - num_size * 0.5, w * 0.6, num_size * 2, glow)

    canvas.set_font(FAMILY_DISPLAY, 700, num_size)
    fill = canvas.create_linear_gradient(w * 0.3, cursor.y, w * 0.7, cursor.y)
    fill.add_color_stop(0, TEXT_PRIMARY)
    fill.add_color_stop(1, hex_to_rgba(accent, 0.7))
    canvas.fill_text(content["number"], w * 0.5, cursor.y, fill, align="center")

    cursor.move(num_size * 1.05)
    cursor.gap("large")
    draw_subhead(canvas, content["metric"], w * 0.5, cursor.y, w, color=TEXT_SUBHEAD, align="center")

    dot = hex_to_rgba(accent, 0.25)
    for px, py in ((0.28, 0.40), (0.72, 0.40), (0.24, 0.54), (0.76, 0.54)):
        canvas.fill_circle(w * px, h * py, 3, dot)


def draw_info_card(canvas: Canvas, x: float, y: float, width: float, height: float, label: str, value: str) -> None:
    radius = height * 0.15
    canvas.fill_round_rect(x, y, width, height, radius, "rgba(255, 255, 255, 0.03)")
    canvas.stroke_round_rect(x, y, width, height, radius, "rgba(255, 255, 255, 0.08)")

    canvas.set_font(FAMILY_DISPLAY, 500, width * 0.09)
    canvas.fill_text(label, x + width * 0.5, y + height * 0.18, TEXT_TERTIARY, align="center")

    canvas.set_font(FAMILY_DISPLAY, 700, width * 0.18)
    canvas.fill_text(value, x + width * 0.5, y + height * 0.88, TEXT_PRIMARY, align="center", baseline="bottom")


def draw_racing_decorations(canvas: Canvas, w: float, h: float, accent: str) -> None:
    flag = w * 0.06
    square = flag / 4
    with canvas.alpha(0.06):
        for left, top in ((w * 0.03, h * 0.03), (w * 0.97 - flag, h * 0.97 - flag)):
            for row in range(4):
                for col in range(4):
                    if (row + col) % 2 == 0:
                        canvas.fill_rect(left + col * square, top + row * square, square, square, "#FFF")

    start_y = h * 0.35
    with canvas.alpha(0.08):
        for i in range(5):
            y = start_y + i * w * 0.025
            length = w * (0.08 - i * 0.012)
            canvas.stroke_line(0, y, length, y, accent, width=2)
            canvas.stroke_line(w, y, w - length, y, accent, width=2)


def draw_season_announcement(canvas: Canvas, data: TemplateData, w: float, h: float, images: ImageMap) -> None:
    content = season_content(data)
    accent = data.accent_color
    cursor = LayoutCursor.start(w, h, 0.14)

    draw_icon_badge(canvas, content["badge"], w * 0.5, cursor.y, w, accent, align="center")
    cursor.gap("xl")
    cursor.advance_to(
        draw_headline(
            canvas,
            content["headline"],
            w * 0.5,
            cursor.y,
            w,
            gradient=(TEXT_PRIMARY, hex_to_rgba(accent, 0.75)),
            align="center",
            scale=0.9,
        )
    )
    cursor.gap("large")

    prize_size = w * 0.095
    glow = canvas.create_radial_gradient(
        w * 0.5, cursor.y + prize_size * 0.5, 0, w * 0.5, cursor.y + prize_size * 0.5, prize_size * 2.5
    )
    glow.add_color_stop(0, hex_to_rgba(accent, 0.15))
    glow.add_color_stop(0.4, hex_to_rgba(accent, 0.05))
    glow.add_color_stop(1, "transparent")
    canvas.fill_rect(w * 0.1, cursor.y - prize_size * 0.3, w * 0.8, prize_size * 1.8, glow)

    canvas.set_font(FAMILY_DISPLAY, 700, prize_size)
    gold = canvas.create_linear_gradient(w * 0.25, cursor.y, w * 0.75, cursor.y)
    gold.add_color_stop(0, GOLD)
    gold.add_color_stop(0.5, CREAM)
    gold.add_color_stop(1, GOLD)
    canvas.fill_text(content["prize"], w * 0.5, cursor.y, gold, align="center")
    cursor.move(prize_size * 1.1)
    cursor.gap("medium")

    label_size = w * 0.02
    canvas.set_font(FAMILY_DISPLAY, 500, label_size)
    draw_tracked(
        canvas,
        content["prize_label"],
        w * 0.5,
        cursor.y,
        tracking=w * 0.003 / label_size,
        paint=TEXT_TERTIARY,
        align="center",
    )
    cursor.gap("xl")

    card_w = w * 0.25
    card_h = w * 0.10
    card_gap = w * 0.04
    card_x = w * 0.5 - card_w - card_gap * 0.5
    for label, value in content["cards"]:
        draw_info_card(canvas, card_x, cursor.y, card_w, card_h, label, value)
        card_x += card_w + card_gap
    cursor.move(card_h)
    cursor.gap("large")

    if content["subheadline"]:
        draw_subhead(canvas, content["subheadline"], w * 0.5, cursor.y, w, color=TEXT_SUBHEAD, align="center")

    draw_racing_decorations(canvas, w, h, accent)


TemplateRoutine = Callable[["Canvas", TemplateData, float, float, ImageMap], None]

TEMPLATE_ROUTINES: dict[str, TemplateRoutine] = {
    constants.TEMPLATE_NEW_PAIR: draw_new_pair,
    constants.TEMPLATE_APR_PROMOTION: draw_apr_promotion,
    constants.TEMPLATE_LISTING: draw_listing,
    constants.TEMPLATE_ANNOUNCEMENT: draw_announcement,
    constants.TEMPLATE_MILESTONE: draw_milestone,
    constants.TEMPLATE_SEASON_ANNOUNCEMENT: draw_season_announcement,
}

TEMPLATE_CONTENT: dict[str, Callable[[TemplateData], dict[str, Any]]] = {
    constants.TEMPLATE_NEW_PAIR: new_pair_content,
    constants.TEMPLATE_APR_PROMOTION: apr_content,
    constants.TEMPLATE_LISTING: listing_content,
    constants.TEMPLATE_ANNOUNCEMENT: announcement_content,
    constants.TEMPLATE_MILESTONE: milestone_content,
    constants.TEMPLATE_SEASON_ANNOUNCEMENT: season_content,
}


def template_content(data: TemplateData) -> dict[str, Any]:
    resolver = TEMPLATE_CONTENT.get(data.template)
    return resolver(data) if resolver else {}


def draw_template(canvas: Canvas, data: TemplateData, w: float, h: float, images: ImageMap) -> bool:
    routine = TEMPLATE_ROUTINES.get(data.template)
    if routine is None:
        LOGGER.debug("no layout for template %r, drawing background and footer only", data.template)
        return False
    LOGGER.debug("drawing template %s at %dx%d", data.template, w, h)
    routine(canvas, data, w, h, images)
    return True
