"""
Self-contained HTML documents served inside the embed iframes.

Every document carries its stylesheet inline and reports its height to the parent
window so the loader script can size the iframe. Testimonial text arrives already
sanitized; only widget-owned strings (name, CTA) are escaped here.
"""
from __future__ import annotations

import json
from datetime import datetime
from html import escape
from typing import Optional, Sequence

from trustimonials.db.enums import ThemeEnum
from trustimonials.schemas.widget_settings import BaseWidgetSettings, SingleWidgetSettings, WallWidgetSettings
from trustimonials.services.testimonial_selection import SanitizedTestimonial, sanitize_html
from trustimonials.widget_renderer.palette import (
    CTA_COLOR,
    CTA_HOVER_COLOR,
    RATING_COLOR,
    Palette,
    palette_for,
)

RESIZE_MESSAGE_TYPE = "trustimonials-resize"
MAX_WALL_QUESTION_RESPONSES = 2

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_BASE_FONT = "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif"


def format_submission_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


def _stars(rating: Optional[int]) -> str:
    if not rating:
        return ""
    return "★" * max(0, min(5, int(rating)))


def _safe_url(url: Optional[str]) -> str:
    candidate = (url or "").strip()
    if not candidate or candidate.lower().startswith(("javascript:", "data:", "vbscript:")):
        return "#"
    return escape(candidate, quote=True)


def _cta_html(settings: BaseWidgetSettings) -> str:
    cta = settings.cta
    if cta is None or not cta.text:
        return ""
    return (
        '<div style="text-align: center; margin-top: 20px;">'
        f'<a href="{_safe_url(cta.url)}" class="cta-button" target="_blank" rel="noopener">'
        f"{sanitize_html(cta.text)}</a>"
        "</div>"
    )


def _resize_script(widget_id: str) -> str:
    return (
        "<script>\n"
        "(function() {\n"
        f"  var widgetId = {json.dumps(str(widget_id))};\n"
        "  function postHeight() {\n"
        "    var height = document.documentElement.scrollHeight;\n"
        f"    window.parent.postMessage({{type: '{RESIZE_MESSAGE_TYPE}', widgetId: widgetId, height: height}}, '*');\n"
        "  }\n"
        "  window.addEventListener('load', postHeight);\n"
        "  window.addEventListener('resize', postHeight);\n"
        "})();\n"
        "</script>"
    )


def _document(*, title: str, css: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"<title>{sanitize_html(title)}</title>\n"
        f"<style>{css}</style>\n"
        "</head>\n"
        f"<body>\n{body}\n</body>\n"
        "</html>\n"
    )


def _common_css(palette: Palette) -> str:
    return f"""
      * {{ margin: 0; padding: 0; box-sizing: border-box; }}
      body {{
        font-family: {_BASE_FONT};
        background: {palette.background};
        color: {palette.text};
        padding: 16px;
      }}
      .testimonial-author {{ font-weight: 600; color: {palette.author}; margin-bottom: 8px; }}
      .testimonial-rating {{ color: {RATING_COLOR}; margin-bottom: 8px; }}
      .cta-button:hover {{ background: {CTA_HOVER_COLOR}; }}
    """


def render_message_page(message: str) -> str:
    """Minimal page shown in the iframe when nothing can be rendered."""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        '<head><meta charset="utf-8"></head>\n'
        '<body style="margin: 0; padding: 20px; font-family: Arial, sans-serif; text-align: center;">\n'
        f"<p>{sanitize_html(message)}</p>\n"
        "</body>\n"
        "</html>\n"
    )


def _wall_card(testimonial: SanitizedTestimonial, settings: WallWidgetSettings) -> str:
    parts = ['<div class="testimonial-card">']
    if settings.showAuthor:
        parts.append(f'<div class="testimonial-author">{testimonial.author_name}</div>')
    if settings.showRating and testimonial.rating:
        parts.append(f'<div class="testimonial-rating">{_stars(testimonial.rating)}</div>')
    parts.append(f'<div class="testimonial-content">{testimonial.content}</div>')
    responses = testimonial.question_responses[:MAX_WALL_QUESTION_RESPONSES]
    if responses:
        parts.append('<div class="question-responses">')
        for response in responses:
            parts.append(
                '<div style="margin-bottom: 8px;">'
                f"<strong>Q:</strong> {response.question}<br>"
                f"<strong>A:</strong> {response.answer}"
                "</div>"
            )
        parts.append("</div>")
    parts.append("</div>")
    return "".join(parts)


def render_wall_page(
    *,
    widget_id: str,
    widget_name: str,
    settings: WallWidgetSettings,
    testimonials: Sequence[SanitizedTestimonial],
    theme: ThemeEnum,
) -> str:
    palette = palette_for(theme)
    spacing = settings.spacingAndGutter
    css = _common_css(palette) + f"""
      .wall-container {{ max-width: 100%; margin: 0 auto; }}
      .testimonials-grid {{
        display: grid;
        grid-template-columns: repeat(auto-fit, minmax(300px, 1fr));
        gap: {spacing.gap}px;
      }}
      .testimonial-card {{
        background: {palette.card_background};
        border-radius: {spacing.card_radius}px;
        padding: 20px;
        box-shadow: {palette.card_shadow};
        border: {palette.card_border};
      }}
      .layout-masonry .testimonial-card {{ align-self: start; }}
      .layout-carousel .testimonials-grid {{ scroll-snap-type: x mandatory; overflow-x: auto; }}
      .layout-carousel .testimonial-card {{ scroll-snap-align: start; }}
      .testimonial-content {{ margin-bottom: 12px; line-height: 1.5; }}
      .cta-button {{
        background: {CTA_COLOR};
        color: white;
        padding: 8px 16px;
        border: none;
        border-radius: 4px;
        cursor: pointer;
        text-decoration: none;
        display: inline-block;
        margin-top: 12px;
      }}
    """
    cards = "\n".join(_wall_card(item, settings) for item in testimonials)
    layout = settings.designTemplate.value
    body = (
        f'<div class="wall-container layout-{layout}">\n'
        f'<div class="testimonials-grid">\n{cards}\n</div>\n'
        f"{_cta_html(settings)}\n"
        "</div>\n"
        f"{_resize_script(widget_id)}"
    )
    return _document(title=widget_name, css=css, body=body)


def render_single_page(
    *,
    widget_id: str,
    widget_name: str,
    settings: SingleWidgetSettings,
    testimonial: SanitizedTestimonial,
    theme: ThemeEnum,
) -> str:
    palette = palette_for(theme)
    css = _common_css(palette) + f"""
      .single-container {{ max-width: 100%; margin: 0 auto; }}
      .testimonial-card {{
        background: {palette.card_background};
        border-radius: 8px;
        padding: 24px;
        box-shadow: {palette.card_shadow};
        border: {palette.card_border};
        text-align: center;
      }}
      .testimonial-content {{ font-size: 18px; line-height: 1.6; margin-bottom: 16px; font-style: italic; }}
      .layout-hero .testimonial-content {{ font-size: 24px; }}
      .layout-quote-overlay .testimonial-card {{ border-left: 4px solid {CTA_COLOR}; text-align: left; }}
      .testimonial-date {{ color: #999; font-size: 14px; }}
      .cta-button {{
        background: {CTA_COLOR};
        color: white;
        padding: 12px 24px;
        border: none;
        border-radius: 6px;
        cursor: pointer;
        text-decoration: none;
        display: inline-block;
        margin-top: 16px;
      }}
    """
    parts = [
        '<div class="testimonial-card">',
        f'<div class="testimonial-content">"{testimonial.content}"</div>',
    ]
    if settings.showAuthorDetails:
        parts.append(f'<div class="testimonial-author">— {testimonial.author_name}</div>')
    if settings.showRating and testimonial.rating:
        parts.append(f'<div class="testimonial-rating">{_stars(testimonial.rating)}</div>')
    if settings.showDate and testimonial.submitted_at is not None:
        parts.append(f'<div class="testimonial-date">{format_submission_date(testimonial.submitted_at)}</div>')
    parts.append("</div>")

    layout = settings.designTemplate.value
    body = (
        f'<div class="single-container layout-{layout}">\n'
        f"{''.join(parts)}\n"
        f"{_cta_html(settings)}\n"
        "</div>\n"
        f"{_resize_script(widget_id)}"
    )
    return _document(title=widget_name, css=css, body=body)
