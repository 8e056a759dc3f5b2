from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from trustimonials.db.enums import ThemeEnum

RATING_COLOR = "#ffc107"
CTA_COLOR = "#00A676"
CTA_HOVER_COLOR = "#007A53"
CARD_SHADOW = "0 2px 8px rgba(0,0,0,0.1)"


@dataclass(frozen=True)
class Palette:
    background: str
    text: str
    card_background: str
    card_shadow: str
    card_border: str
    author: str


_PALETTES: dict[ThemeEnum, Palette] = {
    ThemeEnum.dark: Palette(
        background="#1a1a1a",
        text="#ffffff",
        card_background="#2d2d2d",
        card_shadow=CARD_SHADOW,
        card_border="none",
        author="#ffffff",
    ),
    ThemeEnum.minimal: Palette(
        background="#ffffff",
        text="#333333",
        card_background="#ffffff",
        card_shadow="none",
        card_border="1px solid #e0e0e0",
        author="#666666",
    ),
    ThemeEnum.light: Palette(
        background="#f8f9fa",
        text="#333333",
        card_background="#ffffff",
        card_shadow=CARD_SHADOW,
        card_border="none",
        author="#666666",
    ),
}


def resolve_theme(requested: Optional[str], stored: Optional[str]) -> ThemeEnum:
    """Query-string theme wins over the stored one; anything unrecognised renders light."""
    value = requested or stored
    try:
        return ThemeEnum(value)
    except ValueError:
        return ThemeEnum.light


def palette_for(theme: ThemeEnum) -> Palette:
    return _PALETTES.get(theme, _PALETTES[ThemeEnum.light])
