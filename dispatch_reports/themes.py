"""Named color and typography presets for report variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

log = logging.getLogger(__name__)

DEFAULT_THEME = "primary"


@dataclass(frozen=True)
class Theme:
    name: str
    header_fill: str
    body_text: str
    alt_row_fill: str
    border_color: str
    accent: str
    header_text: str = "#FFFFFF"
    muted_text: str = "#5D6B7A"
    label_text: str = "#3F4B5A"
    box_fill: str = "#F5F8FC"
    page_background: Optional[str] = None
    cover_background: str = "#F5F8FC"
    cover_text: str = "#1F2933"
    success: str = "#2E7D32"
    info: str = "#1565C0"
    neutral: str = "#6B7280"
    danger: str = "#C62828"
    placeholder_fill: str = "#EEF1F5"
    font_regular: str = "Helvetica"
    font_bold: str = "Helvetica-Bold"
    font_italic: str = "Helvetica-Oblique"

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "headerFill": self.header_fill,
            "bodyText": self.body_text,
            "altRowFill": self.alt_row_fill,
            "borderColor": self.border_color,
            "accent": self.accent,
            "headerText": self.header_text,
            "mutedText": self.muted_text,
            "labelText": self.label_text,
            "boxFill": self.box_fill,
            "pageBackground": self.page_background,
            "coverBackground": self.cover_background,
            "coverText": self.cover_text,
            "success": self.success,
            "info": self.info,
            "neutral": self.neutral,
            "danger": self.danger,
            "fonts": [self.font_regular, self.font_bold, self.font_italic],
        }


PRIMARY = Theme(
    name="primary",
    header_fill="#1F4E79",
    body_text="#1F2933",
    alt_row_fill="#F5F8FC",
    border_color="#D3DBE5",
    accent="#2E86DE",
    cover_background="#EAF1FA",
    cover_text="#1F4E79",
)

# Light corporate variant: black chrome, grey boxes, yellow accent rules.
CORPORATE = Theme(
    name="corporate",
    header_fill="#000000",
    body_text="#000000",
    alt_row_fill="#F8F8F8",
    border_color="#C8C8C8",
    accent="#F4FF00",
    muted_text="#262426",
    label_text="#262426",
    box_fill="#F8F8F8",
    cover_background="#FFFFFF",
    cover_text="#000000",
    success="#2E7D32",
    info="#262426",
    neutral="#6B6B6B",
    danger="#B00020",
    placeholder_fill="#F0F0F0",
)

# Dark high-contrast brand variant. The yellow accent is for rules and
# outlines only; fills stay black or grey so white text remains legible.
CORPORATE_DARK = Theme(
    name="corporate-dark",
    header_fill="#000000",
    body_text="#FFFFFF",
    alt_row_fill="#333033",
    border_color="#4A464A",
    accent="#F4FF00",
    header_text="#FFFFFF",
    muted_text="#C8C8C8",
    label_text="#DADADA",
    box_fill="#2E2B2E",
    page_background="#262426",
    cover_background="#000000",
    cover_text="#FFFFFF",
    success="#3FA34D",
    info="#4A90D9",
    neutral="#6B6B6B",
    danger="#D64545",
    placeholder_fill="#333033",
)

_REGISTRY: Dict[str, Theme] = {}


def _key(name: object) -> str:
    return str(name or "").strip().lower().replace("_", "-").replace(" ", "-")


def register_theme(theme: Theme, *aliases: str) -> Theme:
    for name in (theme.name,) + tuple(aliases):
        _REGISTRY[_key(name)] = theme
    return theme


def available_themes() -> List[str]:
    return sorted(_REGISTRY)


def resolve_theme(name: object = None) -> Theme:
    """Return the named theme, falling back to the default on unknown names."""
    key = _key(name)
    if not key:
        return _REGISTRY[DEFAULT_THEME]
    theme = _REGISTRY.get(key)
    if theme is None:
        log.warning("Unknown report theme %r; using %r.", name, DEFAULT_THEME)
        return _REGISTRY[DEFAULT_THEME]
    return theme


def status_color(theme: Theme, status: str) -> str:
    return {
        "completed": theme.success,
        "in-progress": theme.info,
        "pending": theme.neutral,
        "cancelled": theme.danger,
    }.get(str(status or ""), theme.neutral)


register_theme(PRIMARY, "default")
register_theme(CORPORATE, "corporate-light")
register_theme(CORPORATE_DARK, "brand", "revo")
