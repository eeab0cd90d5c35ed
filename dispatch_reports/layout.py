"""Layout constants for service report generation."""

from __future__ import annotations

from dataclasses import dataclass

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

PAGE_SIZE = A4

# Margins in millimeters. Vertical offsets are measured from the top edge.
MARGIN_LEFT_MM = 20.0
MARGIN_RIGHT_MM = 20.0
CONTENT_TOP_MM = 32.0
MARGIN_BOTTOM_MM = 20.0

# Chrome bands.
HEADER_BAND_MM = 18.0
FOOTER_BASELINE_MM = 10.0
FOOTER_RULE_MM = 15.0

# Typography.
COVER_TITLE_FONT_SIZE = 24.0
COVER_SUBTITLE_FONT_SIZE = 13.0
SECTION_TITLE_FONT_SIZE = 11.5
LABEL_FONT_SIZE = 7.5
BODY_FONT_SIZE = 9.5
TABLE_FONT_SIZE = 8.5
BADGE_FONT_SIZE = 9.0
HEADER_FONT_SIZE = 9.0
FOOTER_FONT_SIZE = 7.5
LINE_SPACING = 1.32

# Spacing (millimeters).
SECTION_TITLE_HEIGHT_MM = 8.5
SECTION_GAP_MM = 6.0
BLOCK_GAP_MM = 4.0
BOX_PADDING_MM = 2.4
COLUMN_GAP_MM = 6.0
CELL_PADDING_MM = 1.6

# Photo gallery.
PHOTO_MAX_WIDTH_MM = 120.0
PHOTO_MAX_HEIGHT_MM = 90.0
CAPTION_HEIGHT_MM = 6.0

# Signature block.
SIGNATURE_WIDTH_MM = 75.0
SIGNATURE_HEIGHT_MM = 25.0
SIGNATURE_LABEL_MM = 10.0

# Badges.
BADGE_PADDING_MM = 3.0
BADGE_HEIGHT_MM = 7.5

# Summary tables.
TOP_PERFORMERS_LIMIT = 5
TOP_CLIENTS_LIMIT = 10


def mm_to_pt(value_mm: float) -> float:
    return float(value_mm) * mm


def line_height(font_size: float) -> float:
    return float(font_size) * LINE_SPACING


@dataclass(frozen=True)
class SafeBox:
    """Printable content area in top-down page coordinates."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


def get_safe_box(page_size=PAGE_SIZE) -> SafeBox:
    page_w, page_h = page_size
    left = mm_to_pt(MARGIN_LEFT_MM)
    right_margin = mm_to_pt(MARGIN_RIGHT_MM)
    top = mm_to_pt(CONTENT_TOP_MM)
    bottom_margin = mm_to_pt(MARGIN_BOTTOM_MM)
    width = page_w - left - right_margin
    height = page_h - top - bottom_margin
    return SafeBox(left=left, top=top, width=width, height=height)
