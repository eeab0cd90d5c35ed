"""Vertical cursor, page breaks and the chrome finalization pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from . import geometry, labels, layout
from .document import DrawOp, LineOp, Page, RectOp, ReportDescriptor, TextOp
from .text import ellipsize, font_measurer, sanitize
from .themes import Theme

log = logging.getLogger(__name__)

STATE_COVER = "cover"
STATE_CONTENT = "content"


@dataclass
class PageCursor:
    page_index: int
    y: float
    theme: Theme


class PaginationController:
    """Owns the page list and the single cursor composers advance.

    The document opens on the cover page. Content pages start with an explicit
    ``start_page`` or when ``ensure_space`` finds the current page too full.
    Headers and footers are painted afterwards by ``apply_chrome``, once the
    page count is known.
    """

    def __init__(self, descriptor: ReportDescriptor, theme: Theme, *, with_cover: bool = True):
        self.descriptor = descriptor
        self.safe = layout.get_safe_box(descriptor.page_size)
        self.page_width, self.page_height = (float(v) for v in descriptor.page_size)
        self.bottom_limit = self.page_height - layout.mm_to_pt(layout.MARGIN_BOTTOM_MM)
        self._cursor = PageCursor(page_index=0, y=0.0, theme=theme)
        self._fresh = True
        self._state = STATE_COVER
        if with_cover:
            self.descriptor.pages.append(Page(index=0, is_cover=True))
        else:
            self.start_page()

    @property
    def cursor(self) -> PageCursor:
        return self._cursor

    @property
    def theme(self) -> Theme:
        return self._cursor.theme

    @property
    def y(self) -> float:
        return self._cursor.y

    @property
    def state(self) -> str:
        return self._state

    @property
    def page(self) -> Page:
        return self.descriptor.pages[-1]

    def start_page(self) -> float:
        index = len(self.descriptor.pages)
        self.descriptor.pages.append(Page(index=index, is_cover=False))
        self._cursor.page_index = index
        self._cursor.y = self.safe.top
        self._state = STATE_CONTENT
        self._fresh = True
        return self._cursor.y

    def remaining(self) -> float:
        return max(0.0, self.bottom_limit - self._cursor.y)

    def ensure_space(self, required: float) -> float:
        """Return the y where a block of ``required`` height may start.

        A fresh content page is never abandoned: a block taller than a whole
        page gets the top offset of the current page instead of a new one.
        """
        if geometry.fits(self._cursor.y, required, self.bottom_limit):
            return self._cursor.y
        if self._state == STATE_CONTENT and self._fresh:
            log.debug("Block of %.1fpt exceeds a full page; drawing from the top of page %d.",
                      float(required), self._cursor.page_index)
            return self._cursor.y
        return self.start_page()

    def advance(self, dy: float) -> float:
        self._cursor.y += max(0.0, float(dy))
        return self._cursor.y

    def draw(self, op: DrawOp) -> None:
        self.page.content.append(op)
        self._fresh = False

    def apply_chrome(self, title: str, generated_on: str) -> None:
        """Paint background, header band and footer on every content page."""
        content = [p for p in self.descriptor.pages if not p.is_cover]
        total = len(content)
        for number, page in enumerate(content, start=1):
            page.background = self._background_ops()
            page.chrome = self._header_ops(title, generated_on) + self._footer_ops(number, total, generated_on)
        for page in self.descriptor.pages:
            if page.is_cover:
                page.chrome = []

    def _background_ops(self):
        fill: Optional[str] = self.theme.page_background
        if not fill:
            return []
        return [RectOp(0.0, 0.0, self.page_width, self.page_height, fill=fill, tag="page-background")]

    def _header_ops(self, title: str, generated_on: str):
        theme = self.theme
        band_h = layout.mm_to_pt(layout.HEADER_BAND_MM)
        size = layout.HEADER_FONT_SIZE
        baseline = band_h * 0.5 + size * 0.35
        date_w = font_measurer(theme.font_regular, size)(generated_on)
        title_w = self.safe.width - date_w - layout.mm_to_pt(layout.COLUMN_GAP_MM)
        clean = ellipsize(title, title_w, font_measurer(theme.font_bold, size))
        return [
            RectOp(0.0, 0.0, self.page_width, band_h, fill=theme.header_fill, tag="header-band"),
            LineOp(0.0, band_h, self.page_width, band_h, color=theme.accent, width=1.6, tag="header-accent"),
            TextOp(self.safe.left, baseline, clean, theme.font_bold, size, theme.header_text, tag="header-title"),
            TextOp(self.safe.right, baseline, sanitize(generated_on), theme.font_regular, size,
                   theme.header_text, align="right", tag="header-date"),
        ]

    def _footer_ops(self, number: int, total: int, generated_on: str):
        theme = self.theme
        rule_y = self.page_height - layout.mm_to_pt(layout.FOOTER_RULE_MM)
        baseline = self.page_height - layout.mm_to_pt(layout.FOOTER_BASELINE_MM)
        size = layout.FOOTER_FONT_SIZE
        return [
            LineOp(self.safe.left, rule_y, self.safe.right, rule_y, color=theme.border_color, width=0.5,
                   tag="footer-rule"),
            TextOp(self.safe.left, baseline, f"{labels.GENERATED_ON} {sanitize(generated_on)}",
                   theme.font_regular, size, theme.muted_text, tag="footer-generated"),
            TextOp(self.safe.right, baseline, labels.PAGE_OF.format(page=number, total=total),
                   theme.font_regular, size, theme.muted_text, align="right", tag="page-number"),
        ]
