"""Draw primitives: the only place report content becomes draw operations.

Every primitive asks the pagination controller for room before it paints, so
callers never check page space themselves.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from . import geometry, labels, layout
from .document import LineOp, RectOp, TableOp, TableStyleSpec, TextOp
from .pagination import PaginationController
from .text import display_value, font_measurer, sanitize, wrap
from .themes import status_color

CONTINUED = "(continuação)"


def _pad() -> float:
    return layout.mm_to_pt(layout.BOX_PADDING_MM)


def _gap() -> float:
    return layout.mm_to_pt(layout.BLOCK_GAP_MM)


def spacer(pager: PaginationController, height_mm: float = layout.BLOCK_GAP_MM) -> float:
    return pager.advance(layout.mm_to_pt(height_mm))


def header_bar(pager: PaginationController, title: str, subtitle: str = "", *, height_mm: float = 26.0) -> float:
    """Full-width band at the cursor with a title and optional subtitle."""
    theme = pager.theme
    height = layout.mm_to_pt(height_mm)
    y = pager.ensure_space(height)
    pager.draw(RectOp(0.0, y, pager.page_width, height, fill=theme.header_fill, tag="header-bar"))
    pager.draw(LineOp(0.0, y + height, pager.page_width, y + height, color=theme.accent, width=2.0,
                      tag="header-bar-accent"))
    title_size = layout.SECTION_TITLE_FONT_SIZE + 4.0
    text_top = y + height * 0.5 - (layout.line_height(title_size) if subtitle else layout.line_height(title_size) * 0.5)
    pager.draw(TextOp(pager.safe.left, geometry.baseline(text_top, title_size), sanitize(title),
                      theme.font_bold, title_size, theme.header_text, tag="header-bar-title"))
    if subtitle:
        sub_top = text_top + layout.line_height(title_size)
        pager.draw(TextOp(pager.safe.left, geometry.baseline(sub_top, layout.BODY_FONT_SIZE), sanitize(subtitle),
                          theme.font_regular, layout.BODY_FONT_SIZE, theme.header_text, tag="header-bar-subtitle"))
    return pager.advance(height + _gap())


def section_title(pager: PaginationController, title: str, *, keep_with: float = 0.0) -> float:
    """Filled title bar; kept on the same page as at least two body lines (or ``keep_with`` points)."""
    theme = pager.theme
    height = layout.mm_to_pt(layout.SECTION_TITLE_HEIGHT_MM)
    keep_with_next = max(2.0 * layout.line_height(layout.BODY_FONT_SIZE) + 2.0 * _pad(), float(keep_with))
    y = pager.ensure_space(height + keep_with_next)
    x = pager.safe.left
    width = pager.safe.width
    size = layout.SECTION_TITLE_FONT_SIZE
    pager.draw(RectOp(x, y, width, height, fill=theme.header_fill, radius=1.5, tag="section-title-bar"))
    pager.draw(LineOp(x, y + height, x + width, y + height, color=theme.accent, width=1.2, tag="section-title-accent"))
    text_top = y + (height - layout.line_height(size)) * 0.5
    pager.draw(TextOp(x + _pad() * 1.5, geometry.baseline(text_top, size), sanitize(title).upper(),
                      theme.font_bold, size, theme.header_text, tag="section-title"))
    return pager.advance(height + _gap())


def _value_lines(pager: PaginationController, value: object, width: float) -> List[str]:
    measurer = font_measurer(pager.theme.font_regular, layout.BODY_FONT_SIZE)
    return wrap(display_value(value), width - 2.0 * _pad(), measurer)


def _paint_info_box(pager: PaginationController, x: float, y: float, width: float, height: float,
                    label: str, lines: Sequence[str], tag: str) -> None:
    theme = pager.theme
    pad = _pad()
    pager.draw(RectOp(x, y, width, height, fill=theme.box_fill, stroke=theme.border_color, line_width=0.5,
                      radius=1.5, tag=tag))
    pager.draw(LineOp(x, y + 1.5, x, y + height - 1.5, color=theme.accent, width=1.4, tag=f"{tag}-accent"))
    top = y + pad
    pager.draw(TextOp(x + pad, geometry.baseline(top, layout.LABEL_FONT_SIZE), sanitize(label).upper(),
                      theme.font_bold, layout.LABEL_FONT_SIZE, theme.label_text, tag=f"{tag}-label"))
    top += layout.line_height(layout.LABEL_FONT_SIZE)
    for line in lines:
        pager.draw(TextOp(x + pad, geometry.baseline(top, layout.BODY_FONT_SIZE), line,
                          theme.font_regular, layout.BODY_FONT_SIZE, theme.body_text, tag=f"{tag}-value"))
        top += layout.line_height(layout.BODY_FONT_SIZE)


def info_box(pager: PaginationController, label: str, value: object, *, x: Optional[float] = None,
             width: Optional[float] = None, tag: str = "info-box") -> float:
    """Labeled value box whose height follows the wrapped line count.

    Values taller than a page continue in further boxes on the next pages.
    """
    x = pager.safe.left if x is None else float(x)
    width = pager.safe.width if width is None else float(width)
    pad = _pad()
    rest = _value_lines(pager, value, width)
    part_label = sanitize(label)
    while rest:
        needed = geometry.info_box_height(len(rest), layout.LABEL_FONT_SIZE, layout.BODY_FONT_SIZE, pad)
        y = pager.ensure_space(needed)
        capacity = geometry.info_box_capacity(pager.remaining(), layout.LABEL_FONT_SIZE, layout.BODY_FONT_SIZE, pad)
        chunk, rest = rest[:capacity], rest[capacity:]
        height = geometry.info_box_height(len(chunk), layout.LABEL_FONT_SIZE, layout.BODY_FONT_SIZE, pad)
        _paint_info_box(pager, x, y, width, height, part_label, chunk, tag)
        pager.advance(height)
        part_label = f"{sanitize(label)} {CONTINUED}"
    return pager.advance(_gap())


def info_row(pager: PaginationController, left: Tuple[str, object], right: Tuple[str, object],
             *, tag: str = "info-box") -> float:
    """Two boxes side by side, both as tall as the taller one."""
    (lx, lw), (rx, rw) = geometry.columns(pager.safe.left, pager.safe.width, 2,
                                          layout.mm_to_pt(layout.COLUMN_GAP_MM))
    pad = _pad()
    left_lines = _value_lines(pager, left[1], lw)
    right_lines = _value_lines(pager, right[1], rw)
    height = geometry.info_box_height(max(len(left_lines), len(right_lines)), layout.LABEL_FONT_SIZE,
                                      layout.BODY_FONT_SIZE, pad)
    if height > pager.safe.height:
        info_box(pager, left[0], left[1], tag=tag)
        return info_box(pager, right[0], right[1], tag=tag)
    y = pager.ensure_space(height)
    _paint_info_box(pager, lx, y, lw, height, left[0], left_lines, tag)
    _paint_info_box(pager, rx, y, rw, height, right[0], right_lines, tag)
    return pager.advance(height + _gap())


def badge(pager: PaginationController, text: str, x: float, y: float, *, fill: str, text_color: str,
          stroke: Optional[str] = None, align: str = "left", tag: str = "badge") -> Tuple[float, float, float]:
    """Rounded label at an absolute position; the cursor does not move."""
    theme = pager.theme
    clean = sanitize(text).upper()
    size = layout.BADGE_FONT_SIZE
    text_w = font_measurer(theme.font_bold, size)(clean)
    width, height = geometry.badge_size(text_w)
    if align == "center":
        x = float(x) - width * 0.5
    elif align == "right":
        x = float(x) - width
    pager.draw(RectOp(x, y, width, height, fill=fill, stroke=stroke, line_width=1.0, radius=height * 0.5, tag=tag))
    text_top = y + (height - layout.line_height(size)) * 0.5
    pager.draw(TextOp(x + width * 0.5, geometry.baseline(text_top, size), clean, theme.font_bold, size,
                      text_color, align="center", tag=f"{tag}-text"))
    return x, width, height


def status_badge(pager: PaginationController, status: str, x: float, y: float,
                 *, align: str = "left") -> Tuple[float, float, float]:
    theme = pager.theme
    text = labels.STATUS_LABELS.get(status, sanitize(status) or labels.NOT_INFORMED)
    stroke = theme.accent if theme.page_background else None
    return badge(pager, text, x, y, fill=status_color(theme, status), text_color="#FFFFFF", stroke=stroke,
                 align=align, tag="status-badge")


def text_block(pager: PaginationController, text: object, *, size: float = layout.BODY_FONT_SIZE,
               font: Optional[str] = None, color: Optional[str] = None, x: Optional[float] = None,
               width: Optional[float] = None, tag: str = "text") -> float:
    """Flow wrapped text line-run by line-run across pages."""
    theme = pager.theme
    font = font or theme.font_regular
    color = color or theme.body_text
    x = pager.safe.left if x is None else float(x)
    width = pager.safe.width if width is None else float(width)
    lh = layout.line_height(size)
    rest = wrap(text, width, font_measurer(font, size))
    while rest:
        top = pager.ensure_space(lh)
        capacity = max(1, geometry.lines_capacity(pager.remaining(), size))
        chunk, rest = rest[:capacity], rest[capacity:]
        for line in chunk:
            pager.draw(TextOp(x, geometry.baseline(top, size), line, font, size, color, tag=tag))
            top += lh
        pager.advance(lh * len(chunk))
    return pager.y


def placeholder_box(pager: PaginationController, x: float, y: float, width: float, height: float,
                    message: str = labels.IMAGE_UNAVAILABLE, *, tag: str = "placeholder") -> None:
    theme = pager.theme
    pager.draw(RectOp(x, y, width, height, fill=theme.placeholder_fill, stroke=theme.border_color,
                      line_width=0.8, dash=(3.0, 2.0), tag=tag))
    size = layout.BODY_FONT_SIZE
    text_top = y + (height - layout.line_height(size)) * 0.5
    pager.draw(TextOp(x + width * 0.5, geometry.baseline(text_top, size), sanitize(message), theme.font_italic,
                      size, theme.muted_text, align="center", tag=f"{tag}-text"))


def ruled_line(pager: PaginationController, x: float, y: float, width: float, *, tag: str = "rule") -> None:
    pager.draw(LineOp(x, y, x + width, y, color=pager.theme.body_text, width=0.6, tag=tag))


def _table_style(pager: PaginationController) -> TableStyleSpec:
    theme = pager.theme
    size = layout.TABLE_FONT_SIZE
    return TableStyleSpec(
        font=theme.font_regular,
        bold_font=theme.font_bold,
        font_size=size,
        leading=layout.line_height(size),
        padding=layout.mm_to_pt(layout.CELL_PADDING_MM),
        header_fill=theme.header_fill,
        header_text=theme.header_text,
        body_text=theme.body_text,
        alt_row_fill=theme.alt_row_fill,
        border_color=theme.border_color,
        body_fill=theme.page_background,
    )


def table(pager: PaginationController, columns: Sequence[str], rows: Sequence[Sequence[object]], *,
          ratios: Optional[Sequence[float]] = None, aligns: Optional[Sequence[str]] = None,
          tag: str = "table") -> float:
    """Themed table: header row, striped body, page breaks between rows.

    The header row is repeated at the top of every page the table spans.
    """
    n = max(1, len(columns))
    widths = geometry.column_widths(pager.safe.width, ratios or [1.0] * n)
    style = _table_style(pager)
    inner = [max(1.0, w - 2.0 * style.padding) for w in widths]
    bold = font_measurer(style.bold_font, style.font_size)
    regular = font_measurer(style.font, style.font_size)
    aligns_t = tuple(aligns) if aligns else ("left",) * n

    header_cells = [wrap(c, inner[i], bold) for i, c in enumerate(list(columns)[:n])]
    header_h = geometry.table_row_height([len(c) for c in header_cells], style.font_size, style.padding)
    max_lines = max(1, geometry.lines_capacity(pager.safe.height - header_h - 2.0 * style.padding, style.font_size))

    body_rows = [list(r) for r in rows] or [[labels.NO_RECORDS] + [""] * (n - 1)]
    body = []
    for row in body_rows:
        cells = []
        for i in range(n):
            value = row[i] if i < len(row) else ""
            lines = wrap(value, inner[i], regular)
            if len(lines) > max_lines:
                lines = lines[:max_lines - 1] + ["..."]
            cells.append(lines)
        body.append((cells, geometry.table_row_height([len(c) for c in cells], style.font_size, style.padding)))

    def _flush(run_y, run_cells, run_heights, first_index):
        pager.draw(TableOp(
            x=pager.safe.left,
            y=run_y,
            col_widths=tuple(widths),
            row_heights=tuple(run_heights),
            cells=tuple(tuple("\n".join(c) for c in r) for r in run_cells),
            style=style,
            header_rows=1,
            first_body_index=first_index,
            aligns=aligns_t,
            tag=tag,
        ))
        pager.advance(sum(run_heights))

    run_y = pager.ensure_space(header_h + body[0][1])
    run_cells = [header_cells]
    run_heights = [header_h]
    first_index = 0
    for index, (cells, height) in enumerate(body):
        run_end = run_y + sum(run_heights)
        if len(run_cells) > 1 and not geometry.fits(run_end, height, pager.bottom_limit):
            _flush(run_y, run_cells, run_heights, first_index)
            run_y = pager.ensure_space(header_h + height)
            run_cells = [header_cells]
            run_heights = [header_h]
            first_index = index
        run_cells.append(cells)
        run_heights.append(height)
    _flush(run_y, run_cells, run_heights, first_index)
    return pager.advance(_gap())
