"""reportlab backend: paint a ReportDescriptor onto a PDF canvas."""

from __future__ import annotations

import io
import logging
from typing import List, Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as rl_canvas
from reportlab.platypus import Table, TableStyle

from .document import DrawOp, ImageOp, LineOp, RectOp, ReportDescriptor, TableOp, TextOp
from .text import font_safe

log = logging.getLogger(__name__)

_ALIGN = {"left": "LEFT", "right": "RIGHT", "center": "CENTER"}


def _color(value: Optional[str]):
    return HexColor(value) if value else None


def _draw_text(canv: rl_canvas.Canvas, op: TextOp, page_h: float) -> None:
    text = font_safe(op.text)
    if not text:
        return
    canv.setFillColor(HexColor(op.color))
    canv.setFont(op.font, float(op.size))
    y = page_h - float(op.y)
    if op.align == "center":
        canv.drawCentredString(float(op.x), y, text)
    elif op.align == "right":
        canv.drawRightString(float(op.x), y, text)
    else:
        canv.drawString(float(op.x), y, text)


def _draw_rect(canv: rl_canvas.Canvas, op: RectOp, page_h: float) -> None:
    fill = _color(op.fill)
    stroke = _color(op.stroke)
    if fill is None and stroke is None:
        return
    canv.saveState()
    if fill is not None:
        canv.setFillColor(fill)
    if stroke is not None:
        canv.setStrokeColor(stroke)
        canv.setLineWidth(float(op.line_width))
    if op.dash:
        canv.setDash(list(op.dash))
    bottom = page_h - float(op.y) - float(op.height)
    if op.radius > 0.0:
        canv.roundRect(float(op.x), bottom, float(op.width), float(op.height), float(op.radius),
                       stroke=int(stroke is not None), fill=int(fill is not None))
    else:
        canv.rect(float(op.x), bottom, float(op.width), float(op.height),
                  stroke=int(stroke is not None), fill=int(fill is not None))
    canv.restoreState()


def _draw_line(canv: rl_canvas.Canvas, op: LineOp, page_h: float) -> None:
    canv.saveState()
    canv.setStrokeColor(HexColor(op.color))
    canv.setLineWidth(float(op.width))
    canv.line(float(op.x1), page_h - float(op.y1), float(op.x2), page_h - float(op.y2))
    canv.restoreState()


def _draw_image(canv: rl_canvas.Canvas, op: ImageOp, page_h: float) -> None:
    reader = ImageReader(io.BytesIO(op.payload))
    canv.drawImage(
        reader,
        float(op.x),
        page_h - float(op.y) - float(op.height),
        width=float(op.width),
        height=float(op.height),
        mask="auto",
    )


def _table_commands(op: TableOp) -> List[tuple]:
    style = op.style
    cmds: List[tuple] = [
        ("FONTNAME", (0, 0), (-1, -1), style.font),
        ("FONTSIZE", (0, 0), (-1, -1), float(style.font_size)),
        ("LEADING", (0, 0), (-1, -1), float(style.leading)),
        ("TEXTCOLOR", (0, 0), (-1, -1), HexColor(style.body_text)),
        ("GRID", (0, 0), (-1, -1), 0.25, HexColor(style.border_color)),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), float(style.padding)),
        ("RIGHTPADDING", (0, 0), (-1, -1), float(style.padding)),
        ("TOPPADDING", (0, 0), (-1, -1), float(style.padding)),
        ("BOTTOMPADDING", (0, 0), (-1, -1), float(style.padding)),
    ]
    for col, align in enumerate(op.aligns):
        cmds.append(("ALIGN", (col, 0), (col, -1), _ALIGN.get(align, "LEFT")))
    if op.header_rows > 0:
        last = op.header_rows - 1
        cmds.extend(
            [
                ("BACKGROUND", (0, 0), (-1, last), HexColor(style.header_fill)),
                ("TEXTCOLOR", (0, 0), (-1, last), HexColor(style.header_text)),
                ("FONTNAME", (0, 0), (-1, last), style.bold_font),
            ]
        )
    for row in range(op.header_rows, len(op.cells)):
        body_index = op.first_body_index + (row - op.header_rows)
        if body_index % 2 == 1:
            cmds.append(("BACKGROUND", (0, row), (-1, row), HexColor(style.alt_row_fill)))
        elif style.body_fill:
            cmds.append(("BACKGROUND", (0, row), (-1, row), HexColor(style.body_fill)))
    return cmds


def _draw_table(canv: rl_canvas.Canvas, op: TableOp, page_h: float) -> None:
    data = [[font_safe(cell) for cell in row] for row in op.cells]
    tbl = Table(data, colWidths=list(op.col_widths), rowHeights=list(op.row_heights), hAlign="LEFT")
    tbl.setStyle(TableStyle(_table_commands(op)))
    tbl.wrapOn(canv, op.width, op.height)
    tbl.drawOn(canv, float(op.x), page_h - float(op.y) - op.height)


_PAINTERS = {
    TextOp: _draw_text,
    RectOp: _draw_rect,
    LineOp: _draw_line,
    ImageOp: _draw_image,
    TableOp: _draw_table,
}


def draw_op(canv: rl_canvas.Canvas, op: DrawOp, page_h: float) -> None:
    painter = _PAINTERS.get(type(op))
    if painter is None:
        raise TypeError(f"Unsupported draw operation: {type(op).__name__}")
    painter(canv, op, page_h)


def render_pdf(descriptor: ReportDescriptor, output_pdf_path: str) -> int:
    """Write every page of the descriptor to output_pdf_path; returns the page count."""
    page_h = float(descriptor.page_size[1])
    canv = rl_canvas.Canvas(output_pdf_path, pagesize=descriptor.page_size, pageCompression=1)
    canv.setTitle(font_safe(descriptor.title))
    canv.setSubject(descriptor.kind)
    canv.setCreator("dispatch_reports")
    author = descriptor.metadata.get("author", "")
    if author:
        canv.setAuthor(font_safe(author))
    for page in descriptor.pages:
        for op in page.ops():
            draw_op(canv, op, page_h)
        canv.showPage()
    canv.save()
    log.debug("Rendered %d pages to %s", len(descriptor.pages), output_pdf_path)
    return len(descriptor.pages)
