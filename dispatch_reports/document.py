"""Report descriptor: pages of draw operations, independent of the PDF backend.

Coordinates are points with the origin at the top-left corner of the page;
``y`` is the top edge of boxes and the baseline of text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    font: str
    size: float
    color: str
    align: str = "left"
    tag: str = ""


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    line_width: float = 0.5
    radius: float = 0.0
    dash: Optional[Tuple[float, float]] = None
    tag: str = ""


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 0.5
    tag: str = ""


@dataclass(frozen=True)
class ImageOp:
    x: float
    y: float
    width: float
    height: float
    payload: bytes = field(repr=False)
    format: str = "PNG"
    tag: str = ""


@dataclass(frozen=True)
class TableStyleSpec:
    font: str
    bold_font: str
    font_size: float
    leading: float
    padding: float
    header_fill: str
    header_text: str
    body_text: str
    alt_row_fill: str
    border_color: str
    body_fill: Optional[str] = None


@dataclass(frozen=True)
class TableOp:
    """A run of table rows that fits on one page."""

    x: float
    y: float
    col_widths: Tuple[float, ...]
    row_heights: Tuple[float, ...]
    cells: Tuple[Tuple[str, ...], ...]
    style: TableStyleSpec
    header_rows: int = 1
    first_body_index: int = 0
    aligns: Tuple[str, ...] = ()
    tag: str = ""

    @property
    def width(self) -> float:
        return float(sum(self.col_widths))

    @property
    def height(self) -> float:
        return float(sum(self.row_heights))


DrawOp = Union[TextOp, RectOp, LineOp, ImageOp, TableOp]


@dataclass
class Page:
    index: int
    is_cover: bool = False
    background: List[DrawOp] = field(default_factory=list)
    content: List[DrawOp] = field(default_factory=list)
    chrome: List[DrawOp] = field(default_factory=list)

    def ops(self) -> Iterator[DrawOp]:
        """Paint order: background, content, then header/footer."""
        yield from self.background
        yield from self.content
        yield from self.chrome

    def tagged(self, tag: str) -> List[DrawOp]:
        return [op for op in self.ops() if getattr(op, "tag", "") == tag]

    def text(self) -> str:
        return "\n".join(op.text for op in self.ops() if isinstance(op, TextOp))


@dataclass
class ReportDescriptor:
    kind: str
    title: str
    theme: str
    page_size: Tuple[float, float]
    pages: List[Page] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def content_pages(self) -> List[Page]:
        return [p for p in self.pages if not p.is_cover]

    def find(self, tag: str) -> List[Tuple[int, DrawOp]]:
        """Tagged operations in document order, paired with their page index."""
        out: List[Tuple[int, DrawOp]] = []
        for page in self.pages:
            for op in page.content:
                if getattr(op, "tag", "") == tag:
                    out.append((page.index, op))
        return out
