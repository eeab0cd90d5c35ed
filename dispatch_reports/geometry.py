"""Pure layout arithmetic; no drawing, no backend."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from . import layout


def fits(y: float, required: float, limit: float) -> bool:
    return float(y) + float(required) <= float(limit) + 1e-6


def columns(left: float, width: float, count: int, gap: float) -> List[Tuple[float, float]]:
    """Split a span into ``count`` equal columns separated by ``gap``."""
    n = max(1, int(count))
    col_w = (float(width) - float(gap) * (n - 1)) / n
    return [(float(left) + i * (col_w + float(gap)), col_w) for i in range(n)]


def column_widths(total: float, ratios: Sequence[float]) -> Tuple[float, ...]:
    weights = [max(0.0, float(r)) for r in ratios] or [1.0]
    if not sum(weights):
        weights = [1.0] * len(weights)
    norm = sum(weights)
    return tuple(float(total) * w / norm for w in weights)


def centered(left: float, width: float, inner: float) -> float:
    return float(left) + (float(width) - float(inner)) * 0.5


def text_block_height(line_count: int, font_size: float) -> float:
    return max(1, int(line_count)) * layout.line_height(font_size)


def info_box_height(line_count: int, label_size: float, value_size: float, padding: float) -> float:
    """Label line plus one line per wrapped value line, padded on both sides."""
    return 2.0 * float(padding) + layout.line_height(label_size) + text_block_height(line_count, value_size)


def info_box_capacity(available: float, label_size: float, value_size: float, padding: float) -> int:
    """How many value lines fit in a box of at most ``available`` height."""
    body = float(available) - 2.0 * float(padding) - layout.line_height(label_size)
    return max(1, int((body + 1e-6) // layout.line_height(value_size)))


def table_row_height(line_counts: Sequence[int], font_size: float, padding: float) -> float:
    tallest = max([max(1, int(n)) for n in line_counts] or [1])
    return tallest * layout.line_height(font_size) + 2.0 * float(padding)


def lines_capacity(available: float, font_size: float) -> int:
    return max(0, int((float(available) + 1e-6) // layout.line_height(font_size)))


def photo_block_height(image_height: float) -> float:
    return layout.mm_to_pt(layout.CAPTION_HEIGHT_MM) + float(image_height) + layout.mm_to_pt(layout.BLOCK_GAP_MM)


def badge_size(text_width: float) -> Tuple[float, float]:
    pad = layout.mm_to_pt(layout.BADGE_PADDING_MM)
    return float(text_width) + 2.0 * pad, layout.mm_to_pt(layout.BADGE_HEIGHT_MM)


def baseline(top: float, font_size: float) -> float:
    """Baseline of a text line whose line box starts at ``top``."""
    size = float(font_size)
    return float(top) + (layout.line_height(size) - size) * 0.5 + size * 0.8
