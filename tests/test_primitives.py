from __future__ import annotations

import pytest

from dispatch_reports import labels
from dispatch_reports.document import RectOp, TableOp
from dispatch_reports.layout import mm_to_pt
from dispatch_reports.primitives import (
    badge,
    header_bar,
    info_box,
    info_row,
    placeholder_box,
    section_title,
    spacer,
    status_badge,
    table,
    text_block,
)


def test_info_box_height_grows_with_wrapped_lines(make_pager):
    pager = make_pager(with_cover=False)
    info_box(pager, "Cliente", "Curto")
    short = pager.page.tagged("info-box")[0].height
    info_box(pager, "Descrição", "palavra " * 200)
    tall = pager.page.tagged("info-box")[1].height
    assert tall > short * 3


def test_info_box_empty_value_shows_placeholder(make_pager):
    pager = make_pager(with_cover=False)
    info_box(pager, "Endereço", "")
    values = [op.text for op in pager.page.tagged("info-box-value")]
    assert values == [labels.NOT_INFORMED]


def test_info_box_taller_than_page_continues_on_next_pages(make_pager):
    pager = make_pager(with_cover=False)
    info_box(pager, "Observações", "linha de texto longa " * 900)
    boxes = pager.descriptor.find("info-box")
    assert len({page for page, _ in boxes}) >= 2
    for _, box in boxes:
        assert box.y + box.height <= pager.bottom_limit + 1e-6


def test_info_row_boxes_share_height(make_pager):
    pager = make_pager(with_cover=False)
    info_row(pager, ("Status", "Concluído"), ("Técnicos", "Ana, Bruno, Carla, " * 12))
    left, right = pager.page.tagged("info-box")
    assert left.height == pytest.approx(right.height)
    assert left.y == pytest.approx(right.y)
    assert left.x < right.x


def test_section_title_keeps_with_following_block(make_pager):
    pager = make_pager(with_cover=False)
    pager.draw(RectOp(pager.safe.left, pager.y, 10.0, 10.0, fill="#000000", tag="block"))
    pager.advance(pager.remaining() - 5.0)
    section_title(pager, "Checklist")
    assert pager.descriptor.page_count == 2
    assert pager.page.tagged("section-title")[0].text == "CHECKLIST"


def test_badge_alignment(make_pager):
    pager = make_pager(with_cover=False)
    x, width, _ = badge(pager, "os 42", 300.0, 100.0, fill="#000000", text_color="#FFFFFF", align="center")
    assert x + width * 0.5 == pytest.approx(300.0)
    assert pager.page.tagged("badge-text")[0].text == "OS 42"
    x, width, _ = badge(pager, "x", 300.0, 130.0, fill="#000000", text_color="#FFFFFF", align="right")
    assert x + width == pytest.approx(300.0)


def test_status_badge_uses_localized_label_and_color(make_pager):
    pager = make_pager(with_cover=False)
    status_badge(pager, "completed", 50.0, 50.0)
    rect = pager.page.tagged("status-badge")[0]
    assert rect.fill == pager.theme.success
    assert pager.page.tagged("status-badge-text")[0].text == "CONCLUÍDO"


def test_placeholder_box_is_dashed_with_message(make_pager):
    pager = make_pager(with_cover=False)
    placeholder_box(pager, 10.0, 20.0, 100.0, 60.0, tag="photo-placeholder")
    rect = pager.page.tagged("photo-placeholder")[0]
    assert rect.dash
    assert (rect.width, rect.height) == (100.0, 60.0)
    assert pager.page.tagged("photo-placeholder-text")[0].text == labels.IMAGE_UNAVAILABLE


def test_text_block_flows_across_pages(make_pager):
    pager = make_pager(with_cover=False)
    text_block(pager, "\n".join(f"linha {i}" for i in range(200)))
    lines = pager.descriptor.find("text")
    assert len(lines) == 200
    assert lines[-1][0] >= 1
    assert [op.text for _, op in lines][:2] == ["linha 0", "linha 1"]


def test_table_repeats_header_on_each_page(make_pager):
    pager = make_pager(with_cover=False)
    rows = [[f"Item {i}", str(i)] for i in range(150)]
    table(pager, ["Item", "Valor"], rows, tag="grid")
    runs = [op for _, op in pager.descriptor.find("grid")]
    assert len(runs) >= 2
    assert all(isinstance(op, TableOp) for op in runs)
    for run in runs:
        assert run.cells[0] == ("Item", "Valor")
        assert run.y + run.height <= pager.bottom_limit + 1e-6
    body = [row[0] for run in runs for row in run.cells[1:]]
    assert body == [f"Item {i}" for i in range(150)]
    # Striping continues from the global row index.
    assert runs[1].first_body_index == len(runs[0].cells) - 1


def test_empty_table_shows_no_records_row(make_pager):
    pager = make_pager(with_cover=False)
    table(pager, ["A", "B"], [], tag="grid")
    run = pager.page.tagged("grid")[0]
    assert run.cells[1][0] == labels.NO_RECORDS


def test_table_wraps_long_cells(make_pager):
    pager = make_pager(with_cover=False)
    table(pager, ["Item", "Resposta"], [["x", "texto muito longo " * 20]], tag="grid")
    run = pager.page.tagged("grid")[0]
    assert "\n" in run.cells[1][1]
    assert run.row_heights[1] > run.row_heights[0]


def test_header_bar_spans_page_width(make_pager):
    pager = make_pager(with_cover=False)
    y0 = pager.y
    header_bar(pager, "Relatório Executivo", "Período: 01/03/2024 a 10/03/2024")
    band = pager.page.tagged("header-bar")[0]
    assert band.x == 0.0
    assert band.width == pytest.approx(pager.page_width)
    assert band.y == pytest.approx(y0)
    assert pager.y > band.y + band.height
    assert pager.page.tagged("header-bar-subtitle")[0].text.startswith("Período")


def test_spacer_moves_cursor(make_pager):
    pager = make_pager(with_cover=False)
    y0 = pager.y
    spacer(pager, 10.0)
    assert pager.y == pytest.approx(y0 + mm_to_pt(10.0))
