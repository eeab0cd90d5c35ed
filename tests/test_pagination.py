from __future__ import annotations

import pytest

from dispatch_reports.document import RectOp, TextOp
from dispatch_reports.layout import PAGE_SIZE, get_safe_box, mm_to_pt


def _mark(pager, height=10.0, tag="block"):
    y = pager.ensure_space(height)
    pager.draw(RectOp(pager.safe.left, y, 20.0, height, fill="#000000", tag=tag))
    pager.advance(height)
    return y


def test_safe_box_leaves_room_for_header_and_footer():
    safe = get_safe_box(PAGE_SIZE)
    assert safe.top == pytest.approx(mm_to_pt(32.0))
    assert safe.bottom == pytest.approx(PAGE_SIZE[1] - mm_to_pt(20.0))
    assert safe.right == pytest.approx(PAGE_SIZE[0] - mm_to_pt(20.0))


def test_document_opens_on_cover(make_pager):
    pager = make_pager()
    assert pager.state == "cover"
    assert pager.page.is_cover
    y = pager.start_page()
    assert pager.state == "content"
    assert y == pytest.approx(pager.safe.top)
    assert pager.descriptor.page_count == 2


def test_block_that_fits_stays_on_page(make_pager):
    pager = make_pager(with_cover=False)
    _mark(pager, 100.0)
    y = _mark(pager, 100.0)
    assert y == pytest.approx(pager.safe.top + 100.0)
    assert pager.descriptor.page_count == 1


def test_block_that_does_not_fit_moves_to_next_page(make_pager):
    pager = make_pager(with_cover=False)
    _mark(pager, pager.safe.height - 50.0)
    y = _mark(pager, 80.0)
    assert pager.descriptor.page_count == 2
    assert y == pytest.approx(pager.safe.top)


def test_block_ending_exactly_at_bottom_limit_fits(make_pager):
    pager = make_pager(with_cover=False)
    _mark(pager, pager.safe.height - 40.0)
    _mark(pager, 40.0)
    assert pager.descriptor.page_count == 1


def test_oversize_block_on_fresh_page_does_not_loop(make_pager):
    pager = make_pager(with_cover=False)
    y = pager.ensure_space(pager.safe.height * 3)
    assert y == pytest.approx(pager.safe.top)
    assert pager.descriptor.page_count == 1
    # Still no break while the page is untouched.
    assert pager.ensure_space(pager.safe.height * 3) == pytest.approx(pager.safe.top)
    assert pager.descriptor.page_count == 1


def test_oversize_block_after_content_breaks_once(make_pager):
    pager = make_pager(with_cover=False)
    _mark(pager, 30.0)
    y = pager.ensure_space(pager.safe.height * 2)
    assert pager.descriptor.page_count == 2
    assert y == pytest.approx(pager.safe.top)


def test_cover_gets_no_chrome_and_numbering_skips_it(make_pager):
    pager = make_pager()
    pager.start_page()
    _mark(pager, pager.safe.height)
    _mark(pager, 40.0)
    pager.apply_chrome("Relatório de teste", "05/03/2024 10:00")

    cover, first, second = pager.descriptor.pages
    assert cover.chrome == []
    assert cover.tagged("page-number") == []
    numbers = [p.tagged("page-number")[0].text for p in (first, second)]
    assert numbers == ["Página 1 de 2", "Página 2 de 2"]
    assert "Página 1 de 2" in first.text()
    assert first.tagged("header-title")[0].text == "Relatório de teste"
    assert first.tagged("header-date")[0].text == "05/03/2024 10:00"


def test_chrome_draws_after_content(make_pager):
    pager = make_pager(with_cover=False)
    _mark(pager, 20.0)
    pager.apply_chrome("T", "01/01/2024 00:00")
    ops = list(pager.descriptor.pages[0].ops())
    tags = [getattr(op, "tag", "") for op in ops]
    assert tags.index("block") < tags.index("header-band")
    assert isinstance(ops[-1], TextOp)


def test_dark_theme_paints_background_under_content(make_pager):
    pager = make_pager("corporate-dark")
    pager.start_page()
    _mark(pager, 20.0)
    pager.apply_chrome("T", "01/01/2024 00:00")
    cover, page = pager.descriptor.pages
    assert cover.background == []
    background = page.tagged("page-background")
    assert len(background) == 1
    assert background[0].fill == "#262426"
    assert list(page.ops())[0] is background[0]


def test_light_theme_has_no_page_background(make_pager):
    pager = make_pager("corporate", with_cover=False)
    _mark(pager, 20.0)
    pager.apply_chrome("T", "01/01/2024 00:00")
    assert pager.descriptor.pages[0].tagged("page-background") == []
