"""Letterhead underlay for generated report PDFs."""

from __future__ import annotations

import copy
import os

from pypdf import PdfReader, PdfWriter


def apply_template_underlay(
    content_pdf_path: str,
    template_pdf_path: str,
    output_pdf_path: str,
    *,
    skip_first: bool = True,
) -> int:
    """Merge template pages beneath content pages; returns the page count.

    Template page i backs content page i, the last template page repeating.
    With ``skip_first`` the cover keeps its own full-bleed design.
    """
    if not os.path.isfile(content_pdf_path):
        raise FileNotFoundError(f"Content PDF not found: {content_pdf_path}")
    if not os.path.isfile(template_pdf_path):
        raise FileNotFoundError(f"Template PDF not found: {template_pdf_path}")

    content_reader = PdfReader(content_pdf_path)
    template_reader = PdfReader(template_pdf_path)
    if not content_reader.pages:
        raise ValueError("Content PDF has no pages.")
    if not template_reader.pages:
        raise ValueError("Template PDF has no pages.")

    writer = PdfWriter()
    total = len(content_reader.pages)
    offset = 1 if skip_first else 0

    for idx, page in enumerate(content_reader.pages):
        if idx < offset:
            writer.add_page(page)
        else:
            template_idx = min(idx - offset, len(template_reader.pages) - 1)
            base_page = copy.copy(template_reader.pages[template_idx])
            base_page.merge_page(page)
            writer.add_page(base_page)

    out_dir = os.path.dirname(os.path.abspath(output_pdf_path))
    os.makedirs(out_dir, exist_ok=True)
    with open(output_pdf_path, "wb") as f:
        writer.write(f)
    return total
