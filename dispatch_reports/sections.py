"""Section composers for single-service reports.

Each composer takes the record and the pagination controller, draws one
semantic section through the primitives and returns the cursor y.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Sequence, Tuple

from . import geometry, labels, layout
from .document import ImageOp, LineOp, RectOp, TextOp
from .images import ImagePipeline, fit
from .models import ChecklistEntry, Message, ServiceRecord, SignaturePair
from .pagination import PaginationController
from .primitives import (
    badge,
    info_box,
    info_row,
    placeholder_box,
    ruled_line,
    section_title,
    spacer,
    status_badge,
    table,
    text_block,
)
from .text import (
    display_value,
    ellipsize,
    font_measurer,
    fold,
    format_date,
    format_datetime,
    parse_datetime,
    sanitize,
    wrap,
)

_TRUE_WORDS = {"true", "sim", "s", "yes", "y", "1", "on", "ok", "conforme"}
_FALSE_WORDS = {"false", "nao", "não", "n", "no", "0", "off", "nao conforme", "não conforme"}


def compose_cover(
    pager: PaginationController,
    *,
    title: str,
    subtitle: str = "",
    headline: str = "",
    tagline: str = "",
    status: Optional[str] = None,
    reference: str = "",
    details: Sequence[str] = (),
    generated_on: str = "",
) -> float:
    """Full-bleed cover page. Draws nothing when the cursor is past the cover."""
    if not pager.page.is_cover:
        return pager.y
    theme = pager.theme
    page_w = pager.page_width
    page_h = pager.page_height
    center = page_w * 0.5
    mm = layout.mm_to_pt

    pager.draw(RectOp(0.0, 0.0, page_w, page_h, fill=theme.cover_background, tag="cover-background"))
    pager.draw(RectOp(0.0, 0.0, page_w, mm(12.0), fill=theme.header_fill, tag="cover-strip"))
    pager.draw(LineOp(0.0, mm(12.0), page_w, mm(12.0), color=theme.accent, width=2.5, tag="cover-strip-accent"))

    size = layout.COVER_TITLE_FONT_SIZE
    pager.draw(TextOp(center, geometry.baseline(mm(62.0), size), sanitize(title), theme.font_bold, size,
                      theme.cover_text, align="center", tag="cover-title"))
    top = mm(62.0) + layout.line_height(size) + mm(2.0)
    if subtitle:
        size = layout.COVER_SUBTITLE_FONT_SIZE
        pager.draw(TextOp(center, geometry.baseline(top, size), sanitize(subtitle), theme.font_regular, size,
                          theme.muted_text if not theme.page_background else theme.cover_text, align="center",
                          tag="cover-subtitle"))
        top += layout.line_height(size)
    top += mm(5.0)
    pager.draw(LineOp(center - mm(30.0), top, center + mm(30.0), top, color=theme.accent, width=2.0,
                      tag="cover-divider"))
    top += mm(18.0)

    if headline:
        size = 16.0
        for line in wrap(headline, pager.safe.width, font_measurer(theme.font_bold, size))[:4]:
            pager.draw(TextOp(center, geometry.baseline(top, size), line, theme.font_bold, size, theme.cover_text,
                              align="center", tag="cover-headline"))
            top += layout.line_height(size)
    if tagline:
        size = layout.COVER_SUBTITLE_FONT_SIZE
        line = ellipsize(tagline, pager.safe.width, font_measurer(theme.font_regular, size))
        pager.draw(TextOp(center, geometry.baseline(top, size), line, theme.font_regular, size, theme.cover_text,
                          align="center", tag="cover-tagline"))
        top += layout.line_height(size)
    top += mm(10.0)

    if status:
        _, _, height = status_badge(pager, status, center, top, align="center")
        top += height + mm(4.0)
    if reference:
        stroke = theme.accent if theme.page_background else None
        _, _, height = badge(pager, reference, center, top, fill=theme.header_fill, text_color=theme.header_text,
                             stroke=stroke, align="center", tag="reference-badge")
        top += height + mm(6.0)

    size = layout.BODY_FONT_SIZE + 1.0
    for line in details:
        pager.draw(TextOp(center, geometry.baseline(top, size), sanitize(line), theme.font_regular, size,
                          theme.cover_text, align="center", tag="cover-detail"))
        top += layout.line_height(size)

    if generated_on:
        size = layout.BODY_FONT_SIZE
        pager.draw(TextOp(center, page_h - mm(25.0), f"{labels.GENERATED_ON}: {sanitize(generated_on)}",
                          theme.font_regular, size, theme.cover_text, align="center", tag="cover-generated"))
    return pager.y


def compose_service_cover(record: ServiceRecord, pager: PaginationController, *, title: str, subtitle: str = "",
                          generated_on: str = "") -> float:
    return compose_cover(
        pager,
        title=title,
        subtitle=subtitle,
        headline=display_value(record.title),
        tagline=sanitize(record.client),
        status=record.status,
        reference=record.reference_label,
        generated_on=generated_on,
    )


def compose_general_info(record: ServiceRecord, pager: PaginationController) -> float:
    section_title(pager, labels.SECTION_GENERAL)
    info_row(pager, ("Número da OS", record.number), ("Status", labels.STATUS_LABELS.get(record.status)))
    info_box(pager, "Título", record.title)
    info_row(pager, ("Cliente", record.client), ("Tipo de serviço", record.service_type))
    info_row(pager, ("Endereço", record.address), ("Cidade", record.city))
    info_row(pager, ("Local", record.location), ("Prioridade", labels.PRIORITY_LABELS.get(record.priority)))
    info_box(pager, "Técnicos responsáveis", record.technicians)
    info_row(pager, ("Criado em", format_date(record.created_at)), ("Prazo", format_date(record.due_date)))
    if record.completed_at is not None:
        info_box(pager, "Concluído em", format_datetime(record.completed_at))
    for label, value in (
        ("Descrição", record.description),
        ("Observações", record.notes),
        ("Comentários técnicos", record.technical_comments),
    ):
        if sanitize(value):
            info_box(pager, label, value, tag="text-box")
    return pager.y


def _as_bool(value: object) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    key = sanitize(value).lower()
    if key in _TRUE_WORDS:
        return True
    if key in _FALSE_WORDS:
        return False
    return None


def checklist_value(entry: ChecklistEntry) -> str:
    """Display string for one checklist answer."""
    value = entry.value
    if entry.field_type == "boolean" or isinstance(value, bool):
        parsed = _as_bool(value)
        if parsed is None:
            return display_value(value)
        return labels.YES if parsed else labels.NO
    return display_value(value)


def compose_checklist(record: ServiceRecord, pager: PaginationController) -> float:
    entries = [e for e in record.checklist if sanitize(e.label) or e.value is not None]
    if not entries:
        return pager.y
    section_title(pager, labels.SECTION_CHECKLIST)
    rows = [[display_value(e.label), checklist_value(e)] for e in entries]
    return table(pager, ["Item", "Resposta"], rows, ratios=[0.62, 0.38], tag="checklist")


async def compose_photo_gallery(record: ServiceRecord, pager: PaginationController, images: ImagePipeline) -> float:
    """Caption and photo as one unbreakable block per photo, in source order."""
    photos = record.photos
    if not photos:
        return pager.y
    theme = pager.theme
    max_w = layout.mm_to_pt(layout.PHOTO_MAX_WIDTH_MM)
    max_h = layout.mm_to_pt(layout.PHOTO_MAX_HEIGHT_MM)
    first = await images.resolve(photos[0].source)
    first_h = fit(first, max_w, max_h)[1] if first is not None else max_h
    section_title(pager, f"{labels.SECTION_PHOTOS} ({len(photos)})", keep_with=geometry.photo_block_height(first_h))
    caption_h = layout.mm_to_pt(layout.CAPTION_HEIGHT_MM)
    size = layout.LABEL_FONT_SIZE + 1.0
    measurer = font_measurer(theme.font_bold, size)
    for index, photo in enumerate(photos, start=1):
        image = first if index == 1 else await images.resolve(photo.source)
        first = None
        if image is not None:
            width, height = fit(image, max_w, max_h)
        else:
            width, height = max_w, max_h
        y = pager.ensure_space(geometry.photo_block_height(height))
        x = geometry.centered(pager.safe.left, pager.safe.width, width)
        caption = ellipsize(f"{index}. {sanitize(photo.caption) or f'Foto {index}'}", pager.safe.width, measurer)
        text_top = y + (caption_h - layout.line_height(size)) * 0.5
        pager.draw(TextOp(pager.safe.left + pager.safe.width * 0.5, geometry.baseline(text_top, size), caption,
                          theme.font_bold, size, theme.body_text, align="center", tag="photo-caption"))
        if image is not None:
            pager.draw(ImageOp(x, y + caption_h, width, height, payload=image.payload, format=image.format,
                               tag="photo"))
        else:
            placeholder_box(pager, x, y + caption_h, width, height, labels.IMAGE_UNAVAILABLE, tag="photo-placeholder")
        image = None
        pager.advance(geometry.photo_block_height(height))
    return pager.y


def _naive(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(dt.timezone.utc).replace(tzinfo=None)


def ordered_messages(messages: Iterable[Message]) -> List[Message]:
    """Chronological order; undated messages keep their order after dated ones."""
    keyed: List[Tuple[int, dt.datetime, int, Message]] = []
    for index, message in enumerate(messages):
        stamp = parse_datetime(message.timestamp)
        if stamp is None:
            keyed.append((1, dt.datetime.min, index, message))
        else:
            keyed.append((0, _naive(stamp), index, message))
    keyed.sort(key=lambda item: item[:3])
    return [item[3] for item in keyed]


def _role_label(role: str) -> str:
    clean = sanitize(role)
    return labels.ROLE_LABELS.get(fold(clean), clean)


def compose_messages(record: ServiceRecord, pager: PaginationController) -> float:
    messages = ordered_messages(record.messages)
    if not messages:
        return pager.y
    section_title(pager, f"{labels.SECTION_MESSAGES} ({len(messages)})")
    theme = pager.theme
    pad = layout.mm_to_pt(layout.BOX_PADDING_MM)
    head_size = layout.LABEL_FONT_SIZE + 1.0
    body_size = layout.BODY_FONT_SIZE
    x = pager.safe.left
    width = pager.safe.width
    measurer = font_measurer(theme.font_regular, body_size)
    for message in messages:
        sender = display_value(message.sender_name)
        role = _role_label(message.sender_role)
        heading = f"{sender} ({role})" if role else sender
        stamp = format_datetime(message.timestamp)
        lines = wrap(display_value(message.body, placeholder="-"), width - 2.0 * pad, measurer)
        height = 2.0 * pad + layout.line_height(head_size) + geometry.text_block_height(len(lines), body_size)
        if height > pager.safe.height:
            y = pager.ensure_space(layout.line_height(head_size) + 2.0 * pad)
            _message_heading(pager, x, y + pad, width, heading, stamp, head_size, pad)
            pager.advance(layout.line_height(head_size) + pad)
            text_block(pager, message.body, x=x + pad, width=width - 2.0 * pad, tag="message-body")
            pager.advance(layout.mm_to_pt(layout.BLOCK_GAP_MM))
            continue
        y = pager.ensure_space(height)
        pager.draw(RectOp(x, y, width, height, fill=theme.box_fill, stroke=theme.border_color, radius=1.5,
                          tag="message"))
        pager.draw(LineOp(x, y + 1.5, x, y + height - 1.5, color=theme.accent, width=1.4, tag="message-accent"))
        _message_heading(pager, x, y + pad, width, heading, stamp, head_size, pad)
        top = y + pad + layout.line_height(head_size)
        for line in lines:
            pager.draw(TextOp(x + pad, geometry.baseline(top, body_size), line, theme.font_regular, body_size,
                              theme.body_text, tag="message-body"))
            top += layout.line_height(body_size)
        pager.advance(height + layout.mm_to_pt(layout.BLOCK_GAP_MM) * 0.5)
    return pager.y


def _message_heading(pager, x, top, width, heading, stamp, size, pad) -> None:
    theme = pager.theme
    stamp_w = font_measurer(theme.font_regular, size)(stamp)
    clean = ellipsize(heading, width - stamp_w - 3.0 * pad, font_measurer(theme.font_bold, size))
    base = geometry.baseline(top, size)
    pager.draw(TextOp(x + pad, base, clean, theme.font_bold, size, theme.body_text, tag="message-sender"))
    pager.draw(TextOp(x + width - pad, base, stamp, theme.font_regular, size, theme.muted_text, align="right",
                      tag="message-time"))


async def compose_signatures(record: ServiceRecord, pager: PaginationController, images: ImagePipeline) -> float:
    """Client and technician slots; a missing signature leaves a blank ruled line."""
    pair = record.signatures or SignaturePair()
    theme = pager.theme
    sig_w = layout.mm_to_pt(layout.SIGNATURE_WIDTH_MM)
    sig_h = layout.mm_to_pt(layout.SIGNATURE_HEIGHT_MM)
    label_size = layout.LABEL_FONT_SIZE + 1.0
    block_h = sig_h + layout.mm_to_pt(layout.SIGNATURE_LABEL_MM) + layout.mm_to_pt(layout.BLOCK_GAP_MM)

    spacer(pager, layout.SECTION_GAP_MM)
    title_h = layout.mm_to_pt(layout.SECTION_TITLE_HEIGHT_MM) + layout.mm_to_pt(layout.BLOCK_GAP_MM)
    pager.ensure_space(title_h + block_h)
    section_title(pager, labels.SECTION_SIGNATURES)
    y = pager.ensure_space(block_h)
    slots = geometry.columns(pager.safe.left, pager.safe.width, 2, layout.mm_to_pt(layout.COLUMN_GAP_MM))
    names = (
        (pair.client, labels.SIGNATURE_CLIENT, pair.client_name or record.client),
        (pair.technician, labels.SIGNATURE_TECHNICIAN, pair.technician_name or ", ".join(record.technicians)),
    )
    for (slot_x, slot_w), (reference, role_label, signer) in zip(slots, names):
        line_w = min(sig_w, slot_w)
        line_x = geometry.centered(slot_x, slot_w, line_w)
        image = await images.resolve(reference) if reference else None
        if image is not None:
            width, height = fit(image, line_w, sig_h)
            pager.draw(ImageOp(geometry.centered(slot_x, slot_w, width), y + sig_h - height, width, height,
                               payload=image.payload, format=image.format, tag="signature-image"))
        image = None
        ruled_line(pager, line_x, y + sig_h, line_w, tag="signature-line")
        top = y + sig_h + 1.5
        center = slot_x + slot_w * 0.5
        pager.draw(TextOp(center, geometry.baseline(top, label_size), role_label, theme.font_bold, label_size,
                          theme.body_text, align="center", tag="signature-label"))
        signer = sanitize(signer)
        if signer:
            top += layout.line_height(label_size)
            line = ellipsize(signer, slot_w, font_measurer(theme.font_regular, label_size))
            pager.draw(TextOp(center, geometry.baseline(top, label_size), line, theme.font_regular, label_size,
                              theme.muted_text, align="center", tag="signature-name"))
    return pager.advance(block_h)


def _format_rating(value: Optional[float]) -> str:
    if value is None:
        return labels.NOT_INFORMED
    return f"{float(value):.1f} / 5".replace(".", ",")


def compose_feedback(record: ServiceRecord, pager: PaginationController) -> float:
    feedback = record.feedback
    if feedback is None or (feedback.rating is None and not sanitize(feedback.comment)):
        return pager.y
    section_title(pager, labels.SECTION_FEEDBACK)
    info_row(pager, ("Nota", _format_rating(feedback.rating)), ("Data", format_date(feedback.submitted_at)))
    if sanitize(feedback.comment):
        info_box(pager, "Comentário", feedback.comment, tag="text-box")
    return pager.y
