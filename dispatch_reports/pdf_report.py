"""Public API for field-service report generation."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import os
import re
import tempfile
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import httpx

from dispatch_core.audit import audit_span, emit_audit
from dispatch_core.config.settings import ReportSettings
from dispatch_core.logging.logger import report_logger
from . import labels, layout
from .document import ReportDescriptor
from .images import ImagePipeline
from .merge_template import apply_template_underlay
from .models import ReportKind, ServiceRecord, TeamMember, coerce_record, coerce_team
from .pagination import PaginationController
from .primitives import header_bar
from .render import render_pdf
from .sections import (
    compose_checklist,
    compose_cover,
    compose_feedback,
    compose_general_info,
    compose_messages,
    compose_photo_gallery,
    compose_service_cover,
    compose_signatures,
)
from .summary import SUMMARY_COMPOSERS, derive_team, period_label
from .themes import resolve_theme


ProgressCallback = Optional[Callable[[int, int, str], None]]
ReportSource = Union[ServiceRecord, Mapping[str, Any], Sequence[Union[ServiceRecord, Mapping[str, Any]]]]

KIND_THEMES = {
    ReportKind.SINGLE_SERVICE_DETAILED: "corporate",
    ReportKind.EXECUTIVE_SUMMARY: "primary",
    ReportKind.OPERATIONAL_DETAIL: "primary",
    ReportKind.TEAM_PERFORMANCE: "primary",
    ReportKind.SERVICE_TYPE_ANALYSIS: "primary",
}


class ReportGenerationError(RuntimeError):
    """Raised when a report cannot be assembled, rendered or saved."""

    def __init__(self, message: str, *, code: str = "generation_failed", details: Optional[Mapping[str, Any]] = None):
        super().__init__(str(message))
        self.code = str(code or "generation_failed")
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": str(self),
            "details": dict(self.details),
        }


class _Progress:
    def __init__(self, total: int, callback: ProgressCallback):
        self.total = int(total)
        self.done = 0
        self.callback = callback

    def step(self, message: str) -> None:
        self.done += 1
        if callable(self.callback):
            self.callback(self.done, self.total, message)


def _slug(value: object) -> str:
    raw = str(value or "").strip()
    return re.sub(r"[^A-Za-z0-9_.]+", "-", raw).strip("-._")


def normalize_kind(kind: object) -> str:
    key = str(kind or "").strip().lower().replace("_", "-")
    if key not in ReportKind.ALL:
        raise ReportGenerationError(
            f"Unknown report kind: {kind!r}",
            code="unknown_kind",
            details={"kind": str(kind), "supported": list(ReportKind.ALL)},
        )
    return key


def artifact_name(kind: str, record: Union[ServiceRecord, str, None] = None,
                  on: Union[dt.date, dt.datetime, None] = None, ext: str = "pdf") -> str:
    """``<kind>-<number or id prefix>-<YYYY-MM-DD>.<ext>``; summaries omit the record part."""
    kind_key = normalize_kind(kind)
    stamp = on or dt.date.today()
    if isinstance(stamp, dt.datetime):
        stamp = stamp.date()
    parts = [kind_key]
    if kind_key in ReportKind.SINGLE_RECORD and record is not None:
        reference = record.reference if isinstance(record, ServiceRecord) else str(record)
        ref = _slug(reference)
        if ref:
            parts.append(ref)
    parts.append(stamp.isoformat())
    return "-".join(parts) + f".{ext.lstrip('.')}"


def _records(source: object, kind: str) -> List[ServiceRecord]:
    if isinstance(source, (ServiceRecord, Mapping)):
        items: Iterable[object] = [source]
    elif isinstance(source, Sequence) and not isinstance(source, (str, bytes)):
        items = list(source)
    else:
        raise ReportGenerationError(f"Unsupported report source: {type(source).__name__}", code="invalid_source")
    try:
        records = [coerce_record(item) for item in items]
    except TypeError as exc:
        raise ReportGenerationError(str(exc), code="invalid_source") from exc
    if kind in ReportKind.SINGLE_RECORD and len(records) != 1:
        raise ReportGenerationError(
            f"Report kind {kind!r} needs exactly one service record, got {len(records)}.",
            code="invalid_source",
            details={"records": len(records)},
        )
    return records


async def _compose_single(record: ServiceRecord, pager: PaginationController, images: ImagePipeline,
                          generated_on: str, progress: _Progress) -> str:
    title, subtitle = labels.KIND_TITLES[ReportKind.SINGLE_SERVICE_DETAILED]
    progress.step("Capa")
    compose_service_cover(record, pager, title=title, subtitle=subtitle, generated_on=generated_on)
    pager.start_page()
    progress.step("Informações gerais")
    compose_general_info(record, pager)
    progress.step("Checklist técnico")
    compose_checklist(record, pager)
    progress.step("Registro fotográfico")
    await compose_photo_gallery(record, pager, images)
    progress.step("Mensagens")
    compose_messages(record, pager)
    progress.step("Avaliação do cliente")
    compose_feedback(record, pager)
    progress.step("Assinaturas")
    await compose_signatures(record, pager, images)
    return f"{title} | {record.reference_label}" if record.reference_label else title


def _compose_summary(kind: str, records: Sequence[ServiceRecord], team: Sequence[TeamMember],
                     pager: PaginationController, generated_on: str, progress: _Progress) -> str:
    title, subtitle = labels.KIND_TITLES[kind]
    progress.step("Capa")
    period = period_label(records)
    compose_cover(
        pager,
        title=title,
        subtitle=subtitle,
        headline=f"{len(records)} serviço(s) analisado(s)",
        details=[period] if period else (),
        generated_on=generated_on,
    )
    pager.start_page()
    header_bar(pager, title, period or subtitle)
    progress.step("Tabelas de resumo")
    SUMMARY_COMPOSERS[kind](records, pager, team)
    return title


async def build_report_async(
    source: ReportSource,
    kind: str,
    *,
    team: Optional[Iterable[Union[TeamMember, Mapping[str, Any]]]] = None,
    theme: Optional[str] = None,
    images: Optional[ImagePipeline] = None,
    generated_at: Optional[dt.datetime] = None,
    progress_cb: ProgressCallback = None,
) -> ReportDescriptor:
    """Lay out a complete report (chrome included) without writing any file."""
    kind_key = normalize_kind(kind)
    records = _records(source, kind_key)
    theme_obj = resolve_theme(theme or KIND_THEMES[kind_key])
    generated_at = generated_at or dt.datetime.now()
    generated_on = generated_at.strftime("%d/%m/%Y %H:%M")
    single = kind_key in ReportKind.SINGLE_RECORD

    descriptor = ReportDescriptor(
        kind=kind_key,
        title=labels.KIND_TITLES[kind_key][0],
        theme=theme_obj.name,
        page_size=layout.PAGE_SIZE,
        metadata={
            "generated_at": generated_at.isoformat(timespec="seconds"),
            "reference": records[0].reference if single else "",
            "records": str(len(records)),
        },
    )
    pager = PaginationController(descriptor, theme_obj)
    progress = _Progress(8 if single else 3, progress_cb)

    if single:
        if images is None:
            async with ImagePipeline() as own_images:
                header = await _compose_single(records[0], pager, own_images, generated_on, progress)
        else:
            header = await _compose_single(records[0], pager, images, generated_on, progress)
    else:
        members = coerce_team(team) if team is not None else derive_team(records)
        header = _compose_summary(kind_key, records, members, pager, generated_on, progress)

    progress.step("Cabeçalhos e rodapés")
    pager.apply_chrome(header, generated_on)
    return descriptor


def _placeholder_captions(descriptor: ReportDescriptor) -> List[str]:
    out: List[str] = []
    for page in descriptor.pages:
        caption = ""
        for op in page.content:
            tag = getattr(op, "tag", "")
            if tag == "photo-caption":
                caption = getattr(op, "text", "")
            elif tag == "photo-placeholder":
                out.append(caption)
    return out


def _remove_if_exists(path: Optional[str]) -> None:
    if path and os.path.exists(path):
        os.remove(path)


async def generate_report_async(
    source: ReportSource,
    kind: str,
    *,
    output_dir: Optional[str] = None,
    team: Optional[Iterable[Union[TeamMember, Mapping[str, Any]]]] = None,
    theme: Optional[str] = None,
    template_pdf_path: Optional[str] = None,
    settings: Optional[ReportSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    progress_cb: ProgressCallback = None,
    generated_at: Optional[dt.datetime] = None,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, object]:
    """
    Build, render and save one report artifact.
    The PDF appears at its final path only after everything succeeded.
    """
    settings = settings or ReportSettings.from_env()
    log = logger or report_logger(settings)
    kind_key = normalize_kind(kind)
    t_start = time.perf_counter()
    generated_at = generated_at or dt.datetime.now()
    out_dir = os.path.abspath(output_dir or settings.output_dir or ".")
    template = template_pdf_path if template_pdf_path is not None else (settings.template_pdf or None)
    theme_name = theme or settings.theme or None
    emit_audit(
        "REPORT_GENERATE_START",
        logger=log,
        kind=kind_key,
        output_dir=out_dir,
        theme=theme_name or KIND_THEMES[kind_key],
        template=template or "",
    )
    tmp_path: Optional[str] = None
    merged_path: Optional[str] = None
    try:
        if template and not os.path.isfile(template):
            raise ReportGenerationError(f"Template PDF not found: {template}", code="template_failed",
                                        details={"template": template})
        try:
            async with ImagePipeline.from_settings(settings, transport=transport, logger=log) as images:
                descriptor = await build_report_async(
                    source,
                    kind_key,
                    team=team,
                    theme=theme_name,
                    images=images,
                    generated_at=generated_at,
                    progress_cb=progress_cb,
                )
            image_stats = images.tracer.summary()
        except ReportGenerationError:
            raise
        except Exception as exc:
            raise ReportGenerationError(f"Report assembly failed: {exc}", code="assembly_failed") from exc

        name = artifact_name(kind_key, descriptor.metadata.get("reference") or None, on=generated_at)
        final_path = os.path.join(out_dir, name)
        try:
            os.makedirs(out_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".dispatch_report_", suffix=".pdf", dir=out_dir)
            os.close(fd)
        except OSError as exc:
            raise ReportGenerationError(f"Output directory unusable: {exc}", code="emit_failed",
                                        details={"output_dir": out_dir}) from exc

        missing = _placeholder_captions(descriptor)
        with audit_span("REPORT_RENDER", logger=log, kind=kind_key, pages=descriptor.page_count) as span:
            try:
                render_pdf(descriptor, tmp_path)
            except Exception as exc:
                raise ReportGenerationError(f"PDF rendering failed: {exc}", code="render_failed") from exc
            span["bytes"] = os.path.getsize(tmp_path)
            span["placeholders"] = len(missing)
            span["images"] = image_stats

        if template:
            try:
                fd, merged_path = tempfile.mkstemp(prefix=".dispatch_report_merged_", suffix=".pdf", dir=out_dir)
                os.close(fd)
            except OSError as exc:
                raise ReportGenerationError(f"Could not stage merged report: {exc}", code="emit_failed",
                                            details={"output_dir": out_dir}) from exc
            try:
                apply_template_underlay(tmp_path, template, merged_path)
            except Exception as exc:
                raise ReportGenerationError(f"Template merge failed: {exc}", code="template_failed",
                                            details={"template": template}) from exc
            try:
                os.replace(merged_path, tmp_path)
            except OSError as exc:
                raise ReportGenerationError(f"Could not save merged report: {exc}", code="emit_failed",
                                            details={"path": tmp_path}) from exc
            merged_path = None

        try:
            os.replace(tmp_path, final_path)
        except OSError as exc:
            raise ReportGenerationError(f"Could not save report: {exc}", code="emit_failed",
                                        details={"path": final_path}) from exc
        tmp_path = None
    except ReportGenerationError as exc:
        emit_audit("REPORT_GENERATE_FAILED", logger=log, kind=kind_key, **exc.to_dict())
        log.error("Report generation failed (%s): %s", exc.code, exc)
        raise
    finally:
        _remove_if_exists(merged_path)
        _remove_if_exists(tmp_path)

    for caption in missing:
        emit_audit("REPORT_IMAGE_PLACEHOLDER", logger=log, kind=kind_key, caption=caption)
    warnings = [f"{caption}: {labels.IMAGE_UNAVAILABLE.lower()}" for caption in missing]
    elapsed = time.perf_counter() - t_start
    result: Dict[str, object] = {
        "artifact_name": name,
        "output_pdf_path": final_path,
        "kind": kind_key,
        "theme": descriptor.theme,
        "pages": descriptor.page_count,
        "content_pages": len(descriptor.content_pages),
        "placeholders": len(missing),
        "warnings": warnings,
        "images": image_stats,
        "elapsed_s": round(elapsed, 3),
    }
    emit_audit("REPORT_GENERATE_DONE", logger=log, **result)
    log.info("Report %s saved: %s (%d pages, %d placeholders)", kind_key, final_path,
             descriptor.page_count, len(missing))
    return result


def generate_report(source: ReportSource, kind: str, **kwargs) -> Dict[str, object]:
    """Synchronous wrapper around :func:`generate_report_async`."""
    return asyncio.run(generate_report_async(source, kind, **kwargs))
