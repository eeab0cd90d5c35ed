from __future__ import annotations

from .document import ReportDescriptor
from .images import ImagePipeline, RenderableImage, fit_dimensions
from .models import ReportKind, ServiceRecord, TeamMember
from .pdf_report import (
    ReportGenerationError,
    artifact_name,
    build_report_async,
    generate_report,
    generate_report_async,
)
from .text import sanitize
from .themes import Theme, available_themes, resolve_theme

__all__ = [
    "ReportKind",
    "ReportDescriptor",
    "ReportGenerationError",
    "ServiceRecord",
    "TeamMember",
    "Theme",
    "ImagePipeline",
    "RenderableImage",
    "artifact_name",
    "available_themes",
    "build_report_async",
    "fit_dimensions",
    "generate_report",
    "generate_report_async",
    "resolve_theme",
    "sanitize",
]
