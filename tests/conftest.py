from __future__ import annotations

import base64
import io

import httpx
import pytest
from PIL import Image

from dispatch_core.config.settings import ReportSettings
from dispatch_reports.document import ReportDescriptor
from dispatch_reports.images import ImagePipeline
from dispatch_reports.layout import PAGE_SIZE
from dispatch_reports.pagination import PaginationController
from dispatch_reports.themes import resolve_theme


def png_bytes(size=(400, 300), color=(200, 40, 40), mode="RGB") -> bytes:
    fill = color if mode == "RGB" else color + (128,)
    img = Image.new(mode, size, color=fill)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def data_uri(raw: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64," + base64.b64encode(raw).decode("ascii")


def image_transport(routes=None):
    """MockTransport serving ``routes`` (url -> bytes); anything else is a 404."""
    routes = dict(routes or {})

    def _handler(request: httpx.Request) -> httpx.Response:
        payload = routes.get(str(request.url))
        if payload is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=payload, headers={"Content-Type": "image/png"})

    return httpx.MockTransport(_handler)


def new_pager(theme: str = "primary", *, with_cover: bool = True) -> PaginationController:
    descriptor = ReportDescriptor(kind="test", title="Teste", theme=theme, page_size=PAGE_SIZE)
    return PaginationController(descriptor, resolve_theme(theme), with_cover=with_cover)


@pytest.fixture
def make_png():
    return png_bytes


@pytest.fixture
def make_data_uri():
    return data_uri


@pytest.fixture
def make_transport():
    return image_transport


@pytest.fixture
def make_pager():
    return new_pager


@pytest.fixture
def settings(tmp_path):
    return ReportSettings(output_dir=str(tmp_path), image_timeout_s=2.0, image_slow_s=5.0)


@pytest.fixture
def offline_images():
    return ImagePipeline(transport=image_transport())


@pytest.fixture
def service_record():
    return {
        "id": "7f3c9a12-55aa-4c1e-9d0e-2b6f0c8e4d11",
        "number": "OS-2024/0042",
        "title": "Manutencao preventiva do quadro eletrico",
        "status": "completed",
        "client": "Mercado Bom Preco",
        "address": "Rua das Flores, 120",
        "city": "Campinas",
        "technicians": ["Ana Souza", "Bruno Lima"],
        "description": "Inspecao geral e reaperto de conexoes.",
        "priority": "high",
        "service_type": "Manutencao",
        "created_at": "2024-03-01T09:00:00",
        "due_date": "2024-03-05",
    }


@pytest.fixture
def summary_records():
    def _rec(i, status, client, kind, tech, rating=None):
        rec = {
            "id": f"rec-{i:04d}",
            "number": f"OS-{i}",
            "title": f"Servico {i}",
            "status": status,
            "client": client,
            "service_type": kind,
            "technicians": [tech],
            "created_at": f"2024-03-{i:02d}T08:00:00",
        }
        if rating is not None:
            rec["feedback"] = {"rating": rating}
        return rec

    return [
        _rec(1, "completed", "Cliente A", "Manutencao", "Ana", 5),
        _rec(2, "completed", "Cliente A", "Manutencao", "Ana", 4),
        _rec(3, "completed", "Cliente B", "Instalacao", "Bruno", 3),
        _rec(4, "completed", "Cliente B", "Instalacao", "Ana"),
        _rec(5, "completed", "Cliente C", "Vistoria", "Carla", 5),
        _rec(6, "completed", "Cliente C", "Manutencao", "Bruno"),
        _rec(7, "pending", "Cliente A", "Manutencao", "Carla"),
        _rec(8, "pending", "Cliente D", "Vistoria", "Ana"),
        _rec(9, "pending", "Cliente D", "Instalacao", "Bruno"),
        _rec(10, "cancelled", "Cliente E", "", "Carla"),
    ]
