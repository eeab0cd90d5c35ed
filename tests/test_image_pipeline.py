from __future__ import annotations

import asyncio
import io

import httpx
import pytest
from PIL import Image

from dispatch_core.config.settings import ReportSettings
from dispatch_reports.images import ImagePipeline, RenderableImage, fit, fit_dimensions

BOX_W = 340.0
BOX_H = 255.0


@pytest.mark.parametrize(
    "natural",
    [(400, 300), (300, 400), (1000, 100), (100, 1000), (10, 10), (4000, 3000), (1, 7)],
)
def test_fit_stays_inside_box_and_keeps_ratio(natural):
    w, h = natural
    out_w, out_h = fit_dimensions(w, h, BOX_W, BOX_H)
    assert out_w <= BOX_W + 1e-6
    assert out_h <= BOX_H + 1e-6
    assert out_w / out_h == pytest.approx(w / h, rel=1e-9)
    # One side always touches the box.
    assert out_w == pytest.approx(BOX_W) or out_h == pytest.approx(BOX_H)


def test_fit_wide_image_uses_full_width():
    assert fit_dimensions(1000, 100, BOX_W, BOX_H) == pytest.approx((BOX_W, 34.0))


def test_fit_tall_image_is_clamped_by_height():
    out_w, out_h = fit_dimensions(100, 1000, BOX_W, BOX_H)
    assert out_h == pytest.approx(BOX_H)
    assert out_w == pytest.approx(25.5)


def test_fit_rejects_degenerate_sizes():
    with pytest.raises(ValueError):
        fit_dimensions(0, 10, BOX_W, BOX_H)


def test_fit_accepts_renderable_image():
    img = RenderableImage(payload=b"x", format="JPEG", width=800, height=600)
    assert fit(img, BOX_W, BOX_H) == pytest.approx((BOX_W, BOX_H))
    assert img.aspect_ratio == pytest.approx(4.0 / 3.0)


def test_data_uri_is_decoded_without_network(make_png, make_data_uri):
    pipeline = ImagePipeline()
    image = asyncio.run(pipeline.resolve(make_data_uri(make_png((400, 300)))))
    assert image is not None
    assert image.format == "JPEG"
    assert (image.width, image.height) == (400, 300)


def test_transparent_png_is_kept_as_png(make_png, make_data_uri):
    raw = make_png((64, 32), mode="RGBA")
    image = asyncio.run(ImagePipeline().resolve(make_data_uri(raw)))
    assert image is not None
    assert image.format == "PNG"


def test_large_raster_is_downscaled(make_png):
    pipeline = ImagePipeline(max_side_px=500)
    image = pipeline.decode(make_png((2000, 1000)))
    assert image is not None
    assert max(image.width, image.height) == 500
    with Image.open(io.BytesIO(image.payload)) as check:
        assert check.size == (image.width, image.height)


def test_http_image_is_fetched_through_client(make_png, make_transport):
    url = "https://cdn.example.com/photos/1.png"
    transport = make_transport({url: make_png((320, 240))})

    async def _run():
        async with ImagePipeline(transport=transport) as pipeline:
            return await pipeline.resolve(url)

    image = asyncio.run(_run())
    assert image is not None
    assert (image.width, image.height) == (320, 240)


def test_http_404_yields_none(make_transport):
    async def _run():
        async with ImagePipeline(transport=make_transport()) as pipeline:
            return await pipeline.resolve("https://cdn.example.com/missing.png")

    assert asyncio.run(_run()) is None


def test_network_error_yields_none():
    def _handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    pipeline = ImagePipeline(transport=httpx.MockTransport(_handler))
    assert asyncio.run(pipeline.resolve("https://unreachable.example.com/a.png")) is None


def test_oversized_download_yields_none(make_transport):
    url = "https://cdn.example.com/big.png"
    buf = io.BytesIO()
    Image.effect_noise((256, 256), 64).save(buf, format="PNG")
    assert len(buf.getvalue()) > 4096
    pipeline = ImagePipeline(max_bytes=4096, transport=make_transport({url: buf.getvalue()}))
    assert asyncio.run(pipeline.resolve(url)) is None


def test_undecodable_payload_yields_none(make_transport):
    url = "https://cdn.example.com/not-an-image.png"
    pipeline = ImagePipeline(transport=make_transport({url: b"<html>oops</html>"}))
    assert asyncio.run(pipeline.resolve(url)) is None


@pytest.mark.parametrize("reference", ["", None, "ftp://host/file.png", "/local/path.png", "data:image/png;base64"])
def test_unsupported_references_yield_none(reference):
    assert asyncio.run(ImagePipeline().resolve(reference)) is None


def test_pipeline_from_settings():
    settings = ReportSettings(image_timeout_s=3.0, image_max_bytes=2048, image_max_side_px=640, image_jpeg_quality=70)
    pipeline = ImagePipeline.from_settings(settings)
    assert pipeline.timeout_s == 3.0
    assert pipeline.max_bytes == 2048
    assert pipeline.max_side_px == 640
    assert pipeline.jpeg_quality == 70
