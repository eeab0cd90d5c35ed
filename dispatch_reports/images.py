"""Photo and signature acquisition for report pages.

References are data URIs or HTTP(S) URLs. Every failure path (network, HTTP
status, oversized body, undecodable raster) resolves to ``None`` so the caller
can draw a placeholder; nothing here raises for a bad image and nothing
retries.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx
from PIL import Image as PILImage
from PIL import ImageOps

from dispatch_core.config.settings import ReportSettings
from dispatch_core.perf import PLACEHOLDER, RESOLVED, PerfTracer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderableImage:
    payload: bytes
    format: str
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return float(self.width) / float(self.height)


def fit_dimensions(width: float, height: float, max_width: float, max_height: float) -> Tuple[float, float]:
    """Scale (width, height) to max_width, then clamp to max_height keeping the ratio."""
    w = float(width)
    h = float(height)
    if w <= 0.0 or h <= 0.0:
        raise ValueError(f"Invalid natural image size: {width}x{height}")
    ratio = w / h
    out_w = float(max_width)
    out_h = out_w / ratio
    if out_h > float(max_height):
        out_h = float(max_height)
        out_w = out_h * ratio
    return out_w, out_h


def fit(image: RenderableImage, max_width: float, max_height: float) -> Tuple[float, float]:
    return fit_dimensions(image.width, image.height, max_width, max_height)


def _describe(reference: str) -> str:
    if reference[:5].lower() == "data:":
        header = reference.split(",", 1)[0]
        return f"{header[:48]} ({len(reference)} chars)"
    return reference if len(reference) <= 120 else reference[:117] + "..."


class ImagePipeline:
    """Resolve image references into normalised, embeddable rasters.

    Use as ``async with ImagePipeline(...) as images`` to share one HTTP client
    across a report; outside the context each fetch opens its own client.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 15.0,
        max_bytes: int = 15_000_000,
        max_side_px: int = 2000,
        jpeg_quality: int = 85,
        follow_redirects: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        tracer: Optional[PerfTracer] = None,
    ):
        self.timeout_s = float(timeout_s)
        self.max_bytes = int(max_bytes)
        self.max_side_px = int(max_side_px)
        self.jpeg_quality = int(jpeg_quality)
        self.follow_redirects = bool(follow_redirects)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.tracer = tracer or PerfTracer(threshold_s=1.0)

    @classmethod
    def from_settings(
        cls,
        settings: ReportSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "ImagePipeline":
        return cls(
            timeout_s=settings.image_timeout_s,
            max_bytes=settings.image_max_bytes,
            max_side_px=settings.image_max_side_px,
            jpeg_quality=settings.image_jpeg_quality,
            follow_redirects=settings.image_follow_redirects,
            transport=transport,
            tracer=PerfTracer(logger=logger, threshold_s=settings.image_slow_s),
        )

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_s),
            follow_redirects=self.follow_redirects,
            transport=self._transport,
        )

    async def __aenter__(self) -> "ImagePipeline":
        self._client = self._new_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def resolve(self, reference: object) -> Optional[RenderableImage]:
        ref = str(reference or "").strip()
        if not ref:
            return None
        t0 = self.tracer.start()
        image: Optional[RenderableImage] = None
        try:
            image = await self._resolve(ref)
            return image
        finally:
            self.tracer.record(_describe(ref), t0, RESOLVED if image is not None else PLACEHOLDER)

    async def _resolve(self, ref: str) -> Optional[RenderableImage]:
        if ref[:5].lower() == "data:":
            raw = self._decode_data_uri(ref)
        elif ref.lower().startswith(("http://", "https://")):
            raw = await self._fetch(ref)
        else:
            log.warning("Unsupported image reference: %s", _describe(ref))
            return None
        if raw is None:
            return None
        image = self.decode(raw)
        if image is None:
            log.warning("Image payload could not be decoded: %s", _describe(ref))
        return image

    def _decode_data_uri(self, ref: str) -> Optional[bytes]:
        header, sep, data = ref.partition(",")
        if not sep:
            log.warning("Malformed data URI: %s", _describe(ref))
            return None
        try:
            if ";base64" in header.lower():
                return base64.b64decode("".join(data.split()), validate=False)
            return urllib.parse.unquote_to_bytes(data)
        except (binascii.Error, ValueError) as exc:
            log.warning("Invalid data URI payload (%s): %s", exc, _describe(ref))
            return None

    async def _read_limited(self, client: httpx.AsyncClient, url: str) -> Optional[bytes]:
        async with client.stream("GET", url) as response:
            if not response.is_success:
                log.warning("Image fetch returned HTTP %s: %s", response.status_code, _describe(url))
                return None
            chunks = []
            size = 0
            async for chunk in response.aiter_bytes():
                size += len(chunk)
                if size > self.max_bytes:
                    log.warning("Image larger than %d bytes skipped: %s", self.max_bytes, _describe(url))
                    return None
                chunks.append(chunk)
        return b"".join(chunks)

    async def _fetch(self, url: str) -> Optional[bytes]:
        try:
            if self._client is not None:
                return await self._read_limited(self._client, url)
            async with self._new_client() as client:
                return await self._read_limited(client, url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning("Image fetch failed (%s: %s): %s", type(exc).__name__, exc, _describe(url))
            return None

    def decode(self, raw: bytes) -> Optional[RenderableImage]:
        """Decode, orient, downscale and re-encode one raster payload."""
        if not raw:
            return None
        try:
            with PILImage.open(io.BytesIO(raw)) as src:
                src.load()
                img = ImageOps.exif_transpose(src)
                if max(img.size) > self.max_side_px:
                    img.thumbnail((self.max_side_px, self.max_side_px))
                has_alpha = img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)
                buf = io.BytesIO()
                if has_alpha:
                    out = img.convert("RGBA")
                    out.save(buf, format="PNG", optimize=True)
                    fmt = "PNG"
                else:
                    out = img.convert("RGB")
                    out.save(buf, format="JPEG", quality=self.jpeg_quality, optimize=True)
                    fmt = "JPEG"
                width, height = out.size
        except (OSError, ValueError, PILImage.DecompressionBombError) as exc:
            log.debug("Raster decode failed: %s", exc)
            return None
        if width <= 0 or height <= 0:
            return None
        return RenderableImage(payload=buf.getvalue(), format=fmt, width=int(width), height=int(height))
