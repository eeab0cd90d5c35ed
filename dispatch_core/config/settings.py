from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict


def _env_bool(name: str, default: bool) -> bool:
    raw = str(os.getenv(name, "")).strip().lower()
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    return bool(default)


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = str(os.getenv(name, "")).strip().replace(",", ".")
    if not raw:
        return float(default)
    try:
        value = float(raw)
    except ValueError:
        return float(default)
    return max(float(minimum), value)


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return int(default)
    try:
        value = int(float(raw))
    except ValueError:
        return int(default)
    return max(int(minimum), value)


def _env_str(name: str, default: str = "") -> str:
    return str(os.getenv(name, default) or default).strip()


@dataclass(frozen=True)
class ReportSettings:
    output_dir: str = "."
    theme: str = ""
    template_pdf: str = ""
    image_timeout_s: float = 15.0
    image_max_bytes: int = 15_000_000
    image_max_side_px: int = 2000
    image_jpeg_quality: int = 85
    image_slow_s: float = 1.0
    image_follow_redirects: bool = True
    log_file: str = ""
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ReportSettings":
        return cls(
            output_dir=_env_str("DISPATCH_REPORT_OUTPUT_DIR", ".") or ".",
            theme=_env_str("DISPATCH_REPORT_THEME"),
            template_pdf=_env_str("DISPATCH_REPORT_TEMPLATE_PDF"),
            image_timeout_s=_env_float("DISPATCH_IMAGE_TIMEOUT_S", 15.0, minimum=0.5),
            image_max_bytes=_env_int("DISPATCH_IMAGE_MAX_BYTES", 15_000_000, minimum=1024),
            image_max_side_px=_env_int("DISPATCH_IMAGE_MAX_SIDE_PX", 2000, minimum=64),
            image_jpeg_quality=min(95, _env_int("DISPATCH_IMAGE_JPEG_QUALITY", 85, minimum=30)),
            image_slow_s=_env_float("DISPATCH_IMAGE_SLOW_S", 1.0),
            image_follow_redirects=_env_bool("DISPATCH_IMAGE_FOLLOW_REDIRECTS", True),
            log_file=_env_str("DISPATCH_LOG_FILE"),
            log_level=_env_str("DISPATCH_LOG_LEVEL", "INFO").upper() or "INFO",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_dir": self.output_dir,
            "theme": self.theme,
            "template_pdf": self.template_pdf,
            "image_timeout_s": float(self.image_timeout_s),
            "image_max_bytes": int(self.image_max_bytes),
            "image_max_side_px": int(self.image_max_side_px),
            "image_jpeg_quality": int(self.image_jpeg_quality),
            "image_slow_s": float(self.image_slow_s),
            "image_follow_redirects": bool(self.image_follow_redirects),
            "log_file": self.log_file,
            "log_level": self.log_level,
        }


def load_settings() -> ReportSettings:
    return ReportSettings.from_env()
