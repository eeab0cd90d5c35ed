"""Text sanitation, wrapping and display formatting for report text."""

from __future__ import annotations

import datetime as dt
import re
import unicodedata
from typing import Callable, List, Optional

from reportlab.pdfbase.pdfmetrics import stringWidth

from . import labels

Measurer = Callable[[str], float]

# C0/C1 controls except tab and newline, which are normalised separately.
_CONTROL_RE = re.compile("[\x00-\x08\x0b-\x1f\x7f-\x9f]")
_INVISIBLE_RE = re.compile("[\ufeff\u200b-\u200d\u2060\ufffd]")
_NEWLINE_RE = re.compile("\r\n?")

_FONT_FALLBACKS = {
    "\u2713": "v",
    "\u2714": "v",
    "\u2717": "x",
    "\u2192": "->",
    "\u2190": "<-",
    "\u2212": "-",
    "\u2264": "<=",
    "\u2265": ">=",
}

_DATE_FORMATS = ("%d/%m/%Y %H:%M", "%d/%m/%Y", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")


def sanitize(raw: object) -> str:
    if raw is None:
        return ""
    text = raw if isinstance(raw, str) else str(raw)
    text = _NEWLINE_RE.sub("\n", text)
    text = text.replace("\t", " ")
    text = _CONTROL_RE.sub("", text)
    text = _INVISIBLE_RE.sub("", text)
    text = unicodedata.normalize("NFC", text)
    return text.strip()


def fold(value: object) -> str:
    """Lower-case, accent-free key for loose matching ('Técnico' -> 'tecnico')."""
    decomposed = unicodedata.normalize("NFKD", sanitize(value).lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def font_safe(text: str, encoding: str = "cp1252") -> str:
    """Replace characters the standard Type 1 fonts cannot encode."""
    out: List[str] = []
    for ch in str(text or ""):
        try:
            ch.encode(encoding)
        except UnicodeEncodeError:
            out.append(_FONT_FALLBACKS.get(ch, "?"))
            continue
        out.append(ch)
    return "".join(out)


def font_measurer(font_name: str, font_size: float) -> Measurer:
    size = float(font_size)

    def _measure(value: str) -> float:
        return float(stringWidth(font_safe(value), font_name, size))

    return _measure


def _split_long_word(word: str, max_width: float, measurer: Measurer) -> List[str]:
    pieces: List[str] = []
    current = ""
    for ch in word:
        candidate = current + ch
        if current and measurer(candidate) > max_width:
            pieces.append(current)
            current = ch
        else:
            current = candidate
    if current:
        pieces.append(current)
    return pieces or [""]


def wrap(text: object, max_width: float, measurer: Measurer) -> List[str]:
    """Split text into the fewest lines whose measured width fits max_width.

    Explicit newlines start new paragraphs. A word wider than the column is
    broken between characters. Never returns an empty list.
    """
    clean = sanitize(text)
    if not clean:
        return [""]
    limit = max(0.0, float(max_width))
    lines: List[str] = []
    for paragraph in clean.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if measurer(candidate) <= limit:
                current = candidate
                continue
            if current:
                lines.append(current)
                current = ""
            if measurer(word) <= limit:
                current = word
                continue
            pieces = _split_long_word(word, limit, measurer)
            lines.extend(pieces[:-1])
            current = pieces[-1]
        lines.append(current)
    return lines or [""]


def ellipsize(text: object, max_width: float, measurer: Measurer, suffix: str = "...") -> str:
    clean = sanitize(text).replace("\n", " ")
    if measurer(clean) <= max_width:
        return clean
    while clean and measurer(clean + suffix) > max_width:
        clean = clean[:-1]
    return (clean.rstrip() + suffix) if clean else ""


def display_value(value: object, placeholder: str = labels.NOT_INFORMED) -> str:
    if isinstance(value, (list, tuple)):
        value = ", ".join(sanitize(v) for v in value if sanitize(v))
    clean = sanitize(value)
    return clean if clean else placeholder


def parse_datetime(value: object) -> Optional[dt.datetime]:
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    raw = sanitize(value)
    if not raw:
        return None
    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return dt.datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def format_date(value: object) -> str:
    if value is None or not sanitize(value):
        return labels.NOT_INFORMED
    parsed = parse_datetime(value)
    if parsed is None:
        return labels.INVALID_DATE
    return parsed.strftime("%d/%m/%Y")


def format_datetime(value: object) -> str:
    if value is None or not sanitize(value):
        return labels.NOT_INFORMED
    parsed = parse_datetime(value)
    if parsed is None:
        return labels.INVALID_DATE
    return parsed.strftime("%d/%m/%Y %H:%M")
